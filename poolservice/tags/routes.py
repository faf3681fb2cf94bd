# poolservice/tags/routes.py

"""Catalog of customer tags."""

import logging

from flask import Blueprint, jsonify
from poolservice import db
from poolservice.errors import Conflict, ensure_valid
from poolservice.models import CustomerTag
from poolservice.tags.schemas import DEFAULT_TAG_COLOR, CreateTag
from poolservice.utils import get_or_404, request_data
from poolservice.validation import validate

log = logging.getLogger(__name__)

bp = Blueprint('tags', __name__)


def serialize_tag(t: CustomerTag, with_count: bool = False) -> dict:
    out = {
        'id'   : t.id,
        'name' : t.name,
        'color': t.color,
    }
    if with_count:
        out['customer_count'] = len([c for c in t.customers if not c.is_deleted])
    return out


@bp.route('/')
def list_tags():
    tags = CustomerTag.query.order_by(CustomerTag.name).all()
    return jsonify(tags=[serialize_tag(t, with_count=True) for t in tags])


@bp.route('/', methods=['POST'])
def create_tag():
    data = ensure_valid(validate(CreateTag, request_data()))
    if CustomerTag.query.filter(db.func.lower(CustomerTag.name) == data.name.lower()).first():
        raise Conflict('A tag with this name already exists', {'name': data.name})
    t = CustomerTag(name=data.name, color=data.color or DEFAULT_TAG_COLOR)
    db.session.add(t)
    db.session.commit()
    log.info('Created tag %s (%s)', t.name, t.id)
    return jsonify(tag=serialize_tag(t)), 201


@bp.route('/<tag_id>/delete', methods=['POST'])
def delete_tag(tag_id):
    """Removing a tag also unlinks it from every customer."""
    t = get_or_404(CustomerTag, tag_id, 'Tag')
    db.session.delete(t)
    db.session.commit()
    log.info('Deleted tag %s', t.name)
    return jsonify(success=True)
