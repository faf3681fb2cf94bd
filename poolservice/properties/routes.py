# poolservice/properties/routes.py

import logging

from flask import Blueprint, jsonify, request
from poolservice import db
from poolservice.errors import NotFound, ensure_valid
from poolservice.models import CalendarEvent, Customer, Property
from poolservice.pools.utils import detach_pools
from poolservice.properties.schemas import CreateProperty, UpdateProperty
from poolservice.properties.utils import serialize_property
from poolservice.utils import get_or_404, request_data
from poolservice.validation import apply_updates, validate

log = logging.getLogger(__name__)

bp = Blueprint('properties', __name__)


@bp.route('/')
def list_properties():
    """Properties for ``?customer_id=``."""
    customer_id = request.args.get('customer_id', '')
    customer = get_or_404(Customer, customer_id, 'Customer')
    props = (
        Property.query.filter_by(customer_id=customer.id)
        .order_by(Property.created_at)
        .all()
    )
    return jsonify(properties=[serialize_property(p) for p in props])


@bp.route('/', methods=['POST'])
def create_property():
    data = ensure_valid(validate(CreateProperty, request_data()))
    customer = get_or_404(Customer, data.customer_id, 'Customer')
    if customer.is_deleted:
        raise NotFound('Customer')

    p = Property(**data.model_dump())
    db.session.add(p)
    db.session.commit()
    log.info('Created property %s for customer %s', p.id, customer.id)
    return jsonify(property=serialize_property(p)), 201


@bp.route('/<property_id>')
def view_property(property_id):
    p = get_or_404(Property, property_id, 'Property')
    return jsonify(property=serialize_property(p, with_pools=True))


@bp.route('/<property_id>', methods=['PATCH', 'POST'])
def update_property(property_id):
    p = get_or_404(Property, property_id, 'Property')
    data = ensure_valid(validate(UpdateProperty, request_data()))
    apply_updates(p, data.updates())
    db.session.commit()
    return jsonify(property=serialize_property(p))


@bp.route('/<property_id>/delete', methods=['POST'])
def delete_property(property_id):
    p = get_or_404(Property, property_id, 'Property')
    detach_pools(pool.id for pool in p.pools)
    CalendarEvent.query.filter_by(property_id=p.id).update(
        {CalendarEvent.property_id: None}, synchronize_session=False
    )
    db.session.delete(p)
    db.session.commit()
    log.info('Deleted property %s', property_id)
    return jsonify(success=True)
