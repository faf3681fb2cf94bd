# poolservice/notes/routes.py

import logging

from flask import Blueprint, jsonify, request
from poolservice import db
from poolservice.errors import NotFound, ensure_valid
from poolservice.formatters import format_full_timestamp, format_relative_time, to_iso_utc
from poolservice.models import Customer, Note
from poolservice.notes.schemas import CreateNote, UpdateNote
from poolservice.utils import get_or_404, request_data
from poolservice.validation import validate

log = logging.getLogger(__name__)

bp = Blueprint('notes', __name__)


def serialize_note(n: Note) -> dict:
    return {
        'id'         : n.id,
        'customer_id': n.customer_id,
        'content'    : n.content,
        'created_at' : to_iso_utc(n.created_at),
        'updated_at' : to_iso_utc(n.updated_at),
        'created'    : format_relative_time(n.created_at),
        'timestamp'  : format_full_timestamp(n.created_at),
    }


@bp.route('/')
def list_notes():
    """Notes for ``?customer_id=``, newest first."""
    customer = get_or_404(Customer, request.args.get('customer_id', ''), 'Customer')
    return jsonify(notes=[serialize_note(n) for n in customer.notes])


@bp.route('/', methods=['POST'])
def create_note():
    data = ensure_valid(validate(CreateNote, request_data()))
    customer = get_or_404(Customer, data.customer_id, 'Customer')
    if customer.is_deleted:
        raise NotFound('Customer')
    n = Note(customer_id=customer.id, content=data.content)
    db.session.add(n)
    db.session.commit()
    log.info('Added note %s for customer %s', n.id, customer.id)
    return jsonify(note=serialize_note(n)), 201


@bp.route('/<note_id>', methods=['PATCH', 'POST'])
def update_note(note_id):
    n = get_or_404(Note, note_id, 'Note')
    data = ensure_valid(validate(UpdateNote, request_data()))
    n.content = data.content
    db.session.commit()
    return jsonify(note=serialize_note(n))


@bp.route('/<note_id>/delete', methods=['POST'])
def delete_note(note_id):
    n = get_or_404(Note, note_id, 'Note')
    db.session.delete(n)
    db.session.commit()
    return jsonify(success=True)
