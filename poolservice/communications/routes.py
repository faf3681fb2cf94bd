# poolservice/communications/routes.py

"""Manual log of calls, texts and emails with a customer."""

import logging

from flask import Blueprint, jsonify, request
from sqlalchemy import func
from poolservice import db
from poolservice.communications.schemas import (
    COMMUNICATION_TYPES,
    DIRECTIONS,
    CreateCommunication,
    ListCommunications,
    UpdateCommunication,
    direction_label,
    type_label,
)
from poolservice.errors import NotFound, ensure_valid
from poolservice.formatters import format_datetime, format_relative_time, to_iso_utc
from poolservice.models import Communication, Customer
from poolservice.utils import get_or_404, naive_utc, request_data
from poolservice.validation import Change, apply_updates, validate

log = logging.getLogger(__name__)

bp = Blueprint('communications', __name__)


def serialize_communication(c: Communication) -> dict:
    return {
        'id'             : c.id,
        'customer_id'    : c.customer_id,
        'type'           : c.type,
        'type_label'     : type_label(c.type),
        'direction'      : c.direction,
        'direction_label': direction_label(c.direction),
        'summary'        : c.summary,
        'occurred_at'    : to_iso_utc(c.occurred_at),
        'when'           : format_datetime(c.occurred_at, 'medium_with_time'),
        'occurred'       : format_relative_time(c.occurred_at),
        'created_at'     : to_iso_utc(c.created_at) if c.created_at else None,
    }


@bp.route('/')
def list_communications():
    """Newest first, filtered by type, direction, summary text and time window."""
    params = ensure_valid(validate(ListCommunications, request.args.to_dict()))
    customer = get_or_404(Customer, params.customer_id, 'Customer')

    query = Communication.query.filter_by(customer_id=customer.id)
    if params.type:
        query = query.filter_by(type=params.type)
    if params.direction:
        query = query.filter_by(direction=params.direction)
    if params.search:
        query = query.filter(Communication.summary.ilike(f'%{params.search}%'))
    if params.date_from:
        query = query.filter(Communication.occurred_at >= naive_utc(params.date_from))
    if params.date_to:
        query = query.filter(Communication.occurred_at <= naive_utc(params.date_to))

    total = query.count()
    rows = (
        query.order_by(Communication.occurred_at.desc())
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return jsonify(
        communications=[serialize_communication(c) for c in rows],
        total=total,
        has_more=params.offset + len(rows) < total,
    )


@bp.route('/stats')
def communication_stats():
    """Counts per type and per direction for ``?customer_id=``."""
    customer = get_or_404(Customer, request.args.get('customer_id', ''), 'Customer')
    by_type = dict.fromkeys(COMMUNICATION_TYPES, 0)
    by_direction = dict.fromkeys(DIRECTIONS, 0)
    rows = (
        db.session.query(Communication.type, Communication.direction, func.count())
        .filter(Communication.customer_id == customer.id)
        .group_by(Communication.type, Communication.direction)
        .all()
    )
    for kind, direction, count in rows:
        by_type[kind] = by_type.get(kind, 0) + count
        by_direction[direction] = by_direction.get(direction, 0) + count
    return jsonify(
        total=sum(by_type.values()),
        by_type=by_type,
        by_direction=by_direction,
    )


@bp.route('/', methods=['POST'])
def create_communication():
    data = ensure_valid(validate(CreateCommunication, request_data()))
    customer = get_or_404(Customer, data.customer_id, 'Customer')
    if customer.is_deleted:
        raise NotFound('Customer')

    c = Communication(
        customer_id = customer.id,
        type        = data.type,
        direction   = data.direction,
        summary     = data.summary,
        occurred_at = naive_utc(data.occurred_at),
    )
    db.session.add(c)
    db.session.commit()
    log.info('Logged %s %s %s for customer %s', c.direction, c.type, c.id, customer.id)
    return jsonify(communication=serialize_communication(c)), 201


@bp.route('/<communication_id>')
def view_communication(communication_id):
    c = get_or_404(Communication, communication_id, 'Communication')
    return jsonify(communication=serialize_communication(c))


@bp.route('/<communication_id>', methods=['PATCH', 'POST'])
def update_communication(communication_id):
    c = get_or_404(Communication, communication_id, 'Communication')
    data = ensure_valid(validate(UpdateCommunication, request_data()))
    updates = data.updates()
    when = updates['occurred_at']
    if when.change is Change.SET:
        updates['occurred_at'] = when._replace(value=naive_utc(when.value))
    apply_updates(c, updates)
    db.session.commit()
    return jsonify(communication=serialize_communication(c))


@bp.route('/<communication_id>/delete', methods=['POST'])
def delete_communication(communication_id):
    c = get_or_404(Communication, communication_id, 'Communication')
    db.session.delete(c)
    db.session.commit()
    log.info('Deleted communication %s', communication_id)
    return jsonify(success=True)
