# poolservice/customers/routes.py

import logging

from flask import Blueprint, jsonify, request
from poolservice import db
from poolservice.customers.schemas import CreateCustomer, ListCustomers, PhoneCheck, UpdateCustomer
from poolservice.customers.utils import (
    find_by_phone,
    normalize_phone,
    search_customers,
    serialize_customer,
)
from poolservice.errors import DuplicatePhone, NotFound, ensure_valid
from poolservice.models import Customer, CustomerTag, utcnow
from poolservice.properties.utils import serialize_property
from poolservice.tags.schemas import TagLink
from poolservice.validation import Change, apply_updates, validate
from poolservice.utils import get_or_404, request_data

log = logging.getLogger(__name__)

bp = Blueprint('customers', __name__)


def _active_customer(customer_id):
    c = get_or_404(Customer, customer_id, 'Customer')
    if c.is_deleted:
        raise NotFound('Customer')
    return c


@bp.route('/', methods=['GET'])
def list_customers():
    params = ensure_valid(validate(ListCustomers, request.args.to_dict()))
    rows, total = search_customers(params)
    return jsonify(
        customers=[serialize_customer(c) for c in rows],
        total=total,
        limit=params.limit,
        offset=params.offset,
    )


@bp.route('/', methods=['POST'])
def create_customer():
    data = ensure_valid(validate(CreateCustomer, request_data()))
    existing = find_by_phone(data.phone)
    if existing:
        raise DuplicatePhone(existing.id)

    c = Customer(
        name   = data.name,
        phone  = normalize_phone(data.phone),
        email  = data.email,
        source = data.source,
    )
    db.session.add(c)
    db.session.commit()
    log.info('Created customer %s', c.id)
    return jsonify(customer=serialize_customer(c)), 201


@bp.route('/check-phone')
def check_phone():
    params = ensure_valid(validate(PhoneCheck, request.args.to_dict()))
    existing = find_by_phone(params.phone, exclude_id=params.exclude_customer_id)
    return jsonify(
        available=existing is None,
        existing_customer_id=existing.id if existing else None,
    )


@bp.route('/<customer_id>')
def view_customer(customer_id):
    c = _active_customer(customer_id)
    body = serialize_customer(c)
    body['properties'] = [serialize_property(p, with_pools=True) for p in c.properties]
    body['estimate_count'] = len(c.estimates)
    body['note_count'] = len(c.notes)
    body['communication_count'] = len(c.communications)
    return jsonify(customer=body)


@bp.route('/<customer_id>', methods=['PATCH', 'POST'])
def update_customer(customer_id):
    c = _active_customer(customer_id)
    payload = dict(request_data(), id=customer_id)
    data = ensure_valid(validate(UpdateCustomer, payload))
    updates = data.updates()

    phone = updates['phone']
    if phone.change is Change.SET:
        existing = find_by_phone(phone.value, exclude_id=c.id)
        if existing:
            raise DuplicatePhone(existing.id)
        updates['phone'] = phone._replace(value=normalize_phone(phone.value))

    touched = apply_updates(c, updates)
    db.session.commit()
    log.info('Updated customer %s (%s)', c.id, ', '.join(touched) or 'no changes')
    return jsonify(customer=serialize_customer(c))


@bp.route('/<customer_id>/delete', methods=['POST'])
def delete_customer(customer_id):
    """Soft delete; the record stays for estimates and history."""
    c = _active_customer(customer_id)
    c.deleted_at = utcnow()
    db.session.commit()
    log.info('Deleted customer %s', c.id)
    return jsonify(success=True)


@bp.route('/<customer_id>/tags', methods=['POST'])
def add_tag(customer_id):
    c = _active_customer(customer_id)
    data = ensure_valid(validate(TagLink, request_data()))
    tag = get_or_404(CustomerTag, data.tag_id, 'Tag')
    if tag not in c.tags:
        c.tags.append(tag)
        db.session.commit()
        log.info('Tagged customer %s with %s', c.id, tag.name)
    return jsonify(customer=serialize_customer(c))


@bp.route('/<customer_id>/tags/<tag_id>/delete', methods=['POST'])
def remove_tag(customer_id, tag_id):
    c = _active_customer(customer_id)
    tag = get_or_404(CustomerTag, tag_id, 'Tag')
    if tag in c.tags:
        c.tags.remove(tag)
        db.session.commit()
    return jsonify(customer=serialize_customer(c))
