# poolservice/customers/utils.py

"""Helpers for the customers blueprint."""

import re

from sqlalchemy import or_

from poolservice.customers.schemas import source_label
from poolservice.formatters import to_iso_utc
from poolservice.models import Customer, CustomerTag

NON_DIGITS = re.compile(r'\D')


def extract_digits(phone: str) -> str:
    return NON_DIGITS.sub('', phone or '')


def normalize_phone(phone: str) -> str:
    """E.164 for US numbers (``+15551234567``); other input is only trimmed."""
    if not phone:
        return ''
    digits = extract_digits(phone)
    if len(digits) == 10:
        return f'+1{digits}'
    if len(digits) == 11 and digits.startswith('1'):
        return f'+{digits}'
    return phone.strip()


def phones_match(a: str, b: str) -> bool:
    if not a or not b:
        return False
    return normalize_phone(a) == normalize_phone(b)


def format_phone(phone: str) -> str:
    """``+15551234567`` -> ``(555) 123-4567``; anything else is returned as is."""
    if not phone:
        return ''
    digits = extract_digits(phone)
    if len(digits) == 11 and digits.startswith('1'):
        digits = digits[1:]
    if len(digits) != 10:
        return phone
    return f'({digits[:3]}) {digits[3:6]}-{digits[6:]}'


def search_digits(phone: str) -> str:
    digits = extract_digits(phone)
    if len(digits) == 11 and digits.startswith('1'):
        return digits[1:]
    return digits


def find_by_phone(phone: str, exclude_id: str | None = None):
    query = Customer.query.filter(
        Customer.phone == normalize_phone(phone),
        Customer.deleted_at.is_(None),
    )
    if exclude_id:
        query = query.filter(Customer.id != exclude_id)
    return query.first()


def search_customers(params):
    """Apply a validated ListCustomers to the customer query."""
    query = Customer.query
    if not params.include_deleted:
        query = query.filter(Customer.deleted_at.is_(None))
    if params.source:
        query = query.filter(Customer.source == params.source)
    if params.tags:
        query = query.filter(Customer.tags.any(CustomerTag.id.in_(params.tags)))
    if params.search:
        term = f'%{params.search}%'
        clauses = [Customer.name.ilike(term), Customer.email.ilike(term)]
        digits = search_digits(params.search)
        if len(digits) >= 3:
            clauses.append(Customer.phone.like(f'%{digits}%'))
        query = query.filter(or_(*clauses))
    total = query.count()
    rows = (
        query.order_by(Customer.created_at.desc())
        .offset(params.offset)
        .limit(params.limit)
        .all()
    )
    return rows, total


def serialize_customer(c: Customer) -> dict:
    return {
        'id'           : c.id,
        'name'         : c.name,
        'phone'        : c.phone,
        'phone_display': format_phone(c.phone),
        'email'        : c.email,
        'source'       : c.source,
        'source_label' : source_label(c.source),
        'created_at'   : to_iso_utc(c.created_at) if c.created_at else None,
        'deleted'      : c.is_deleted,
        'tags'         : [{'id': t.id, 'name': t.name, 'color': t.color} for t in c.tags],
    }
