# poolservice/customers/schemas.py

import uuid
from typing import Annotated, Optional

from pydantic import BeforeValidator
from pydantic_core import PydanticCustomError

from poolservice.validation import (
    Blank, Email, Phone, Schema, UpdateSchema, blank_to_none, identifier, number_range, text,
)

LEAD_SOURCES = (
    'referral',
    'website',
    'phone',
    'walk_in',
    'google',
    'facebook',
    'yelp',
    'other',
)

LEAD_SOURCE_LABELS = {
    'referral': 'Referral',
    'website': 'Website',
    'phone': 'Phone',
    'walk_in': 'Walk-in',
    'google': 'Google',
    'facebook': 'Facebook',
    'yelp': 'Yelp',
    'other': 'Other',
}

Name = Annotated[str, text(200, 'Name must be at most 200 characters',
                           min_length=1, too_short='Name is required')]
# one of LEAD_SOURCES or free text
Source = Annotated[Optional[str], Blank,
                   text(100, 'Source must be at most 100 characters')]
CustomerId = Annotated[str, identifier('customer')]


def _tag_ids(value):
    """``"id1,id2"`` or a list of ids; any one of them matches."""
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, str):
        value = [part.strip() for part in value.split(',') if part.strip()]
    try:
        return [str(uuid.UUID(str(v))) for v in value]
    except (ValueError, TypeError):
        raise PydanticCustomError('identifier', 'Invalid tag ID')


TagIds = Annotated[Optional[list[str]], BeforeValidator(_tag_ids)]


class CreateCustomer(Schema):
    phone: Phone
    name: Name
    email: Email = None
    source: Source = None


class UpdateCustomer(UpdateSchema):
    IDENTITY_FIELDS = ('id',)

    id: CustomerId
    phone: Phone = None
    name: Name = None
    email: Email = None
    source: Source = None


class ListCustomers(Schema):
    limit: Annotated[int, number_range(1, 100, 'Limit must be at least 1',
                                       'Limit must be at most 100')] = 25
    offset: Annotated[int, number_range(0, 10 ** 9, 'Offset cannot be negative',
                                        'Offset is too large')] = 0
    search: Annotated[Optional[str], Blank,
                      text(100, 'Search query is too long')] = None
    source: Annotated[Optional[str], Blank,
                      text(100, 'Source must be at most 100 characters')] = None
    include_deleted: bool = False
    tags: TagIds = None


class PhoneCheck(Schema):
    phone: Annotated[str, text(20, 'Phone number must be at most 20 characters',
                               min_length=10,
                               too_short='Phone number must be at least 10 characters')]
    exclude_customer_id: Annotated[Optional[str], Blank, identifier('customer')] = None


def source_label(source: Optional[str]) -> str:
    if not source:
        return ''
    return LEAD_SOURCE_LABELS.get(source, source)
