# poolservice/properties/schemas.py

import re
from typing import Annotated, Optional

from pydantic import AfterValidator
from pydantic_core import PydanticCustomError

from poolservice.validation import Blank, Schema, UpdateSchema, identifier, text

US_STATES = (
    'AL', 'AK', 'AZ', 'AR', 'CA', 'CO', 'CT', 'DE', 'FL', 'GA',
    'HI', 'ID', 'IL', 'IN', 'IA', 'KS', 'KY', 'LA', 'ME', 'MD',
    'MA', 'MI', 'MN', 'MS', 'MO', 'MT', 'NE', 'NV', 'NH', 'NJ',
    'NM', 'NY', 'NC', 'ND', 'OH', 'OK', 'OR', 'PA', 'RI', 'SC',
    'SD', 'TN', 'TX', 'UT', 'VT', 'VA', 'WA', 'WV', 'WI', 'WY',
    'DC', 'PR', 'VI', 'GU', 'AS', 'MP',
)

ZIP_CODE = re.compile(r'^\d{5}(-\d{4})?$')


def _check_state(value: str) -> str:
    value = value.strip().upper()
    if len(value) != 2:
        raise PydanticCustomError('state', 'Please select a state')
    if value not in US_STATES:
        raise PydanticCustomError('state', 'Please select a valid US state')
    return value


def _check_zip(value: str) -> str:
    value = value.strip()
    if len(value) < 5:
        raise PydanticCustomError('zip_code', 'ZIP code must be at least 5 digits')
    if len(value) > 10:
        raise PydanticCustomError('zip_code', 'ZIP code must be 10 characters or less')
    if not ZIP_CODE.match(value):
        raise PydanticCustomError(
            'zip_code',
            'ZIP code must be 5 digits (e.g., 12345) or 9 digits (e.g., 12345-6789)',
        )
    return value


AddressLine1 = Annotated[str, text(200, 'Street address must be 200 characters or less',
                                   min_length=1, too_short='Street address is required')]
AddressLine2 = Annotated[Optional[str], Blank,
                         text(100, 'Address line 2 must be 100 characters or less')]
City = Annotated[str, text(100, 'City must be 100 characters or less',
                           min_length=1, too_short='City is required')]
State = Annotated[str, AfterValidator(_check_state)]
ZipCode = Annotated[str, AfterValidator(_check_zip)]
GateCode = Annotated[Optional[str], Blank, text(20, 'Gate code must be 20 characters or less')]
AccessNotes = Annotated[Optional[str], Blank,
                        text(500, 'Access notes must be 500 characters or less')]


class CreateProperty(Schema):
    customer_id: Annotated[str, identifier('customer')]
    address_line1: AddressLine1
    address_line2: AddressLine2 = None
    city: City
    state: State
    zip_code: ZipCode
    gate_code: GateCode = None
    access_notes: AccessNotes = None


class UpdateProperty(UpdateSchema):
    address_line1: AddressLine1 = None
    address_line2: AddressLine2 = None
    city: City = None
    state: State = None
    zip_code: ZipCode = None
    gate_code: GateCode = None
    access_notes: AccessNotes = None
