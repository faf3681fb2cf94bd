# poolservice/estimates/schemas.py

import uuid
from typing import Annotated, Optional

from pydantic import AfterValidator, model_validator
from pydantic_core import PydanticCustomError

from poolservice.estimates.status import ESTIMATE_STATUSES
from poolservice.validation import (
    Blank, IsoDate, Schema, UpdateSchema, choice, identifier, no_bool, number_range, text,
)

MAX_QUANTITY = 9999
MAX_UNIT_PRICE_CENTS = 99_999_999


def _at_least_one(items: list) -> list:
    if not items:
        raise PydanticCustomError('line_items', 'At least one line item is required')
    return items


Quantity = Annotated[float, no_bool('Quantity must be a number'),
                     number_range(0, MAX_QUANTITY, 'Quantity must be greater than 0',
                                  'Quantity must be at most 9999', exclusive_min=True)]
UnitPriceCents = Annotated[int, no_bool('Unit price must be a whole number of cents'),
                           number_range(0, MAX_UNIT_PRICE_CENTS,
                                        'Unit price cannot be negative',
                                        'Unit price is too large')]
TaxRate = Annotated[float, no_bool('Tax rate must be a number'),
                    number_range(0, 1, 'Tax rate cannot be negative',
                                 'Tax rate cannot exceed 100%')]
Notes = Annotated[Optional[str], Blank, text(5000, 'Notes must be 5000 characters or less')]
PoolId = Annotated[Optional[str], Blank, identifier('pool')]


class LineItem(Schema):
    id: Annotated[Optional[str], Blank, identifier('line item')] = None
    description: Annotated[str, text(500, 'Description must be 500 characters or less',
                                     min_length=1, too_short='Description is required')]
    quantity: Quantity
    unit_price_cents: UnitPriceCents

    @model_validator(mode='after')
    def assign_id(self):
        if self.id is None:
            self.id = str(uuid.uuid4())
        return self


LineItems = Annotated[list[LineItem], AfterValidator(_at_least_one)]


class CreateEstimate(Schema):
    customer_id: Annotated[str, identifier('customer')]
    pool_id: PoolId = None
    line_items: LineItems
    tax_rate: TaxRate = 0.0
    notes: Notes = None
    valid_until: IsoDate = None


class UpdateEstimate(UpdateSchema):
    pool_id: PoolId = None
    line_items: LineItems = None
    tax_rate: TaxRate = None
    notes: Notes = None
    valid_until: IsoDate = None


class UpdateEstimateStatus(Schema):
    status: Annotated[str, choice(ESTIMATE_STATUSES, 'Invalid status')]


class ListEstimates(Schema):
    status: Annotated[Optional[str], Blank,
                      choice(ESTIMATE_STATUSES, 'Invalid status')] = None
    customer_id: Annotated[Optional[str], Blank, identifier('customer')] = None
    limit: Annotated[int, number_range(1, 100, 'Limit must be at least 1',
                                       'Limit must be at most 100')] = 25
    offset: Annotated[int, number_range(0, 10 ** 9, 'Offset cannot be negative',
                                        'Offset is too large')] = 0
