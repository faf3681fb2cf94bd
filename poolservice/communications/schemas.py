# poolservice/communications/schemas.py

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BeforeValidator, model_validator
from pydantic_core import PydanticCustomError

from poolservice.validation import (
    Blank, Schema, UpdateSchema, blank_to_none, choice, identifier, no_bool, number_range,
    parse_datetime, text,
)

COMMUNICATION_TYPES = {
    'call': 'Phone Call',
    'text': 'Text Message',
    'email': 'Email',
}

DIRECTIONS = {
    'inbound': 'Inbound',
    'outbound': 'Outbound',
}


def _occurred_at(value):
    try:
        return parse_datetime(value)
    except PydanticCustomError:
        raise PydanticCustomError('datetime_format', 'Please enter a valid date and time')


def _optional_time(value):
    value = blank_to_none(value)
    return None if value is None else _occurred_at(value)


CommunicationType = Annotated[str, choice(COMMUNICATION_TYPES,
                                          'Please select a communication type')]
Direction = Annotated[str, choice(DIRECTIONS, 'Please select a direction')]
Summary = Annotated[str, text(5000, 'Summary must be 5000 characters or less',
                              min_length=1, too_short='Summary is required')]
OccurredAt = Annotated[datetime, BeforeValidator(_occurred_at)]
TimeBound = Annotated[Optional[datetime], BeforeValidator(_optional_time)]


class CreateCommunication(Schema):
    customer_id: Annotated[str, identifier('customer')]
    type: CommunicationType
    direction: Direction
    summary: Summary
    occurred_at: OccurredAt


class UpdateCommunication(UpdateSchema):
    type: CommunicationType = None
    direction: Direction = None
    summary: Summary = None
    occurred_at: OccurredAt = None


class ListCommunications(Schema):
    customer_id: Annotated[str, identifier('customer')]
    type: Annotated[Optional[str], Blank,
                    choice(COMMUNICATION_TYPES, 'Please select a communication type')] = None
    direction: Annotated[Optional[str], Blank,
                         choice(DIRECTIONS, 'Please select a direction')] = None
    search: Annotated[Optional[str], Blank, text(200, 'Search query is too long')] = None
    date_from: TimeBound = None
    date_to: TimeBound = None
    limit: Annotated[int, no_bool('Limit must be a number'),
                     number_range(1, 100, 'Limit must be at least 1',
                                  'Limit must be at most 100')] = 25
    offset: Annotated[int, no_bool('Offset must be a number'),
                      number_range(0, 10 ** 9, 'Offset cannot be negative',
                                   'Offset is too large')] = 0

    @model_validator(mode='after')
    def check_dates(self):
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise PydanticCustomError(
                'range', 'date_to must not be before date_from', {'field': 'date_to'},
            )
        return self


def type_label(value: str) -> str:
    return COMMUNICATION_TYPES.get(value, value)


def direction_label(value: str) -> str:
    return DIRECTIONS.get(value, value)
