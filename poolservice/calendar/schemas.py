# poolservice/calendar/schemas.py

from datetime import date
from types import MappingProxyType
from typing import Annotated, Optional

from pydantic import AfterValidator, BeforeValidator, model_validator
from pydantic_core import PydanticCustomError

from poolservice.validation import (
    Blank, Instant, Schema, UpdateSchema, choice, identifier, no_bool, number_range, parse_iso_date,
    text,
)

EVENT_TYPES = {
    'consultation': 'Consultation',
    'estimate_visit': 'Estimate Visit',
    'follow_up': 'Follow Up',
    'other': 'Other',
}

SCHEDULED = 'scheduled'
COMPLETED = 'completed'
CANCELED = 'canceled'

EVENT_STATUSES = {
    SCHEDULED: 'Scheduled',
    COMPLETED: 'Completed',
    CANCELED: 'Canceled',
}

# completed is terminal; a canceled event can be put back on the schedule
EVENT_TRANSITIONS = MappingProxyType({
    SCHEDULED: frozenset({COMPLETED, CANCELED}),
    COMPLETED: frozenset(),
    CANCELED: frozenset({SCHEDULED}),
})


def is_valid_event_transition(current: str, target: str) -> bool:
    return target in EVENT_TRANSITIONS.get(current, frozenset())


def _check_url(value):
    if value is None:
        return None
    if not value.startswith(('http://', 'https://')) or len(value) > 500:
        raise PydanticCustomError('url', 'Invalid URL format')
    return value


def end_after_start(start, end) -> None:
    if start is not None and end is not None and end <= start:
        raise PydanticCustomError(
            'end_before_start', 'End time must be after start time', {'field': 'end_datetime'},
        )


PropertyId = Annotated[Optional[str], Blank, identifier('property')]
PoolId = Annotated[Optional[str], Blank, identifier('pool')]

Title = Annotated[str, text(200, 'Title must be 200 characters or less',
                            min_length=1, too_short='Title is required')]
Description = Annotated[Optional[str], Blank,
                        text(2000, 'Description must be 2000 characters or less')]
EventType = Annotated[str, choice(EVENT_TYPES, 'Invalid event type')]
LocationUrl = Annotated[Optional[str], Blank, AfterValidator(_check_url)]
Version = Annotated[int, no_bool('Version must be a positive integer'),
                    number_range(1, 2 ** 31, 'Version must be a positive integer',
                                 'Version must be a positive integer')]


class CreateEvent(Schema):
    customer_id: Annotated[str, identifier('customer')]
    property_id: PropertyId = None
    pool_id: PoolId = None
    title: Title
    description: Description = None
    event_type: EventType
    start_datetime: Instant
    end_datetime: Instant
    all_day: bool = False
    location_url: LocationUrl = None

    @model_validator(mode='after')
    def check_range(self):
        end_after_start(self.start_datetime, self.end_datetime)
        return self


class UpdateEvent(UpdateSchema):
    IDENTITY_FIELDS = ('version',)

    version: Version
    property_id: PropertyId = None
    pool_id: PoolId = None
    title: Title = None
    description: Description = None
    event_type: EventType = None
    start_datetime: Instant = None
    end_datetime: Instant = None
    all_day: bool = None
    location_url: LocationUrl = None

    @model_validator(mode='after')
    def check_range(self):
        end_after_start(self.start_datetime, self.end_datetime)
        return self


class RescheduleEvent(Schema):
    version: Version
    start_datetime: Instant
    end_datetime: Instant
    all_day: Optional[bool] = None

    @model_validator(mode='after')
    def check_range(self):
        end_after_start(self.start_datetime, self.end_datetime)
        return self


class VersionOnly(Schema):
    version: Version


LocalDate = Annotated[Optional[date], BeforeValidator(parse_iso_date)]


class EventRange(Schema):
    """Either explicit UTC ``start``/``end`` or local view dates."""
    start: Optional[Instant] = None
    end: Optional[Instant] = None
    from_date: LocalDate = None
    to_date: LocalDate = None
    customer_id: Annotated[Optional[str], Blank, identifier('customer')] = None
    status: Annotated[Optional[str], Blank,
                      choice(EVENT_STATUSES, 'Invalid event status')] = None
    event_type: Annotated[Optional[str], Blank,
                          choice(EVENT_TYPES, 'Invalid event type')] = None

    @model_validator(mode='after')
    def check_bounds(self):
        if (self.start is None) != (self.end is None):
            raise PydanticCustomError(
                'range', 'Both start and end are required', {'field': 'end'},
            )
        if (self.from_date is None) != (self.to_date is None):
            raise PydanticCustomError(
                'range', 'Both from_date and to_date are required', {'field': 'to_date'},
            )
        if self.start is None and self.from_date is None:
            raise PydanticCustomError(
                'range', 'A date range is required', {'field': 'start'},
            )
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise PydanticCustomError(
                'range', 'to_date must not be before from_date', {'field': 'to_date'},
            )
        return self
