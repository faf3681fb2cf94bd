# poolservice/validation.py

"""Shared validation machinery for create/update schemas.

Schemas are pydantic models.  Callers never see a raised
``pydantic.ValidationError``: :func:`validate` turns every failure into a
list of ``FieldError(field, message)`` pairs inside a
:class:`ValidationResult`.

Partial updates need three outcomes per field, so update schemas expose
:meth:`UpdateSchema.updates`, which tags each field as ``SET`` (new value),
``CLEARED`` (sent as empty, store null) or ``UNCHANGED`` (omitted).
"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, ClassVar, NamedTuple, Optional

from email_validator import EmailNotValidError, validate_email as _validate_email
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, ValidationError
from pydantic_core import PydanticCustomError

PHONE_SEPARATORS = re.compile(r'[\s\-().+]')
PHONE_DIGITS = re.compile(r'^\d{10,}$')
ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

MAX_DIMENSION_FT = Decimal('999.99')
MAX_VOLUME_GALLONS = 9_999_999


class FieldError(NamedTuple):
    field: str
    message: str


@dataclass
class ValidationResult:
    value: Any = None
    errors: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_dicts(self) -> list:
        return [{'field': e.field, 'message': e.message} for e in self.errors]

    @classmethod
    def failure(cls, field_name: str, message: str) -> 'ValidationResult':
        return cls(errors=[FieldError(field_name, message)])


def _error_field(err: dict) -> str:
    if err['loc']:
        return '.'.join(str(part) for part in err['loc'])
    # cross-field checks name their field in the error context
    return (err.get('ctx') or {}).get('field', '_schema')


def validate(schema, data) -> ValidationResult:
    """Validate ``data`` against ``schema`` without raising."""
    try:
        value = schema.model_validate({} if data is None else data)
    except ValidationError as exc:
        return ValidationResult(errors=[
            FieldError(_error_field(err), err['msg']) for err in exc.errors()
        ])
    return ValidationResult(value=value)


# --- partial updates -------------------------------------------------------

class Change(Enum):
    SET = 'set'
    CLEARED = 'cleared'
    UNCHANGED = 'unchanged'


class FieldUpdate(NamedTuple):
    change: Change
    value: Any = None


UNCHANGED = FieldUpdate(Change.UNCHANGED)
CLEARED = FieldUpdate(Change.CLEARED)


class Schema(BaseModel):
    # NaN and infinity never reach the money math
    model_config = ConfigDict(extra='ignore', allow_inf_nan=False)


class UpdateSchema(Schema):
    """Base for partial updates.

    Non-clearable fields are typed without ``Optional`` but default to
    ``None``: omitting them is fine, sending ``null`` is an error.
    """

    IDENTITY_FIELDS: ClassVar[tuple] = ()

    def updates(self) -> dict:
        out = {}
        for name in type(self).model_fields:
            if name in self.IDENTITY_FIELDS:
                continue
            if name not in self.model_fields_set:
                out[name] = UNCHANGED
            elif getattr(self, name) is None:
                out[name] = CLEARED
            else:
                out[name] = FieldUpdate(Change.SET, getattr(self, name))
        return out

    def changes(self) -> dict:
        return {k: u for k, u in self.updates().items() if u.change is not Change.UNCHANGED}


def apply_updates(obj, updates: dict, attrs: Optional[dict] = None) -> list:
    """Write SET/CLEARED fields onto ``obj``; returns the attribute names touched."""
    attrs = attrs or {}
    touched = []
    for name, update in updates.items():
        if update.change is Change.UNCHANGED:
            continue
        attr = attrs.get(name, name)
        setattr(obj, attr, update.value if update.change is Change.SET else None)
        touched.append(attr)
    return touched


# --- reusable field types --------------------------------------------------

def _fail(code: str, message: str, **ctx):
    raise PydanticCustomError(code, message, ctx or None)


def blank_to_none(value):
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


Blank = BeforeValidator(blank_to_none)


def text(max_length: int, too_long: str, min_length: int = 0, too_short: str = '') -> AfterValidator:
    """Trim, then enforce length bounds.  ``None`` passes through."""

    def check(value):
        if value is None:
            return None
        value = value.strip()
        if len(value) < min_length:
            _fail('too_short', too_short)
        if len(value) > max_length:
            _fail('too_long', too_long)
        return value

    return AfterValidator(check)


def choice(options, message: str, normalize=None) -> AfterValidator:
    def check(value):
        if value is None:
            return None
        if normalize:
            value = normalize(value)
        if value not in options:
            _fail('invalid_choice', message)
        return value

    return AfterValidator(check)


def no_bool(message: str) -> BeforeValidator:
    """Reject JSON booleans before lax int/float coercion turns them into 1 or 0."""

    def check(value):
        if isinstance(value, bool):
            _fail('not_a_number', message)
        return value

    return BeforeValidator(check)


def number_range(minimum, maximum, too_small: str, too_large: str,
                 exclusive_min: bool = False) -> AfterValidator:
    def check(value):
        if value is None:
            return None
        if value < minimum or (exclusive_min and value == minimum):
            _fail('too_small', too_small)
        if value > maximum:
            _fail('too_large', too_large)
        return value

    return AfterValidator(check)


def check_phone(value: str) -> str:
    if len(value) < 10:
        _fail('phone_length', 'Phone number must be at least 10 characters')
    if len(value) > 20:
        _fail('phone_length', 'Phone number must be at most 20 characters')
    if not PHONE_DIGITS.match(PHONE_SEPARATORS.sub('', value)):
        _fail('phone', 'Please enter a valid phone number')
    return value


def check_email(value):
    if value is None:
        return None
    try:
        return _validate_email(value, check_deliverability=False).normalized
    except EmailNotValidError:
        _fail('email', 'Please enter a valid email address')


def parse_dimension(value):
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        _fail('number', 'Must be a number')
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        _fail('number', 'Must be a number')
    if not number.is_finite():
        _fail('number', 'Must be a number')
    if number <= 0:
        _fail('positive', 'Must be a positive number')
    if number > MAX_DIMENSION_FT:
        _fail('too_large', 'Value is too large')
    return float(number)


def parse_volume(value):
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, bool):
        _fail('number', 'Must be a number')
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        _fail('number', 'Must be a number')
    if not number.is_finite():
        _fail('number', 'Must be a number')
    if number != number.to_integral_value():
        _fail('whole_number', 'Volume must be a whole number')
    if number <= 0:
        _fail('positive', 'Must be a positive number')
    if number > MAX_VOLUME_GALLONS:
        _fail('too_large', 'Value is too large')
    return int(number)


def parse_iso_date(value):
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not ISO_DATE.match(value.strip()):
        _fail('date_format', 'Invalid date format')
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        _fail('date_format', 'Invalid date format')


def parse_datetime(value):
    """ISO 8601 instant; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        raw = value.strip()
        if raw.endswith('Z'):
            raw = raw[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            _fail('datetime_format', 'Invalid datetime format')
    else:
        _fail('datetime_format', 'Invalid datetime format')
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def identifier(label: str) -> AfterValidator:
    def check(value):
        if value is None:
            return None
        try:
            return str(uuid.UUID(value))
        except (ValueError, AttributeError, TypeError):
            _fail('identifier', f'Invalid {label} ID')

    return AfterValidator(check)


Phone = Annotated[str, AfterValidator(check_phone)]
Email = Annotated[Optional[str], Blank, AfterValidator(check_email)]
Dimension = Annotated[Optional[float], BeforeValidator(parse_dimension)]
Volume = Annotated[Optional[int], BeforeValidator(parse_volume)]
IsoDate = Annotated[Optional[date], BeforeValidator(parse_iso_date)]
Instant = Annotated[datetime, BeforeValidator(parse_datetime)]
