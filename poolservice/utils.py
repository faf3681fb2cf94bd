# poolservice/utils.py

"""Request helpers shared by the blueprints."""

from datetime import timezone

from flask import request

from poolservice import db
from poolservice.errors import NotFound, ValidationFailed
from poolservice.validation import FieldError


def request_data() -> dict:
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationFailed([FieldError('_schema', 'Request body must be an object')])
    return data


def get_or_404(model, object_id, resource: str):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFound(resource)
    return obj


def naive_utc(value):
    """Aware datetime -> naive UTC, the form datetimes are stored in."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)
