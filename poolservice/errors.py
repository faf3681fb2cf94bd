# poolservice/errors.py

"""HTTP-facing errors and the JSON error handlers."""

import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

log = logging.getLogger(__name__)


class AppError(Exception):
    code = 'internal_error'
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {'error': self.code, 'message': self.message}
        if self.details:
            body['details'] = self.details
        return body


class ValidationFailed(AppError):
    code = 'validation_error'
    status_code = 400

    def __init__(self, errors, message: str = 'Validation failed'):
        super().__init__(message)
        # list of FieldError
        self.errors = list(errors)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body['errors'] = [{'field': e.field, 'message': e.message} for e in self.errors]
        return body


class NotFound(AppError):
    code = 'not_found'
    status_code = 404

    def __init__(self, resource: str = 'Resource'):
        super().__init__(f'{resource} not found')


class Conflict(AppError):
    code = 'conflict'
    status_code = 409


class DuplicatePhone(Conflict):
    code = 'duplicate_phone'

    def __init__(self, existing_customer_id: str | None = None):
        super().__init__(
            'A customer with this phone number already exists',
            {'existing_customer_id': existing_customer_id},
        )


class InvalidTransition(AppError):
    code = 'invalid_transition'
    status_code = 422

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Invalid status transition from '{current}' to '{target}'",
            {'current': current, 'target': target},
        )


def ensure_valid(result):
    """Unwrap a ValidationResult or raise ValidationFailed."""
    if not result.ok:
        raise ValidationFailed(result.errors)
    return result.value


def register_error_handlers(app) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error='not_found', message='Resource not found'), 404

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify(error='method_not_allowed', message='Method not allowed'), 405

    @app.errorhandler(Exception)
    def server_error(err):
        if isinstance(err, HTTPException):
            return jsonify(error='http_error', message=err.description), err.code
        log.exception('Unhandled error')
        return jsonify(error='internal_error', message='An unexpected error occurred'), 500
