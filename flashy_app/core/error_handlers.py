"""
Errors raised by Flashy services and the JSON envelope they are rendered in.

Services raise a ``FlashyError`` subclass; the handlers registered here turn
it into ``{"success": false, "message", "code", "details"}`` with the
matching HTTP status.
"""

from typing import Any, Dict, Optional

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException


class FlashyError(Exception):
    """Base exception class for Flashy."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(FlashyError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(FlashyError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class AuthorizationError(FlashyError):
    """Access denied."""

    def __init__(self, message: str = 'Access denied'):
        super().__init__(
            message=message,
            code='FORBIDDEN',
            status_code=403
        )


class SubscriptionLimitError(FlashyError):
    """The user's plan does not allow the operation."""

    def __init__(self, message: str, limit: str, value: Any = None):
        super().__init__(
            message=message,
            code='SUBSCRIPTION_LIMIT',
            status_code=403,
            details={'limit': limit, 'value': value}
        )


class ConflictError(FlashyError):
    """Operation is not valid in the current state."""

    def __init__(self, message: str = 'Conflict', state: str = None):
        super().__init__(
            message=message,
            code='CONFLICT',
            status_code=409,
            details={'state': state} if state else None
        )


class UpstreamError(FlashyError):
    """A remote resource could not be fetched."""

    def __init__(self, message: str = 'Upstream request failed', url: str = None):
        super().__init__(
            message=message,
            code='UPSTREAM_ERROR',
            status_code=502,
            details={'url': url} if url else None
        )


def error_response(
    message: str,
    code: str = 'ERROR',
    status_code: int = 400,
    details: Dict = None
) -> tuple:
    """Create a standardized error response."""
    response = {
        'success': False,
        'message': message,
        'code': code
    }
    if details:
        response['details'] = details

    return jsonify(response), status_code


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def _wants_json() -> bool:
    return request.path.startswith('/api/')


def register_error_handlers(app):
    """Register JSON error handlers for ``FlashyError`` and HTTP errors under ``/api``."""

    @app.errorhandler(FlashyError)
    def handle_flashy_error(error):
        log = current_app.logger.error if error.status_code >= 500 else current_app.logger.info
        log("%s on %s: %s", error.code, request.path, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        if not _wants_json():
            return error
        code = (error.name or 'error').upper().replace(' ', '_')
        return error_response(error.description or error.name, code, error.code or 500)

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error on %s', request.path)
        if _wants_json():
            return error_response('Internal server error', 'SERVER_ERROR', 500)
        return error
