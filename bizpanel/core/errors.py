"""
Centralized error handling for the panel API.

Views raise AppError (or let DRF raise its own exceptions); the exception
handler turns both into the {"success": false, "error", "code", "details"}
envelope so clients can branch on ``success`` instead of HTTP status.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger('bizpanel.core.errors')

STATUS_MAP = {
    'UNAUTHORIZED': status.HTTP_401_UNAUTHORIZED,
    'FORBIDDEN': status.HTTP_403_FORBIDDEN,
    'NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'VALIDATION_ERROR': status.HTTP_400_BAD_REQUEST,
    'BAD_REQUEST': status.HTTP_400_BAD_REQUEST,
    'CONFLICT': status.HTTP_409_CONFLICT,
    'RATE_LIMIT': status.HTTP_429_TOO_MANY_REQUESTS,
    'SERVER_ERROR': status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class AppError(Exception):
    """Operational error that maps onto a failure envelope"""

    def __init__(self, code, message, details=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = STATUS_MAP[code]
        self.details = list(details) if details else []

    @classmethod
    def unauthorized(cls, message='Session not found. Please sign in again.'):
        return cls('UNAUTHORIZED', message)

    @classmethod
    def forbidden(cls, message='You are not allowed to perform this action.'):
        return cls('FORBIDDEN', message)

    @classmethod
    def not_found(cls, resource='Resource'):
        return cls('NOT_FOUND', f'{resource} not found.')

    @classmethod
    def validation_error(cls, message='Validation error', details=None):
        return cls('VALIDATION_ERROR', message, details)

    @classmethod
    def bad_request(cls, message):
        return cls('BAD_REQUEST', message)

    @classmethod
    def conflict(cls, message, details=None):
        return cls('CONFLICT', message, details)

    @classmethod
    def server_error(cls, message='A server error occurred.'):
        return cls('SERVER_ERROR', message)

    def to_body(self):
        body = {
            'success': False,
            'error': self.message,
            'code': self.code,
        }
        if self.details:
            body['details'] = self.details
        return body

    def to_response(self):
        return Response(self.to_body(), status=self.status_code)


def flatten_errors(errors, prefix=''):
    """Flatten DRF serializer errors into 'field: message' strings"""
    details = []
    if isinstance(errors, dict):
        for field, value in errors.items():
            name = f'{prefix}.{field}' if prefix else str(field)
            details.extend(flatten_errors(value, name))
    elif isinstance(errors, list):
        for index, value in enumerate(errors):
            if isinstance(value, (dict, list)):
                details.extend(flatten_errors(value, f'{prefix}.{index}' if prefix else str(index)))
            else:
                details.append(f'{prefix}: {value}' if prefix and prefix != 'non_field_errors' else str(value))
    else:
        details.append(f'{prefix}: {errors}' if prefix and prefix != 'non_field_errors' else str(errors))
    return details


def _as_app_error(exc):
    if isinstance(exc, AppError):
        return exc
    if isinstance(exc, Http404):
        return AppError.not_found()
    if isinstance(exc, PermissionDenied):
        return AppError.forbidden()
    if isinstance(exc, exceptions.ValidationError):
        return AppError.validation_error(details=flatten_errors(exc.detail))
    if isinstance(exc, exceptions.AuthenticationFailed):
        detail = exc.detail.get('detail') if isinstance(exc.detail, dict) else exc.detail
        return AppError.unauthorized(str(detail)) if detail else AppError.unauthorized()
    if isinstance(exc, exceptions.NotAuthenticated):
        return AppError.unauthorized()
    if isinstance(exc, exceptions.PermissionDenied):
        return AppError.forbidden(str(exc.detail))
    if isinstance(exc, exceptions.NotFound):
        return AppError.not_found()
    if isinstance(exc, exceptions.Throttled):
        return AppError('RATE_LIMIT', 'Too many requests. Please wait a moment.')
    if isinstance(exc, exceptions.APIException):
        code = 'BAD_REQUEST' if exc.status_code < 500 else 'SERVER_ERROR'
        error = AppError(code, str(exc.detail))
        error.status_code = exc.status_code
        return error
    return None


def envelope_exception_handler(exc, context):
    """DRF exception handler producing the failure envelope"""
    error = _as_app_error(exc)
    view = context.get('view')
    view_name = view.__class__.__name__ if view is not None else 'API'

    if error is None:
        logger.error(f"[{view_name}] Unexpected error: {exc}", exc_info=exc)
        error = AppError.server_error()
    elif error.status_code >= 500:
        logger.error(f"[{view_name}] {error.code}: {error.message}")
    else:
        logger.warning(f"[{view_name}] {error.code}: {error.message}")

    response = error.to_response()
    auth_header = getattr(exc, 'auth_header', None)
    if auth_header:
        response['WWW-Authenticate'] = auth_header
    return response
