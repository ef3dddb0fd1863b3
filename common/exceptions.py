"""
DRF exception handler producing the API error envelope:

    {"success": false, "message": "...", "code": "...", "errors": {...}}
"""
import logging
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import (
    ValidationError as DRFValidationError, Throttled,
    NotAuthenticated, AuthenticationFailed, NotFound, PermissionDenied,
)
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.exceptions import BaseApplicationException

logger = logging.getLogger(__name__)

HIGH_DEMAND_MESSAGE = "We're experiencing high demand right now. Please try again in a moment."


def _first_message(detail):
    """
    Pull a human readable message out of a DRF error detail structure.
    Field names are left to the `errors` mapping.
    """
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
        return "Invalid request"
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request"
    return str(detail)


def api_exception_handler(exc, context):
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, BaseApplicationException):
        if exc.status_code >= 500:
            logger.error(f"{view_name}: {exc.code}: {exc.message}")
        else:
            logger.info(f"{view_name}: {exc.code}: {exc.message}")
        body = {'success': False, 'message': exc.message, 'code': exc.code}
        if exc.details:
            body['details'] = exc.details
        return Response(body, status=exc.status_code)

    if isinstance(exc, (ObjectDoesNotExist, Http404)):
        exc = NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled error in {view_name}: {type(exc).__name__}: {exc}", exc_info=exc)
        return Response(
            {'success': False, 'message': 'Internal server error', 'code': 'SERVER_ERROR'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if isinstance(exc, Throttled):
        body = {'success': False, 'message': HIGH_DEMAND_MESSAGE, 'code': 'THROTTLED'}
        if exc.wait:
            body['retryAfter'] = int(exc.wait)
    elif isinstance(exc, DRFValidationError):
        body = {
            'success': False,
            'message': _first_message(exc.detail),
            'code': 'VALIDATION_ERROR',
            'errors': exc.detail,
        }
    elif isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
        body = {'success': False, 'message': _first_message(exc.detail), 'code': 'UNAUTHORIZED'}
    else:
        codes = exc.get_codes()
        body = {
            'success': False,
            'message': _first_message(exc.detail),
            'code': codes.upper() if isinstance(codes, str) else 'ERROR',
        }

    response.data = body
    return response
