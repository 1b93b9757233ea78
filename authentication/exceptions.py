# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import exceptions, status
from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.utils.translation import gettext as _
import logging
from django.conf import settings

logger = logging.getLogger(__name__)


class BusinessRuleViolation(exceptions.APIException):
    """A request that is well formed but breaks a domain rule"""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = 'This action is not allowed.'
    default_code = 'business_rule'


def custom_exception_handler(exc, context):
    """
    Exception handler for the POS API.

    Every error is returned as ``{"success": false, "message": ..., "errors": ...}``.
    Validation problems are reported with 422 instead of DRF's default 400.
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        errors = response.data
        message = None

        if isinstance(exc, exceptions.ValidationError):
            response.status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
            message = _('The given data was invalid.')
        elif isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
            response.status_code = status.HTTP_401_UNAUTHORIZED
            message = _('Authentication required')

        if message is None:
            # APIException subclasses carry a single descriptive message
            if isinstance(errors, dict) and set(errors) == {'detail'}:
                message = str(errors['detail'])
                errors = {}
            else:
                message = _('An error occurred')

        response.data = {
            'success': False,
            'message': message,
            'errors': errors,
        }

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.warning("Validation Error: %s", exc)
        errors = exc.message_dict if hasattr(exc, 'error_dict') else {'non_field_errors': exc.messages}
        response = Response({
            'success': False,
            'message': _('The given data was invalid.'),
            'errors': errors,
        }, status=status.HTTP_422_UNPROCESSABLE_ENTITY)

    # Handle database failures (IntegrityError is a DatabaseError)
    elif isinstance(exc, DatabaseError):
        logger.error("Database Error: %s", exc, exc_info=exc)
        response = Response({
            'success': False,
            'message': _('The operation could not be completed.'),
            'errors': {},
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # Handle unexpected errors
    else:
        logger.error("Unexpected Error: %s", exc, exc_info=exc)
        response = Response({
            'success': False,
            'message': _('An unexpected error occurred'),
            'errors': {'error': str(exc)} if settings.DEBUG else {},
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
