"""
Lifecycle error taxonomy.

Every business-rule violation raised by the announcement/application services
is a DRF APIException, so views can let it propagate and DRF renders it with
the right status code. None of these are retried: they are caller mistakes.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class LifecycleError(exceptions.APIException):
    """Base class for marketplace lifecycle errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'lifecycle_error'

    def __init__(self, detail=None, code=None, **extra):
        super().__init__(detail=detail, code=code)
        self.extra = extra

    @property
    def message(self):
        return str(self.detail)


class ValidationError(LifecycleError):
    """Malformed or missing category-conditional fields, bad dates"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Validation failed'
    default_code = 'validation_error'


class InvalidTransition(LifecycleError):
    """Illegal status change; carries the current status and allowed next states"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid status transition'
    default_code = 'invalid_transition'

    def __init__(self, current_status, new_status, allowed, resource_type='announcement', detail=None):
        allowed = list(allowed)
        detail = detail or (
            f"Invalid {resource_type} status transition: {current_status} -> {new_status}. "
            f"Valid transitions from '{current_status}': {allowed}"
        )
        super().__init__(
            detail=detail,
            current_status=current_status,
            requested_status=new_status,
            allowed=allowed,
        )
        self.current_status = current_status
        self.allowed = allowed


class Forbidden(LifecycleError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You do not have permission to perform this action'
    default_code = 'forbidden'


class NotFound(LifecycleError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class Conflict(LifecycleError):
    """Duplicate pending application, oversell, or acting on a non-published announcement"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflict with the current state of the resource'
    default_code = 'conflict'


def lifecycle_exception_handler(exc, context):
    """
    DRF exception handler.

    Lifecycle errors are rendered as {'error': ..., 'code': ...} plus any
    structured extras (e.g. current_status/allowed for InvalidTransition).
    Everything else goes through DRF's default handler.
    """
    response = exception_handler(exc, context)
    if response is None or not isinstance(exc, LifecycleError):
        return response

    payload = {'error': exc.message, 'code': exc.get_codes()}
    payload.update(exc.extra)
    response.data = payload

    view = context.get('view')
    logger.info(
        f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}"
    )
    return response
