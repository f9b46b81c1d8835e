"""
Domain errors and the DRF exception handler.

Every error leaves the API as {"code", "message", "timestamp"} (plus
"field_errors" for validation failures). Denials share one message for stores,
categories and products so callers cannot tell resource kinds apart.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class Unauthenticated(exceptions.NotAuthenticated):
    default_detail = "Authentication required."
    default_code = "UNAUTHENTICATED"


class NoActivePrincipal(Unauthenticated):
    """The request carries no bound identity."""


class InvalidCredentials(exceptions.AuthenticationFailed):
    # Same message for unknown email and wrong password.
    default_detail = "Invalid email or password."
    default_code = "INVALID_CREDENTIALS"


class AccessDenied(exceptions.PermissionDenied):
    default_detail = "You do not have permission to modify this store."
    default_code = "FORBIDDEN"


class NotFound(exceptions.NotFound):
    default_detail = "Resource not found."
    default_code = "NOT_FOUND"


class PrincipalNotFound(NotFound):
    default_detail = "User not found."


class StoreNotFound(NotFound):
    default_detail = "Store not found."


class CategoryNotFound(NotFound):
    default_detail = "Category not found."


class ProductNotFound(NotFound):
    default_detail = "Product not found."


class AlreadyExists(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "ALREADY_EXISTS"


class ResourceInUse(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource is still referenced and cannot be deleted."
    default_code = "RESOURCE_IN_USE"


class InvalidRoleAssignment(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Role assignment is not valid for this user."
    default_code = "INVALID_ROLE_ASSIGNMENT"


_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_401_UNAUTHORIZED: "UNAUTHENTICATED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: "CONFLICT",
    status.HTTP_429_TOO_MANY_REQUESTS: "RATE_LIMITED",
}


def _error_code(exc, status_code):
    code = getattr(exc, "default_code", None)
    if code and code.isupper():
        return code
    return _STATUS_CODES.get(status_code, "ERROR")


def _message(detail):
    if isinstance(detail, (list, tuple)):
        return " ".join(str(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    """
    Custom exception handler that logs errors and returns a consistent format.
    """
    # rest_framework.views builds APIView from the auth settings, which import this module.
    from rest_framework.views import exception_handler

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            exc = exceptions.ValidationError(exc.message_dict)
        else:
            exc = exceptions.ValidationError(exc.messages)

    response = exception_handler(exc, context)
    request = context.get("request")

    if response is None:
        logger.error(
            "Unhandled error on %s %s",
            getattr(request, "method", "?"),
            getattr(request, "path", "?"),
            exc_info=exc,
        )
        return None

    body = {
        "code": _error_code(exc, response.status_code),
        "timestamp": timezone.now().isoformat(),
    }
    if isinstance(exc, exceptions.ValidationError):
        body["code"] = "VALIDATION_FAILED"
        body["message"] = "The submitted data is not valid."
        detail = exc.detail
        body["field_errors"] = detail if isinstance(detail, dict) else {"non_field_errors": detail}
    else:
        detail = getattr(exc, "detail", None)
        if detail is None and isinstance(response.data, dict):
            detail = response.data.get("detail", response.data)
        body["message"] = _message(detail)

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("API error %s: %s", body["code"], body["message"])

    return Response(body, status=response.status_code, headers=_passthrough_headers(response))


def _passthrough_headers(response):
    headers = {}
    for name in ("WWW-Authenticate", "Retry-After", "Allow"):
        if response.has_header(name):
            headers[name] = response[name]
    return headers
