"""
Domain error kinds and the DRF exception handler that renders them.

Handlers raise one of the kinds below. Anything else that escapes a view
(framework errors, database errors, token errors) is translated into one of
the same status codes by ``envelope_exception_handler`` so every error body
has the same shape.
"""

from __future__ import annotations

import logging
import traceback

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import set_rollback
from rest_framework_simplejwt.exceptions import TokenError

from .responses import error_envelope

logger = logging.getLogger(__name__)


class DomainError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed."
    default_code = "error"

    def __init__(self, detail=None, code=None, *, errors: list[dict] | None = None):
        super().__init__(detail=detail, code=code)
        self.errors = errors


class BadRequest(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request."
    default_code = "bad_request"


class Unauthorized(DomainError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authorized to access this route."
    default_code = "unauthorized"


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action."
    default_code = "forbidden"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."
    default_code = "not_found"


class Conflict(DomainError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


class ValidationFailed(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Validation failed."
    default_code = "validation_failed"


class RateLimited(DomainError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests, please try again later."
    default_code = "rate_limited"


class GatewayError(DomainError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider request failed."
    default_code = "gateway_error"


def flatten_errors(detail, field: str = "") -> list[dict]:
    """Turn a DRF error tree into a flat ``[{field, message}]`` list."""

    if isinstance(detail, dict):
        flattened = []
        for key, value in detail.items():
            flattened.extend(flatten_errors(value, f"{field}.{key}" if field else str(key)))
        return flattened
    if isinstance(detail, list):
        flattened = []
        for index, item in enumerate(detail):
            if isinstance(item, (dict, list)):
                flattened.extend(flatten_errors(item, f"{field}[{index}]"))
            else:
                flattened.extend(flatten_errors(item, field))
        return flattened
    return [{"field": field or "non_field_errors", "message": str(detail)}]


def _detail_message(detail) -> str:
    if isinstance(detail, (list, dict)):
        errors = flatten_errors(detail)
        return errors[0]["message"] if errors else "Request could not be processed."
    return str(detail)


def _translate(exc: Exception) -> Exception:
    """Map framework and driver exceptions onto the domain error kinds."""

    if isinstance(exc, (Http404, ObjectDoesNotExist)):
        return NotFound()
    if isinstance(exc, DjangoPermissionDenied):
        return Forbidden()
    if isinstance(exc, DjangoValidationError):
        if getattr(exc, "code", None) == "invalid":
            return BadRequest("Invalid identifier.")
        return BadRequest("; ".join(exc.messages))
    if isinstance(exc, IntegrityError):
        return Conflict("Duplicate value violates a uniqueness constraint.")
    if isinstance(exc, TokenError):
        return Unauthorized(str(exc))
    if isinstance(exc, exceptions.ValidationError):
        return ValidationFailed(errors=flatten_errors(exc.detail))
    if isinstance(exc, exceptions.Throttled):
        return RateLimited()
    return exc


def envelope_exception_handler(exc, context):
    translated = _translate(exc)
    headers = {}
    set_rollback()

    if isinstance(exc, exceptions.Throttled) and exc.wait is not None:
        headers["Retry-After"] = str(int(exc.wait))
    auth_header = getattr(exc, "auth_header", None)
    if auth_header:
        headers["WWW-Authenticate"] = auth_header

    if isinstance(translated, DomainError):
        body = error_envelope(
            _detail_message(translated.detail),
            translated.status_code,
            errors=translated.errors,
        )
        return Response(body, status=translated.status_code, headers=headers)

    if isinstance(translated, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        message = _detail_message(translated.detail)
        return Response(
            error_envelope(message, status.HTTP_401_UNAUTHORIZED),
            status=status.HTTP_401_UNAUTHORIZED,
            headers=headers,
        )

    if isinstance(translated, exceptions.APIException):
        return Response(
            error_envelope(_detail_message(translated.detail), translated.status_code),
            status=translated.status_code,
            headers=headers,
        )

    view = context.get("view")
    logger.exception(
        "Unhandled error in %s",
        view.__class__.__name__ if view is not None else "request",
        exc_info=exc,
    )
    stack = None
    if settings.IS_DEVELOPMENT:
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    message = str(exc) if settings.IS_DEVELOPMENT else "Internal server error."
    return Response(
        error_envelope(message, status.HTTP_500_INTERNAL_SERVER_ERROR, stack=stack),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
