from __future__ import annotations

from typing import Any

from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response


def _timestamp() -> str:
    return timezone.now().isoformat()


def success_envelope(data: Any = None, message: str = "Success", **extra: Any) -> dict:
    body = {
        "success": True,
        "message": message,
        "data": data,
        "error": None,
        "timestamp": _timestamp(),
    }
    body.update(extra)
    return body


def error_envelope(
    message: str,
    status_code: int,
    *,
    errors: list[dict] | None = None,
    stack: str | None = None,
) -> dict:
    error: dict[str, Any] = {"message": message, "statusCode": status_code}
    if errors:
        error["errors"] = errors
    if stack:
        error["stack"] = stack
    return {
        "success": False,
        "message": message,
        "data": None,
        "error": error,
        "timestamp": _timestamp(),
    }


def success_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
    **extra: Any,
) -> Response:
    return Response(success_envelope(data, message, **extra), status=status_code)


def created_response(data: Any = None, message: str = "Created successfully") -> Response:
    return success_response(data, message, status_code=status.HTTP_201_CREATED)
