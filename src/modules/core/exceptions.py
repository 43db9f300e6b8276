"""API error formatting.

``standard_exception_handler`` is installed as DRF's ``EXCEPTION_HANDLER``
and renders every handled error as::

    {"type": "validation_error" | "client_error" | "server_error",
     "errors": [{"code": ..., "detail": ..., "attr": ...}]}

Nested serializer errors are flattened; ``attr`` is a dotted path such as
``items.0.quantity`` (``None`` for non-field errors).
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

import structlog
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


class Conflict(exceptions.APIException):
    """The resource would duplicate an existing one."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


def standard_exception_handler(exc: Exception, context: Dict[str, Any]):
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        error_type = "validation_error"
    elif response.status_code >= 500:
        error_type = "server_error"
    else:
        error_type = "client_error"

    response.data = {
        "type": error_type,
        "errors": list(_flatten(exc.detail)),
    }
    logger.info(
        "api.error",
        type=error_type,
        status_code=response.status_code,
        view=type(context.get("view")).__name__,
    )
    return response


def _flatten(detail: Any, attr: Optional[str] = None) -> Iterator[Dict[str, Any]]:
    if isinstance(detail, dict):
        for key, value in detail.items():
            if key in ("non_field_errors", "detail"):
                yield from _flatten(value, attr)
            else:
                yield from _flatten(value, key if attr is None else f"{attr}.{key}")
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                yield from _flatten(
                    value, str(index) if attr is None else f"{attr}.{index}"
                )
            else:
                yield from _flatten(value, attr)
    else:
        yield {
            "code": getattr(detail, "code", "error"),
            "detail": str(detail),
            "attr": attr,
        }


def from_pydantic(exc) -> exceptions.ValidationError:
    """Convert a pydantic ``ValidationError`` into a DRF one, keyed by field path."""
    detail: Dict[str, list] = {}
    for error in exc.errors():
        attr = ".".join(str(part) for part in error["loc"]) or "non_field_errors"
        detail.setdefault(attr, []).append(error["msg"])
    return exceptions.ValidationError(detail)
