"""
REST framework integration for domain errors.

Registered as ``REST_FRAMEWORK['EXCEPTION_HANDLER']`` so views can let
services raise ``shared.domain.exceptions`` errors directly.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError  # type: ignore
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def status_for(exc: DomainError) -> int:
    for error_class, code in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return code
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):  # type: ignore
    """Translate domain errors into JSON responses, defer the rest to DRF."""

    if isinstance(exc, DomainError):
        code = status_for(exc)
        view = context.get("view")
        logger.info(
            "%s in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view else "unknown view",
            exc.message,
        )
        return Response(exc.to_dict(), status=code)

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error surfaced to the API: %s", exc)
        return Response({"detail": "Conflicting record."}, status=status.HTTP_409_CONFLICT)

    return exception_handler(exc, context)
