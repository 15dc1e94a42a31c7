"""
Domain exceptions for the Tire Replacement Workflow backend.

All exceptions follow the standard error format:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable description",
        "details": {}
    }
}
"""

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
import logging

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, code, message, details=None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Validation error - request body or parameters fail validation."""

    def __init__(self, message, details=None):
        super().__init__("VALIDATION_ERROR", message, details)

    @classmethod
    def from_errors(cls, errors, message=None):
        """Build from a list of rule violations, keeping every message."""
        errors = list(errors)
        return cls(message or "; ".join(errors), {"errors": errors})


class InvalidStateError(DomainError):
    """Entity is not in the required state for the operation."""

    def __init__(self, message, details=None):
        super().__init__("INVALID_STATE", message, details)


class ConflictError(DomainError):
    """Entity was modified concurrently (version mismatch)."""

    def __init__(self, message, details=None):
        super().__init__("CONFLICT", message, details)


class NotFoundError(DomainError):
    """Requested resource does not exist."""

    def __init__(self, message, details=None):
        super().__init__("NOT_FOUND", message, details)


class PermissionDeniedError(DomainError):
    """Authenticated user lacks required role."""

    def __init__(self, message, details=None):
        super().__init__("FORBIDDEN", message, details)


STATUS_CODE_MAP = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
}

# Framework exceptions keep their HTTP status; only the code is normalized.
DRF_CODE_MAP = {
    drf_exceptions.NotAuthenticated: "UNAUTHORIZED",
    drf_exceptions.AuthenticationFailed: "UNAUTHORIZED",
    drf_exceptions.PermissionDenied: "FORBIDDEN",
    drf_exceptions.NotFound: "NOT_FOUND",
    drf_exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    drf_exceptions.UnsupportedMediaType: "VALIDATION_ERROR",
    drf_exceptions.ParseError: "VALIDATION_ERROR",
    Http404: "NOT_FOUND",
    DjangoPermissionDenied: "FORBIDDEN",
}


def _error_response(code, message, details, status_code):
    return Response(
        {
            "error": {
                "code": code,
                "message": message,
                "details": details,
            }
        },
        status=status_code,
    )


def _flatten_serializer_errors(data, prefix=""):
    """Turn DRF's nested error dict into a flat list of messages."""
    messages = []
    if isinstance(data, dict):
        for field, value in data.items():
            label = field if field != "non_field_errors" else ""
            messages.extend(_flatten_serializer_errors(value, label))
    elif isinstance(data, list):
        for item in data:
            messages.extend(_flatten_serializer_errors(item, prefix))
    else:
        messages.append(f"{prefix}: {data}" if prefix else str(data))
    return messages


def domain_exception_handler(exc, context):
    """
    Custom exception handler for domain exceptions.

    Returns standard error format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable description",
            "details": {}
        }
    }
    """
    if isinstance(exc, DomainError):
        status_code = STATUS_CODE_MAP.get(exc.code, status.HTTP_400_BAD_REQUEST)
        return _error_response(exc.code, exc.message, exc.details, status_code)

    if isinstance(exc, drf_exceptions.ValidationError):
        errors = _flatten_serializer_errors(exc.detail)
        return _error_response(
            "VALIDATION_ERROR",
            "; ".join(errors) or "Invalid input",
            {"errors": errors, "fields": exc.detail},
            status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Persistence failure", exc_info=exc)
        return _error_response(
            "PERSISTENCE_ERROR",
            "A database error occurred",
            {},
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = exception_handler(exc, context)

    if response is not None:
        code = "INTERNAL_ERROR"
        for exc_class, mapped in DRF_CODE_MAP.items():
            if isinstance(exc, exc_class):
                code = mapped
                break
        if isinstance(response.data, dict) and "detail" in response.data:
            message = str(response.data["detail"])
            details = {}
        else:
            message = "An error occurred"
            details = response.data
        response.data = {
            "error": {
                "code": code,
                "message": message,
                "details": details,
            }
        }
        return response

    logger.exception("Unhandled exception", exc_info=exc)
    return _error_response(
        "INTERNAL_ERROR",
        "An internal error occurred",
        {},
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
