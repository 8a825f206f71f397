"""Failure taxonomy and the single conversion into ApiError."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from perflab.twin.models import ApiError


class TwinError(Exception):
    """Base for every failure the transport or session can produce."""

    kind = "transport"

    def __init__(self, message: str, status: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details

    def to_api_error(self) -> ApiError:
        return ApiError(message=self.message, status=self.status, details=self.details, kind=self.kind)


class ConfigurationError(TwinError):
    """Base URL missing. Fatal for every operation until corrected."""

    kind = "configuration"


class TransportError(TwinError):
    """Network failure or malformed response. Never carries a status."""

    kind = "transport"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, status=None, details=details)


class RequestError(TwinError):
    """Non-2xx response from the service."""

    kind = "request"


class ValidationError(TwinError):
    """Client-side advisory validation rejected a payload before sending."""

    kind = "validation"


def _format_validation(exc: PydanticValidationError) -> tuple[str, list[dict[str, Any]]]:
    errors = exc.errors(include_url=False, include_context=False)
    if not errors:
        return "Invalid input", []
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "Invalid input")
    return (f"{loc}: {msg}" if loc else msg), errors


def validation_error_from(exc: PydanticValidationError) -> ValidationError:
    message, errors = _format_validation(exc)
    return ValidationError(message, details=errors)


def to_api_error(exc: BaseException) -> ApiError:
    """Normalize any caught failure into ApiError. Never raises."""
    if isinstance(exc, TwinError):
        return exc.to_api_error()
    if isinstance(exc, PydanticValidationError):
        return validation_error_from(exc).to_api_error()
    if isinstance(exc, httpx.HTTPError):
        return ApiError(message=str(exc) or type(exc).__name__, kind="transport")
    return ApiError(message=str(exc) or type(exc).__name__, details=type(exc).__name__, kind="transport")
