"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations

from typing import Optional

from ledgerdash.adapters.api_errors import (
    RemoteClientError,
    RemoteError,
    RemoteSchemaError,
    RemoteServerError,
    RemoteTimeoutError,
    error_detail,
)
from ledgerdash.domain.ports import UseCaseError


def map_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map any workflow failure to a stable ``UseCaseError`` code.

    ``UseCaseError`` subclasses (validation, domain failures) pass through
    unchanged; ``RemoteError`` subclasses become transport codes; anything
    else is wrapped with ``default_code``.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, RemoteTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, RemoteSchemaError):
        return UseCaseError(
            "BAD_RESPONSE",
            _compose_error_message("Unexpected response from service", str(exc)),
        )
    if isinstance(exc, RemoteClientError):
        status = exc.status or 0
        hint = exc.hint or error_detail(exc.payload)
        if status in (401, 403):
            return UseCaseError("AUTH_FAILED", "Auth failed / API key invalid.")
        if status == 404:
            return UseCaseError("NOT_FOUND", _compose_error_message("Not found", hint))
        if status in (400, 422):
            return UseCaseError(
                "INVALID_PARAMS", _compose_error_message("Invalid parameters", hint)
            )
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return UseCaseError("REQUEST_FAILED", _compose_error_message(label, hint))
    if isinstance(exc, RemoteServerError):
        return UseCaseError("SERVER_ERROR", "Service error, try again.")
    if isinstance(exc, RemoteError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_error"]
