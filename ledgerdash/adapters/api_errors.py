"""Typed failures raised by the ledger and fraud REST adapters.

Every error carries the ``endpoint`` it came from (``"mine"``,
``"contracts/state[0xabc]"``, ...) so workflow logs can name the failing
call. Client errors also carry a short ``hint`` pulled from the response
body, which ``usecases.error_mapping`` shows to the user.
"""

from __future__ import annotations

from typing import Any, Optional

_DETAIL_KEYS = ("message", "detail", "msg", "error", "hint")
_DETAIL_LIMIT = 200


class RemoteError(RuntimeError):
    """Failure talking to the ledger node or the fraud scorer."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: Optional[str] = None,
        status: Optional[int] = None,
        hint: Optional[str] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.hint = hint
        self.payload = payload


class RemoteClientError(RemoteError):
    """HTTP 4xx: the service rejected the request (bad params, unknown contract)."""


class RemoteServerError(RemoteError):
    """HTTP 5xx from the service."""


class RemoteTimeoutError(RemoteError):
    """Timeout or refused connection; the call may or may not have been applied."""


class RemoteSchemaError(RemoteError):
    """2xx response whose body is not JSON or does not have the expected shape."""


def error_payload(resp: Any) -> Any:
    """Decoded JSON body of an error response, else its text (or ``None``)."""
    try:
        return resp.json()
    except ValueError:
        text = getattr(resp, "text", "") or ""
        return text[:400] or None


def error_detail(payload: Any) -> Optional[str]:
    """First human-readable message in an error body.

    Handles plain-text bodies (``"Missing values"``), ``{"message": ...}``
    objects and validation lists such as ``{"detail": [{"msg": ...}]}``.
    """
    if isinstance(payload, str):
        text = payload.strip()
    elif isinstance(payload, dict):
        for key in _DETAIL_KEYS:
            text = error_detail(payload.get(key))
            if text:
                return text
        return None
    elif isinstance(payload, list):
        text = "; ".join(filter(None, (error_detail(item) for item in payload[:3])))
    else:
        return None
    return text[:_DETAIL_LIMIT] or None


__all__ = [
    "RemoteClientError",
    "RemoteError",
    "RemoteSchemaError",
    "RemoteServerError",
    "RemoteTimeoutError",
    "error_detail",
    "error_payload",
]
