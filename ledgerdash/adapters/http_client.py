"""Shared HTTP transport utilities for the ledger and fraud REST adapters.

This module provides a thin wrapper around ``requests.Session`` so adapter
implementations share timeout policy, API-key headers, status checking and
JSON decoding.

Dependencies:
    - ``requests`` for network I/O.
    - ``ledgerdash.adapters.api_errors`` for typed transport failures.

Call context:
    - Constructed by ``ChainRestAdapter`` and ``FraudRestAdapter``.
    - Used only inside adapter methods; use cases interact through ports.

Requests are sent exactly once; timeouts and connection failures surface to
the caller as ``RemoteTimeoutError``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from ledgerdash.adapters.api_errors import (
    RemoteClientError,
    RemoteError,
    RemoteSchemaError,
    RemoteServerError,
    RemoteTimeoutError,
    error_detail,
    error_payload,
)

LOGGER = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Timeout configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds for JSON API calls.
    """

    request_timeout_s: float = 10


class JsonSession:
    """Shared requests wrapper with API-key headers and typed failures.

    This class is transport-only. Callers provide endpoint paths and validate
    decoded bodies against their own response contracts.
    """

    def __init__(self, base_url: str, api_key: Optional[str], cfg: HttpConfig) -> None:
        """Create a session bound to one service.

        Args:
            base_url: Service root, e.g. ``http://localhost:5000``.
            api_key: API key value to place in ``X-API-Key`` headers, or ``None``.
            cfg: Shared timeout settings.

        Raises:
            ValueError: If ``base_url`` is empty.
        """
        cleaned = str(base_url or "").strip()
        if not cleaned:
            raise ValueError("JsonSession requires a base URL")
        self.base_url = cleaned.rstrip("/")
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(self, path: str) -> requests.Response:
        """Send a GET request.

        Raises:
            RemoteTimeoutError: On timeout or connection failure.
            RemoteError: On any other ``requests`` failure.
        """
        url = self.url(path)
        endpoint = f"GET {url}"
        LOGGER.debug(endpoint)
        try:
            return self.session.get(
                url,
                headers=self._headers(),
                timeout=self.cfg.request_timeout_s,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise RemoteTimeoutError(f"Timeout contacting {url}", endpoint=endpoint) from exc
        except req_exc.RequestException as exc:
            raise RemoteError(str(exc), endpoint=endpoint) from exc

    def post(self, path: str, *, json_body: Optional[Any] = None) -> requests.Response:
        """Send a JSON POST request.

        Raises:
            RemoteTimeoutError: On timeout or connection failure.
            RemoteError: On any other ``requests`` failure.

        Side Effects:
            Serializes ``json_body`` with ``json.dumps`` before sending.
        """
        url = self.url(path)
        endpoint = f"POST {url}"
        LOGGER.debug(endpoint)
        data = None if json_body is None else json.dumps(json_body)
        try:
            return self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=self.cfg.request_timeout_s,
            )
        except (req_exc.Timeout, req_exc.ConnectionError) as exc:
            raise RemoteTimeoutError(f"Timeout contacting {url}", endpoint=endpoint) from exc
        except req_exc.RequestException as exc:
            raise RemoteError(str(exc), endpoint=endpoint) from exc

    @staticmethod
    def ensure_ok(resp: requests.Response, ctx: str) -> None:
        status = resp.status_code
        if 200 <= status < 300:
            return
        payload = error_payload(resp)
        detail = error_detail(payload)
        message = f"{ctx}: {detail} (HTTP {status})" if detail else f"{ctx}: HTTP {status}"
        if 400 <= status < 500:
            error_type = RemoteClientError
        elif 500 <= status < 600:
            error_type = RemoteServerError
        else:
            error_type = RemoteError
        raise error_type(message, endpoint=ctx, status=status, hint=detail, payload=payload)

    @staticmethod
    def json_any(resp: requests.Response, ctx: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            snippet = (getattr(resp, "text", "") or "")[:400]
            raise RemoteSchemaError(
                f"{ctx}: invalid JSON response: {snippet}",
                endpoint=ctx,
                status=resp.status_code,
            ) from exc


__all__ = ["HttpConfig", "JsonSession"]
