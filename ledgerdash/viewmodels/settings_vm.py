from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping, Optional

from ..domain.models import FraudContext
from ..domain.state import ContractHistoryMode
from ..utils.logging import env_forces_debug, env_truthy

ENV_PREFIX = "LEDGERDASH_"


@dataclass
class DashboardSettings:
    """Typed runtime settings for service locations and workflow policy."""

    ledger_url: str = "http://localhost:5000"
    fraud_url: str = "http://localhost:8000"
    api_key: str = ""
    request_timeout_s: int = 10
    frequency: int = 1
    latitude: float = 1.3521
    longitude: float = 103.8198
    location_deviation: float = 0.0
    contract_history: str = ContractHistoryMode.APPEND.value
    use_mock: bool = False

    def fraud_context(self) -> FraudContext:
        return FraudContext(
            frequency=self.frequency,
            latitude=self.latitude,
            longitude=self.longitude,
            location_deviation=self.location_deviation,
        )


_INT_KEYS = {"request_timeout_s", "frequency"}
_FLOAT_KEYS = {"latitude", "longitude", "location_deviation"}
_URL_KEYS = {"ledger_url", "fraud_url"}


def _default_debug_logging() -> bool:
    return env_forces_debug()


class SettingsVM:
    """Keeps dashboard settings state and validation, no I/O here."""

    def __init__(self, *, config: Optional[DashboardSettings] = None) -> None:
        self.config = config or DashboardSettings()
        self.debug_logging: bool = _default_debug_logging()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SettingsVM":
        """Build settings from ``LEDGERDASH_*`` variables, e.g. ``LEDGERDASH_LEDGER_URL``."""
        env = os.environ if environ is None else environ
        payload: Dict[str, Any] = {}
        for key in (*DashboardSettings.__annotations__.keys(), "debug_logging"):
            value = env.get(f"{ENV_PREFIX}{key.upper()}")
            if value is not None and value.strip():
                payload[key] = value
        vm = cls()
        vm.apply_dict(payload)
        return vm

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        if self.config.use_mock:
            return True
        return bool(self.config.ledger_url and self.config.fraud_url)

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply a flat settings payload; unknown keys are rejected."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed = {*DashboardSettings.__annotations__.keys(), "debug_logging"}
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(
                f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}"
            )

        updates: Dict[str, Any] = {}
        for key in DashboardSettings.__annotations__.keys():
            if key in payload:
                updates[key] = self._coerce_config_value(key, payload[key])
        if updates:
            candidate = replace(self.config, **updates)
            # Reject out-of-range telemetry before it reaches a workflow.
            candidate.fraud_context()
            self.config = candidate

        if "debug_logging" in payload:
            self.debug_logging = self._coerce_bool(payload["debug_logging"])

    def to_dict(self) -> Dict[str, Any]:
        snapshot = asdict(self.config)
        snapshot["debug_logging"] = bool(self.debug_logging)
        return snapshot

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key in _URL_KEYS:
            return self._coerce_url(key, raw)
        if key == "api_key":
            return "" if raw is None else str(raw).strip()
        if key in _INT_KEYS:
            coerced = self._coerce_int(key, raw)
            if key == "request_timeout_s" and coerced <= 0:
                raise ValueError("request_timeout_s must be positive.")
            return coerced
        if key in _FLOAT_KEYS:
            return self._coerce_float(key, raw)
        if key == "contract_history":
            return ContractHistoryMode.coerce(raw).value
        if key == "use_mock":
            return self._coerce_bool(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(name: str, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string URL.")
        cleaned = value.strip().rstrip("/")
        if cleaned and not cleaned.startswith(("http://", "https://")):
            raise ValueError(f"{name} must start with http:// or https://.")
        return cleaned

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return env_truthy(value)
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        raise ValueError(f"{name} must be an integer.")

    @staticmethod
    def _coerce_float(name: str, value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be a number.")
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be a number.") from exc


def parse_settings_json(text: str) -> Dict[str, Any]:
    """Parse imported settings JSON into a mapping payload."""
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Imported settings must be a JSON object.")
    return dict(raw)


__all__ = ["DashboardSettings", "SettingsVM", "parse_settings_json"]
