from __future__ import annotations

"""Domain value objects exchanged with the ledger and fraud services."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

FORGED_MESSAGE = "The new block has been forged"


def _require_mapping(payload: Any, ctx: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValueError(f"{ctx}: expected object, got {type(payload).__name__}")
    return payload


def _require_int(payload: Mapping[str, Any], key: str, ctx: str) -> int:
    value = payload.get(key)
    # bool is an int subclass but never a valid counter
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{ctx}: field '{key}' must be an integer")
    return value


def _require_str(payload: Mapping[str, Any], key: str, ctx: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{ctx}: field '{key}' must be a string")
    return value


def _require_list(payload: Mapping[str, Any], key: str, ctx: str) -> List[Any]:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ValueError(f"{ctx}: field '{key}' must be a list")
    return value


def parse_amount(text: str) -> Optional[float]:
    """Return the numeric value of an amount string, or ``None`` when invalid.

    Accepts finite, non-negative decimal text such as ``"10"`` or ``"2.5"``.
    """
    cleaned = str(text or "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


@dataclass(frozen=True)
class Transaction:
    """Validated transfer ready to be scored and forwarded to the ledger."""

    sender: str
    recipient: str
    amount: str
    """Amount as entered by the operator, forwarded verbatim to the ledger."""

    def __post_init__(self) -> None:
        if not isinstance(self.sender, str) or not self.sender.strip():
            raise ValueError("Transaction sender must be a non-empty string.")
        if not isinstance(self.recipient, str) or not self.recipient.strip():
            raise ValueError("Transaction recipient must be a non-empty string.")
        if parse_amount(self.amount) is None:
            raise ValueError("Transaction amount must be a finite non-negative number.")

    @property
    def value(self) -> float:
        """Numeric amount used as the fraud model's ``transaction_value``."""
        return float(self.amount.strip())

    def to_payload(self) -> Dict[str, str]:
        return {"sender": self.sender, "recipient": self.recipient, "amount": self.amount}


@dataclass(frozen=True)
class TransactionDraft:
    """Raw transaction form fields, not yet validated."""

    sender: str = ""
    recipient: str = ""
    amount: str = ""


@dataclass(frozen=True)
class FraudContext:
    """Telemetry sent alongside the amount when scoring a transaction."""

    frequency: int = 1
    latitude: float = 1.3521
    longitude: float = 103.8198
    location_deviation: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.frequency, bool) or not isinstance(self.frequency, int):
            raise ValueError("FraudContext frequency must be an integer.")
        for name in ("latitude", "longitude", "location_deviation"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"FraudContext {name} must be numeric.")
            if not math.isfinite(value):
                raise ValueError(f"FraudContext {name} must be finite.")


@dataclass(frozen=True)
class FraudAssessment:
    """Verdict returned by the fraud scorer for one transaction attempt."""

    anomaly: bool
    error: float
    """Continuous anomaly metric (reconstruction error) reported by the model."""

    @classmethod
    def from_payload(cls, payload: Any) -> "FraudAssessment":
        data = _require_mapping(payload, "predict")
        anomaly = data.get("anomaly")
        if not isinstance(anomaly, bool):
            raise ValueError("predict: field 'anomaly' must be a boolean")
        error = data.get("error")
        if isinstance(error, bool) or not isinstance(error, (int, float)):
            raise ValueError("predict: field 'error' must be a number")
        return cls(anomaly=anomaly, error=float(error))


@dataclass(frozen=True)
class Block:
    """Block as reported by the ledger node. Never constructed locally."""

    index: int
    previous_hash: str
    proof: int
    transactions: Tuple[Mapping[str, Any], ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "Block":
        data = _require_mapping(payload, "block")
        index = _require_int(data, "index", "block")
        if index < 0:
            raise ValueError("block: field 'index' must be >= 0")
        entries = _require_list(data, "transactions", "block")
        return cls(
            index=index,
            previous_hash=_require_str(data, "previous_hash", "block"),
            proof=_require_int(data, "proof", "block"),
            transactions=tuple(
                dict(_require_mapping(entry, "block.transactions")) for entry in entries
            ),
        )


def parse_chain(payload: Any) -> List[Block]:
    """Validate a ``GET /chain`` body and return its blocks in order."""
    data = _require_mapping(payload, "chain")
    return [Block.from_payload(entry) for entry in _require_list(data, "chain", "chain")]


@dataclass(frozen=True)
class MineResult:
    """Outcome reported by ``GET /mine``, including unsuccessful attempts."""

    index: int
    message: str
    previous_hash: str
    proof: int
    transactions: Tuple[Mapping[str, Any], ...] = ()

    @property
    def forged(self) -> bool:
        return self.message == FORGED_MESSAGE

    @classmethod
    def from_payload(cls, payload: Any) -> "MineResult":
        data = _require_mapping(payload, "mine")
        entries = _require_list(data, "transactions", "mine")
        return cls(
            index=_require_int(data, "index", "mine"),
            message=_require_str(data, "message", "mine"),
            previous_hash=_require_str(data, "previous_hash", "mine"),
            proof=_require_int(data, "proof", "mine"),
            transactions=tuple(
                dict(_require_mapping(entry, "mine.transactions")) for entry in entries
            ),
        )


@dataclass(frozen=True)
class ContractDraft:
    """Deployment request for a new contract."""

    owner: str
    type: str = "token"
    params: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"owner": self.owner, "type": self.type, "params": dict(self.params)}


@dataclass(frozen=True)
class Contract:
    """Snapshot of a deployed contract's state at the time it was read."""

    address: str
    owner: str
    state: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Contract":
        data = _require_mapping(payload, "contract_state")
        address = _require_str(data, "address", "contract_state")
        if not address.strip():
            raise ValueError("contract_state: field 'address' must be non-empty")
        return cls(
            address=address,
            owner=_require_str(data, "owner", "contract_state"),
            state=data.get("state"),
        )


__all__ = [
    "Block",
    "Contract",
    "ContractDraft",
    "FORGED_MESSAGE",
    "FraudAssessment",
    "FraudContext",
    "MineResult",
    "Transaction",
    "TransactionDraft",
    "parse_amount",
    "parse_chain",
]
