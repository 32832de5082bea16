"""Form-input validation that runs before any remote call."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from ..domain.errors import ValidationError
from ..domain.models import ContractDraft, Transaction, TransactionDraft, parse_amount
from ..domain.ports import ContractAddress


@dataclass(frozen=True)
class ExecuteRequest:
    """Validated contract method invocation."""

    address: ContractAddress
    method: str
    params: Any


def validate_transaction(draft: TransactionDraft) -> Transaction:
    """Turn raw form fields into a ``Transaction`` or raise ``ValidationError``."""
    sender = str(draft.sender or "").strip()
    recipient = str(draft.recipient or "").strip()
    amount = str(draft.amount or "").strip()
    if not sender:
        raise ValidationError("INVALID_SENDER", "Sender address is required.")
    if not recipient:
        raise ValidationError("INVALID_RECIPIENT", "Recipient address is required.")
    if parse_amount(amount) is None:
        raise ValidationError(
            "INVALID_AMOUNT", "Amount must be a non-negative number."
        )
    return Transaction(sender=sender, recipient=recipient, amount=amount)


def require_address(address: str) -> ContractAddress:
    cleaned = str(address or "").strip()
    if not cleaned:
        raise ValidationError("MISSING_ADDRESS", "Contract address is required.")
    return cleaned


def validate_deploy(owner: str, initial_supply: str, contract_type: str = "token") -> ContractDraft:
    """Build the deployment request for a token contract.

    The supply text is forwarded as entered once it parses as a non-negative
    number, mirroring how transaction amounts are sent.
    """
    cleaned_owner = str(owner or "").strip()
    if not cleaned_owner:
        raise ValidationError("INVALID_OWNER", "Contract owner is required.")
    supply = str(initial_supply or "").strip()
    if parse_amount(supply) is None:
        raise ValidationError(
            "INVALID_SUPPLY", "Initial supply must be a non-negative number."
        )
    kind = str(contract_type or "").strip() or "token"
    return ContractDraft(owner=cleaned_owner, type=kind, params={"initial_supply": supply})


def validate_execute(address: str, method: str, params_text: str) -> ExecuteRequest:
    """Validate a contract invocation; ``params_text`` must be JSON (blank means ``{}``)."""
    target = require_address(address)
    name = str(method or "").strip()
    if not name:
        raise ValidationError("INVALID_METHOD", "Method name is required.")
    text = str(params_text or "").strip()
    if not text:
        return ExecuteRequest(address=target, method=name, params={})
    try:
        params = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(
            "INVALID_PARAMS_JSON", f"Method parameters are not valid JSON: {exc.msg}."
        ) from exc
    return ExecuteRequest(address=target, method=name, params=params)


__all__ = [
    "ExecuteRequest",
    "require_address",
    "validate_deploy",
    "validate_execute",
    "validate_transaction",
]
