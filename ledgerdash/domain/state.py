"""Observable dashboard state owned by the workflow orchestrator.

``DashboardState`` is an immutable snapshot. ``DashboardStore`` holds the
current snapshot, swaps it for a new one on every workflow event and notifies
subscribers. Presentation code only reads ``store.state`` and subscribes; the
orchestrator is the only writer. In-flight operation counts are kept per
store, so orchestrators rebuilt over the same store share them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import Block, Contract, FraudAssessment, MineResult, TransactionDraft

LOGGER = logging.getLogger(__name__)


class TransactionPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SCORING = "scoring"
    SUBMITTING = "submitting"


class MiningPhase(str, Enum):
    IDLE = "idle"
    MINING = "mining"


class DeployPhase(str, Enum):
    IDLE = "idle"
    DEPLOYING = "deploying"


class ExecutePhase(str, Enum):
    """Execute is one step: the method call, then a read of the new state."""

    IDLE = "idle"
    EXECUTING = "executing"
    READING = "reading"


class ReadPhase(str, Enum):
    IDLE = "idle"
    READING = "reading"


class ContractHistoryMode(str, Enum):
    """How a fresh contract state snapshot is merged into ``contracts``."""

    APPEND = "append"
    """Keep every snapshot, including repeated reads of the same address."""
    UPSERT = "upsert"
    """Replace the existing entry for the address in place, else append."""

    @classmethod
    def coerce(cls, value: Any) -> "ContractHistoryMode":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        try:
            return cls(text)
        except ValueError as exc:
            raise ValueError(
                f"contract_history must be 'append' or 'upsert', got {value!r}"
            ) from exc


def merge_contract(
    contracts: Tuple[Contract, ...],
    snapshot: Contract,
    mode: ContractHistoryMode,
) -> Tuple[Contract, ...]:
    """Return ``contracts`` with ``snapshot`` recorded according to ``mode``."""
    if mode is ContractHistoryMode.UPSERT:
        for idx, existing in enumerate(contracts):
            if existing.address == snapshot.address:
                return contracts[:idx] + (snapshot,) + contracts[idx + 1:]
    return contracts + (snapshot,)


@dataclass(frozen=True)
class DashboardState:
    """Read-only view of everything the dashboard renders."""

    chain: Tuple[Block, ...] = ()
    pending_transaction: TransactionDraft = TransactionDraft()
    last_fraud_assessment: Optional[FraudAssessment] = None
    last_transaction_message: Optional[str] = None
    contracts: Tuple[Contract, ...] = ()
    contract_address: str = ""
    last_mine_result: Optional[MineResult] = None
    is_submitting: bool = False
    is_mining: bool = False
    last_error: Optional[str] = None
    transaction_phase: TransactionPhase = TransactionPhase.IDLE
    mining_phase: MiningPhase = MiningPhase.IDLE
    deploy_phase: DeployPhase = DeployPhase.IDLE
    execute_phase: ExecutePhase = ExecutePhase.IDLE
    read_phase: ReadPhase = ReadPhase.IDLE


StateListener = Callable[[DashboardState], None]


class DashboardStore:
    """Holds the current ``DashboardState`` and publishes replacements."""

    def __init__(self, initial: Optional[DashboardState] = None) -> None:
        self._state = initial or DashboardState()
        self._listeners: List[StateListener] = []
        self._inflight: Dict[str, int] = {}

    @property
    def state(self) -> DashboardState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def begin(self, operation: str) -> int:
        """Count one more in-flight ``operation`` and return the new count."""
        count = self._inflight.get(operation, 0) + 1
        self._inflight[operation] = count
        return count

    def finish(self, operation: str) -> int:
        """Count one ``operation`` as done and return how many are still running."""
        count = max(0, self._inflight.get(operation, 0) - 1)
        self._inflight[operation] = count
        return count

    def in_flight(self, operation: str) -> int:
        return self._inflight.get(operation, 0)

    def apply(self, event: str, **changes: Any) -> DashboardState:
        """Replace the snapshot with ``changes`` applied and notify listeners.

        Args:
            event: Short workflow event name, logged at DEBUG level.
            **changes: ``DashboardState`` fields to replace.

        Returns:
            The new snapshot.
        """
        self._state = replace(self._state, **changes)
        LOGGER.debug("state event=%s fields=%s", event, sorted(changes))
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                # Listener errors are logged, never propagated.
                LOGGER.exception("State listener failed for event %s", event)
        return self._state


__all__ = [
    "ContractHistoryMode",
    "DeployPhase",
    "ExecutePhase",
    "DashboardState",
    "DashboardStore",
    "MiningPhase",
    "ReadPhase",
    "StateListener",
    "TransactionPhase",
    "merge_contract",
]
