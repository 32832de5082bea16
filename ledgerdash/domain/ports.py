from __future__ import annotations

from typing import Any, List, Protocol

from .models import (
    Block,
    Contract,
    ContractDraft,
    FraudAssessment,
    FraudContext,
    MineResult,
    Transaction,
)

ContractAddress = str


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class ChainPort(Protocol):
    """Ledger node operations: chain reads, transactions, mining, contracts."""

    def read_chain(self) -> List[Block]: ...
    def submit_transaction(self, tx: Transaction) -> str: ...  # ledger message
    def mine(self) -> MineResult: ...
    def deploy_contract(self, draft: ContractDraft) -> ContractAddress: ...
    def execute_contract(
        self, address: ContractAddress, method: str, params: Any
    ) -> None: ...
    def read_contract_state(self, address: ContractAddress) -> Contract: ...


class FraudPort(Protocol):
    """Opaque anomaly scorer consulted before every transaction submission."""

    def score(self, tx: Transaction, context: FraudContext) -> FraudAssessment: ...
