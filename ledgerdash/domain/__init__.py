"""Domain package exports for value objects, ports and dashboard state."""

from .errors import DomainFailure, ValidationError
from .models import (
    Block,
    Contract,
    ContractDraft,
    FraudAssessment,
    FraudContext,
    MineResult,
    Transaction,
    TransactionDraft,
)
from .ports import ChainPort, FraudPort, UseCaseError
from .state import ContractHistoryMode, DashboardState, DashboardStore

__all__ = [
    "Block",
    "ChainPort",
    "Contract",
    "ContractDraft",
    "ContractHistoryMode",
    "DashboardState",
    "DashboardStore",
    "DomainFailure",
    "FraudAssessment",
    "FraudContext",
    "FraudPort",
    "MineResult",
    "Transaction",
    "TransactionDraft",
    "UseCaseError",
    "ValidationError",
]
