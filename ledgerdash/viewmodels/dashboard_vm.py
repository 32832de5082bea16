"""Read-only projections of ``DashboardState`` for the web view.

Call context:
    ``ledgerdash.web_ui.main`` renders these DTOs; nothing here performs I/O
    or mutates state.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..domain.models import Block, Contract
from ..domain.state import DashboardState

FLAGGED_TEXT = "Warning: This transaction has been flagged as potentially fraudulent."
LEGITIMATE_TEXT = "Transaction appears legitimate."


@dataclass(frozen=True)
class AlertView:
    """Alert banner content; ``tone`` is ``positive`` or ``negative``."""

    text: str
    tone: str
    detail: str = ""


@dataclass(frozen=True)
class BlockRow:
    title: str
    hash_label: str
    transaction_count: int


@dataclass(frozen=True)
class ContractCard:
    title: str
    owner_label: str
    state_json: str


def fraud_alert(state: DashboardState) -> Optional[AlertView]:
    assessment = state.last_fraud_assessment
    if assessment is None:
        return None
    text = FLAGGED_TEXT if assessment.anomaly else LEGITIMATE_TEXT
    detail = f"(Score: {assessment.error:.4f})"
    if state.last_transaction_message:
        detail = f"{detail} ({state.last_transaction_message})"
    return AlertView(
        text=text,
        tone="negative" if assessment.anomaly else "positive",
        detail=detail,
    )


def mine_alert(state: DashboardState) -> Optional[AlertView]:
    result = state.last_mine_result
    if result is None:
        return None
    return AlertView(
        text=result.message,
        tone="positive" if result.forged else "negative",
        detail=f"(Proof: {result.proof}) (Hash: {result.previous_hash})",
    )


def block_rows(chain: Sequence[Block]) -> List[BlockRow]:
    return [
        BlockRow(
            title=f"Block {block.index}",
            hash_label=f"Hash: {block.previous_hash}",
            transaction_count=len(block.transactions),
        )
        for block in chain
    ]


def contract_cards(contracts: Sequence[Contract]) -> List[ContractCard]:
    return [
        ContractCard(
            title=f"Contract: {contract.address}",
            owner_label=f"Owner: {contract.owner}",
            state_json=json.dumps(contract.state, indent=2, sort_keys=True, default=str),
        )
        for contract in contracts
    ]


def chain_chart_options(chain: Sequence[Block]) -> Dict[str, Any]:
    """Build ECharts options plotting proof per block index."""
    if not chain:
        return {
            "title": {"text": "No blocks loaded"},
            "xAxis": {"type": "category", "data": []},
            "yAxis": {"type": "value"},
            "series": [],
        }
    return {
        "tooltip": {"trigger": "axis"},
        "xAxis": {
            "type": "category",
            "name": "index",
            "data": [block.index for block in chain],
        },
        "yAxis": {"type": "value", "name": "proof"},
        "series": [
            {
                "name": "proof",
                "type": "line",
                "smooth": True,
                "data": [block.proof for block in chain],
            }
        ],
    }


def submit_label(state: DashboardState) -> str:
    return "Processing..." if state.is_submitting else "Submit Transaction"


def mine_label(state: DashboardState) -> str:
    return "Mining..." if state.is_mining else "Mine New Block"


__all__ = [
    "AlertView",
    "BlockRow",
    "ContractCard",
    "block_rows",
    "chain_chart_options",
    "contract_cards",
    "fraud_alert",
    "mine_alert",
    "mine_label",
    "submit_label",
]
