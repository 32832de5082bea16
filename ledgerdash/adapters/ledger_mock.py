from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List
from uuid import uuid4

from ledgerdash.domain.models import (
    FORGED_MESSAGE,
    Block,
    Contract,
    ContractDraft,
    FraudAssessment,
    FraudContext,
    MineResult,
    Transaction,
)
from ledgerdash.domain.ports import ChainPort, ContractAddress, FraudPort

NOTHING_TO_MINE_MESSAGE = "No pending transactions to mine"


def _digest(block: Block) -> str:
    body = json.dumps(
        {
            "index": block.index,
            "previous_hash": block.previous_hash,
            "proof": block.proof,
            "transactions": [dict(tx) for tx in block.transactions],
        },
        sort_keys=True,
    )
    return hashlib.sha256(body.encode("utf-8")).hexdigest()


@dataclass
class LedgerMock(ChainPort):
    """Offline substitute for ``ChainRestAdapter`` with deterministic responses."""

    def __post_init__(self) -> None:
        self._chain: List[Block] = [Block(index=0, previous_hash="1", proof=100)]
        self._pending: List[Dict[str, Any]] = []
        self._contracts: Dict[ContractAddress, Contract] = {}

    # ---------- ChainPort ----------

    def read_chain(self) -> List[Block]:
        return list(self._chain)

    def submit_transaction(self, tx: Transaction) -> str:
        self._pending.append(tx.to_payload())
        return f"Transaction will be added to Block {len(self._chain)}"

    def mine(self) -> MineResult:
        last = self._chain[-1]
        if not self._pending:
            return MineResult(
                index=last.index,
                message=NOTHING_TO_MINE_MESSAGE,
                previous_hash=last.previous_hash,
                proof=last.proof,
            )
        block = Block(
            index=len(self._chain),
            previous_hash=_digest(last),
            proof=last.proof + 1 + len(self._pending),
            transactions=tuple(self._pending),
        )
        self._chain.append(block)
        self._pending = []
        return MineResult(
            index=block.index,
            message=FORGED_MESSAGE,
            previous_hash=block.previous_hash,
            proof=block.proof,
            transactions=block.transactions,
        )

    def deploy_contract(self, draft: ContractDraft) -> ContractAddress:
        if draft.type != "token":
            raise ValueError(f"deploy_contract: unsupported contract type '{draft.type}'")
        supply = int(float(str(draft.params.get("initial_supply") or 0)))
        address = f"0x{uuid4().hex[:40]}"
        self._contracts[address] = Contract(
            address=address,
            owner=draft.owner,
            state={"total_supply": supply, "balances": {draft.owner: supply}},
        )
        return address

    def execute_contract(self, address: ContractAddress, method: str, params: Any) -> None:
        contract = self._require(address)
        state = json.loads(json.dumps(contract.state))
        balances: Dict[str, int] = state["balances"]
        args = params if isinstance(params, dict) else {}
        if method == "transfer":
            sender = str(args.get("from") or contract.owner)
            amount = int(args.get("amount") or 0)
            if balances.get(sender, 0) < amount:
                raise ValueError(f"transfer: insufficient balance for {sender}")
            balances[sender] = balances.get(sender, 0) - amount
            target = str(args.get("to") or "")
            balances[target] = balances.get(target, 0) + amount
        elif method == "mint":
            amount = int(args.get("amount") or 0)
            balances[contract.owner] = balances.get(contract.owner, 0) + amount
            state["total_supply"] += amount
        else:
            raise ValueError(f"execute_contract: unknown method '{method}'")
        self._contracts[address] = Contract(address=address, owner=contract.owner, state=state)

    def read_contract_state(self, address: ContractAddress) -> Contract:
        return self._require(address)

    def _require(self, address: ContractAddress) -> Contract:
        try:
            return self._contracts[address]
        except KeyError as exc:
            raise ValueError(f"Unknown contract address '{address}'") from exc


@dataclass
class FraudMock(FraudPort):
    """Offline scorer flagging transactions above ``threshold``."""

    threshold: float = 10_000.0
    calls: List[Transaction] = field(default_factory=list)

    def score(self, tx: Transaction, context: FraudContext) -> FraudAssessment:
        self.calls.append(tx)
        ratio = tx.value / self.threshold if self.threshold > 0 else 1.0
        error = min(1.0, ratio + 0.05 * context.location_deviation)
        return FraudAssessment(anomaly=tx.value > self.threshold, error=round(error, 4))


__all__ = ["FraudMock", "LedgerMock", "NOTHING_TO_MINE_MESSAGE"]
