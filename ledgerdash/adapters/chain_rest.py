from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, TypeVar
from urllib.parse import quote

from ledgerdash.domain.models import (
    Block,
    Contract,
    ContractDraft,
    MineResult,
    Transaction,
    parse_chain,
)
from ledgerdash.domain.ports import ChainPort, ContractAddress

from .api_errors import RemoteSchemaError
from .http_client import HttpConfig, JsonSession

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class ChainRestAdapter(ChainPort):
    """REST adapter for the ledger node (chain, mining and contract endpoints)."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: float = 10,
    ) -> None:
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s)
        self.session = JsonSession(base_url, api_key, self.cfg)

    def read_chain(self) -> List[Block]:
        payload = self._get_json("/chain", "chain")
        return self._validated(payload, parse_chain, "chain")

    def submit_transaction(self, tx: Transaction) -> str:
        resp = self.session.post("/transactions/new", json_body=tx.to_payload())
        self.session.ensure_ok(resp, "transactions/new")
        payload = self.session.json_any(resp, "transactions/new")
        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, str):
            raise RemoteSchemaError(
                "transactions/new: expected object with 'message'",
                status=resp.status_code,
                payload=payload,
                endpoint="transactions/new",
            )
        return message

    def mine(self) -> MineResult:
        payload = self._get_json("/mine", "mine")
        return self._validated(payload, MineResult.from_payload, "mine")

    def deploy_contract(self, draft: ContractDraft) -> ContractAddress:
        resp = self.session.post("/contracts/deploy", json_body=draft.to_payload())
        self.session.ensure_ok(resp, "contracts/deploy")
        payload = self.session.json_any(resp, "contracts/deploy")
        address = payload.get("address") if isinstance(payload, dict) else None
        if not isinstance(address, str) or not address.strip():
            raise RemoteSchemaError(
                "contracts/deploy: expected object with non-empty 'address'",
                status=resp.status_code,
                payload=payload,
                endpoint="contracts/deploy",
            )
        return address

    def execute_contract(self, address: ContractAddress, method: str, params: Any) -> None:
        ctx = f"contracts/execute[{address}]"
        resp = self.session.post(
            f"/contracts/{self._quote(address)}/execute",
            json_body={"method": method, "params": params},
        )
        # The ledger may answer with any body (or none); success is judged by status only.
        self.session.ensure_ok(resp, ctx)

    def read_contract_state(self, address: ContractAddress) -> Contract:
        ctx = f"contracts/state[{address}]"
        payload = self._get_json(f"/contracts/{self._quote(address)}/state", ctx)
        return self._validated(payload, Contract.from_payload, ctx)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_json(self, path: str, ctx: str) -> Any:
        resp = self.session.get(path)
        self.session.ensure_ok(resp, ctx)
        return self.session.json_any(resp, ctx)

    @staticmethod
    def _validated(payload: Any, parse: Callable[[Any], T], ctx: str) -> T:
        try:
            return parse(payload)
        except ValueError as exc:
            LOGGER.warning("Rejected malformed %s response: %s", ctx, exc)
            raise RemoteSchemaError(str(exc), payload=payload, endpoint=ctx) from exc

    @staticmethod
    def _quote(address: ContractAddress) -> str:
        cleaned = str(address or "").strip()
        if not cleaned:
            raise ValueError("Contract address must be a non-empty string.")
        return quote(cleaned, safe="")


__all__ = ["ChainRestAdapter"]
