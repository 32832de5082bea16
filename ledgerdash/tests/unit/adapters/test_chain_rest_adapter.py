from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Sequence

import pytest
from requests import exceptions as req_exc

from ledgerdash.adapters.api_errors import (
    RemoteClientError,
    RemoteSchemaError,
    RemoteServerError,
    RemoteTimeoutError,
)
from ledgerdash.adapters.chain_rest import ChainRestAdapter
from ledgerdash.domain.models import ContractDraft, Transaction


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200, *, raw: Optional[str] = None) -> None:
        self._payload = payload
        self._raw = raw
        self.status_code = status_code
        self.text = raw if raw is not None else str(payload)

    def json(self) -> Any:
        if self._raw is not None:
            return json.loads(self._raw)
        return self._payload


class _SessionStub:
    def __init__(self, responses: Sequence[Any]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self, call: Dict[str, Any]) -> _ResponseStub:
        self.calls.append(call)
        if not self._responses:
            raise RuntimeError("No stub response configured")
        resp = self._responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def get(self, url: str, *, headers: Dict[str, str], timeout: float) -> _ResponseStub:
        return self._next({"method": "GET", "url": url, "headers": headers, "timeout": timeout})

    def post(
        self, url: str, *, data: Optional[str], headers: Dict[str, str], timeout: float
    ) -> _ResponseStub:
        body = json.loads(data) if data is not None else None
        return self._next(
            {"method": "POST", "url": url, "body": body, "headers": headers, "timeout": timeout}
        )


def _adapter(responses: Sequence[Any], **kwargs: Any) -> tuple[ChainRestAdapter, _SessionStub]:
    adapter = ChainRestAdapter("http://ledger.local:5000/", **kwargs)
    stub = _SessionStub(responses)
    adapter.session.session = stub  # type: ignore[assignment]
    return adapter, stub


def test_read_chain_uses_chain_endpoint_and_parses_blocks() -> None:
    payload = {
        "chain": [{"index": 0, "previous_hash": "1", "proof": 100, "transactions": []}],
        "length": 1,
    }
    adapter, stub = _adapter([_ResponseStub(payload)], request_timeout_s=3, api_key="secret")

    chain = adapter.read_chain()

    assert [block.proof for block in chain] == [100]
    call = stub.calls[0]
    assert call["url"] == "http://ledger.local:5000/chain"
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["X-API-Key"] == "secret"
    assert call["timeout"] == 3


def test_read_chain_rejects_malformed_blocks() -> None:
    adapter, _ = _adapter([_ResponseStub({"chain": [{"index": "zero"}]})])

    with pytest.raises(RemoteSchemaError):
        adapter.read_chain()


def test_read_chain_rejects_invalid_json() -> None:
    adapter, _ = _adapter([_ResponseStub(None, raw="<html>oops</html>")])

    with pytest.raises(RemoteSchemaError) as excinfo:
        adapter.read_chain()
    assert "invalid JSON" in str(excinfo.value)


def test_submit_transaction_posts_body_and_returns_message() -> None:
    adapter, stub = _adapter([_ResponseStub({"message": "Transaction will be added to Block 2"}, 201)])

    message = adapter.submit_transaction(Transaction("alice", "bob", "10"))

    assert message == "Transaction will be added to Block 2"
    call = stub.calls[0]
    assert call["url"] == "http://ledger.local:5000/transactions/new"
    assert call["body"] == {"sender": "alice", "recipient": "bob", "amount": "10"}
    assert call["headers"]["Content-Type"] == "application/json"


def test_submit_transaction_requires_message_field() -> None:
    adapter, _ = _adapter([_ResponseStub({"status": "ok"})])

    with pytest.raises(RemoteSchemaError):
        adapter.submit_transaction(Transaction("alice", "bob", "10"))


def test_submit_transaction_maps_client_error() -> None:
    adapter, _ = _adapter([_ResponseStub({"message": "Missing values"}, 400)])

    with pytest.raises(RemoteClientError) as excinfo:
        adapter.submit_transaction(Transaction("alice", "bob", "10"))
    assert excinfo.value.status == 400
    assert excinfo.value.hint == "Missing values"
    assert excinfo.value.endpoint == "transactions/new"
    assert "Missing values" in str(excinfo.value)


def test_plain_text_error_body_becomes_hint() -> None:
    adapter, _ = _adapter([_ResponseStub(None, 400, raw="Missing values")])

    with pytest.raises(RemoteClientError) as excinfo:
        adapter.submit_transaction(Transaction("alice", "bob", "10"))
    assert excinfo.value.hint == "Missing values"
    assert excinfo.value.payload == "Missing values"


def test_mine_returns_domain_failure_as_result() -> None:
    payload = {
        "index": 3,
        "message": "No proof found",
        "previous_hash": "abc",
        "proof": 0,
        "transactions": [],
    }
    adapter, stub = _adapter([_ResponseStub(payload)])

    result = adapter.mine()

    assert stub.calls[0]["url"] == "http://ledger.local:5000/mine"
    assert result.message == "No proof found"
    assert result.forged is False


def test_mine_server_error_is_remote_error() -> None:
    adapter, _ = _adapter([_ResponseStub("boom", 503)])

    with pytest.raises(RemoteServerError) as excinfo:
        adapter.mine()
    assert "HTTP 503" in str(excinfo.value)


def test_timeout_is_reported_without_retry() -> None:
    adapter, stub = _adapter([req_exc.ConnectTimeout("slow"), _ResponseStub({})])

    with pytest.raises(RemoteTimeoutError):
        adapter.mine()
    assert len(stub.calls) == 1


def test_deploy_contract_posts_draft_and_returns_address() -> None:
    adapter, stub = _adapter([_ResponseStub({"address": "0xabc"})])

    address = adapter.deploy_contract(
        ContractDraft(owner="alice", params={"initial_supply": "1000"})
    )

    assert address == "0xabc"
    assert stub.calls[0]["url"] == "http://ledger.local:5000/contracts/deploy"
    assert stub.calls[0]["body"] == {
        "owner": "alice",
        "type": "token",
        "params": {"initial_supply": "1000"},
    }


def test_deploy_contract_requires_address() -> None:
    adapter, _ = _adapter([_ResponseStub({"address": ""})])

    with pytest.raises(RemoteSchemaError):
        adapter.deploy_contract(ContractDraft(owner="alice"))


def test_execute_contract_ignores_response_body() -> None:
    adapter, stub = _adapter([_ResponseStub(None, raw="")])

    adapter.execute_contract("0x a/b", "transfer", {"to": "bob", "amount": 5})

    call = stub.calls[0]
    assert call["url"] == "http://ledger.local:5000/contracts/0x%20a%2Fb/execute"
    assert call["body"] == {"method": "transfer", "params": {"to": "bob", "amount": 5}}


def test_execute_contract_failure_status_raises() -> None:
    adapter, _ = _adapter([_ResponseStub({"error": "unknown method"}, 404)])

    with pytest.raises(RemoteClientError):
        adapter.execute_contract("0xabc", "burn", {})


def test_read_contract_state_parses_contract() -> None:
    payload = {"address": "0xabc", "owner": "alice", "state": {"total_supply": 10}}
    adapter, stub = _adapter([_ResponseStub(payload)])

    contract = adapter.read_contract_state("0xabc")

    assert stub.calls[0]["url"] == "http://ledger.local:5000/contracts/0xabc/state"
    assert contract.owner == "alice"
    assert contract.state == {"total_supply": 10}


def test_adapter_requires_base_url() -> None:
    with pytest.raises(ValueError):
        ChainRestAdapter("  ")
