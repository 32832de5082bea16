from __future__ import annotations

import pytest

from ledgerdash.domain.models import Contract
from ledgerdash.domain.state import (
    ContractHistoryMode,
    DashboardState,
    DashboardStore,
    merge_contract,
)


def test_store_replaces_snapshot_and_notifies_listeners() -> None:
    store = DashboardStore()
    seen = []
    store.subscribe(seen.append)
    before = store.state

    after = store.apply("test", last_error="boom")

    assert before.last_error is None
    assert after.last_error == "boom"
    assert store.state is after
    assert seen == [after]


def test_store_unsubscribe_stops_notifications() -> None:
    store = DashboardStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    unsubscribe()
    store.apply("test", is_mining=True)
    assert seen == []


def test_failing_listener_does_not_block_others() -> None:
    store = DashboardStore()
    seen = []

    def _broken(_state: DashboardState) -> None:
        raise RuntimeError("view crashed")

    store.subscribe(_broken)
    store.subscribe(seen.append)
    store.apply("test", is_submitting=True)

    assert len(seen) == 1
    assert store.state.is_submitting is True


def test_snapshot_is_read_only() -> None:
    state = DashboardState()
    with pytest.raises(AttributeError):
        state.last_error = "x"  # type: ignore[misc]


def test_merge_contract_append_keeps_history() -> None:
    first = Contract(address="0x1", owner="a", state={"v": 1})
    second = Contract(address="0x1", owner="a", state={"v": 2})

    merged = merge_contract((first,), second, ContractHistoryMode.APPEND)

    assert merged == (first, second)


def test_merge_contract_upsert_replaces_in_place() -> None:
    other = Contract(address="0x2", owner="b", state=None)
    first = Contract(address="0x1", owner="a", state={"v": 1})
    second = Contract(address="0x1", owner="a", state={"v": 2})
    third = Contract(address="0x3", owner="c", state=None)

    merged = merge_contract((first, other), second, ContractHistoryMode.UPSERT)
    assert merged == (second, other)
    assert merge_contract(merged, third, ContractHistoryMode.UPSERT) == (second, other, third)


def test_contract_history_mode_coerce() -> None:
    assert ContractHistoryMode.coerce(" UPSERT ") is ContractHistoryMode.UPSERT
    assert ContractHistoryMode.coerce(ContractHistoryMode.APPEND) is ContractHistoryMode.APPEND
    with pytest.raises(ValueError):
        ContractHistoryMode.coerce("merge")


def test_store_counts_in_flight_operations_per_kind() -> None:
    store = DashboardStore()

    assert store.begin("deploy") == 1
    assert store.begin("deploy") == 2
    assert store.begin("read") == 1
    assert store.finish("deploy") == 1
    assert store.in_flight("deploy") == 1
    assert store.in_flight("read") == 1
    assert store.finish("deploy") == 0
    assert store.finish("deploy") == 0
    assert store.in_flight("mine") == 0
