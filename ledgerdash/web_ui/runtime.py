"""NiceGUI runtime composition for the ledger dashboard.

This module wires settings, adapters and the workflow orchestrator for the
web view. It owns no workflow logic of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Mapping, Optional

from ledgerdash.adapters.chain_rest import ChainRestAdapter
from ledgerdash.adapters.fraud_rest import FraudRestAdapter
from ledgerdash.adapters.ledger_mock import FraudMock, LedgerMock
from ledgerdash.domain.ports import ChainPort, FraudPort
from ledgerdash.domain.state import DashboardState, DashboardStore, StateListener
from ledgerdash.usecases.workflow_orchestrator import WorkflowOrchestrator, WorkflowResult
from ledgerdash.utils.logging import apply_debug_setting
from ledgerdash.viewmodels.settings_vm import SettingsVM


LOGGER = logging.getLogger(__name__)


@dataclass
class ContractForm:
    """Browser form state for the contract tab."""

    owner: str = ""
    contract_type: str = "token"
    initial_supply: str = ""
    method: str = ""
    params_text: str = ""


class DashboardRuntime:
    """Builds and caches the orchestrator from the current settings."""

    def __init__(
        self,
        settings_vm: Optional[SettingsVM] = None,
        *,
        port_factory: Optional[Callable[[SettingsVM], tuple[ChainPort, FraudPort]]] = None,
    ) -> None:
        self.settings_vm = settings_vm or SettingsVM.from_env()
        self.contract_form = ContractForm()
        self.status_message = "Ready."
        self.store = DashboardStore()
        self._port_factory = port_factory or build_ports
        self._orchestrator: Optional[WorkflowOrchestrator] = None
        apply_debug_setting(self.settings_vm.debug_logging)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    @property
    def orchestrator(self) -> WorkflowOrchestrator:
        if self._orchestrator is None:
            chain_port, fraud_port = self._port_factory(self.settings_vm)
            cfg = self.settings_vm.config
            self._orchestrator = WorkflowOrchestrator(
                chain_port,
                fraud_port,
                fraud_context=cfg.fraud_context(),
                contract_history=cfg.contract_history,
                store=self.store,
            )
            LOGGER.info(
                "Orchestrator ready (ledger=%s, fraud=%s, mock=%s, contracts=%s)",
                cfg.ledger_url,
                cfg.fraud_url,
                cfg.use_mock,
                cfg.contract_history,
            )
        return self._orchestrator

    @property
    def state(self) -> DashboardState:
        return self.store.state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def reset(self) -> None:
        """Drop the cached orchestrator so the next access rebuilds it."""
        self._orchestrator = None

    def apply_settings_payload(self, payload: Mapping[str, Any]) -> None:
        self.settings_vm.apply_dict(payload)
        apply_debug_setting(self.settings_vm.debug_logging)
        self.reset()
        self.status_message = "Settings applied."

    def settings_payload(self) -> dict:
        return self.settings_vm.to_dict()

    # ------------------------------------------------------------------
    # Workflows
    # ------------------------------------------------------------------
    async def load(self) -> WorkflowResult:
        return self._report("Chain loaded.", await self.orchestrator.refresh_chain())

    async def submit_transaction(self) -> WorkflowResult:
        result = await self.orchestrator.submit_transaction()
        if result.event == "gated":
            self.status_message = "Transaction blocked by fraud check."
            return result
        if result.event == "rejected":
            self.status_message = "A transaction is already being processed."
            return result
        return self._report("Transaction submitted.", result)

    async def mine(self) -> WorkflowResult:
        return self._report("Mining finished.", await self.orchestrator.mine())

    async def deploy_contract(self) -> WorkflowResult:
        form = self.contract_form
        result = await self.orchestrator.deploy_contract(
            form.owner, form.initial_supply, form.contract_type
        )
        return self._report("Contract deployed.", result)

    async def execute_contract(self) -> WorkflowResult:
        form = self.contract_form
        result = await self.orchestrator.execute_contract(form.method, form.params_text)
        return self._report("Contract executed.", result)

    async def read_contract_state(self) -> WorkflowResult:
        return self._report(
            "Contract state loaded.", await self.orchestrator.read_contract_state()
        )

    def _report(self, success: str, result: WorkflowResult) -> WorkflowResult:
        if result.ok and result.error is None:
            self.status_message = success
        elif result.error is not None:
            self.status_message = result.error.message
        return result


def build_ports(settings_vm: SettingsVM) -> tuple[ChainPort, FraudPort]:
    """Create REST adapters, or in-memory substitutes when ``use_mock`` is set."""
    cfg = settings_vm.config
    if cfg.use_mock:
        return LedgerMock(), FraudMock()
    if not settings_vm.is_valid():
        raise ValueError("Configure ledger and fraud service URLs first.")
    api_key = cfg.api_key or None
    return (
        ChainRestAdapter(cfg.ledger_url, api_key=api_key, request_timeout_s=cfg.request_timeout_s),
        FraudRestAdapter(cfg.fraud_url, api_key=api_key, request_timeout_s=cfg.request_timeout_s),
    )


__all__ = ["ContractForm", "DashboardRuntime", "build_ports"]
