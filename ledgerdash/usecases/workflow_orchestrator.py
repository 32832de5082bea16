from __future__ import annotations

"""Coordinator for the dashboard's fraud-gated ledger workflows, free of UI concerns."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from ledgerdash.adapters.api_errors import RemoteError
from ledgerdash.domain.errors import DomainFailure, ValidationError
from ledgerdash.domain.models import (
    Contract,
    FraudAssessment,
    FraudContext,
    MineResult,
    TransactionDraft,
)
from ledgerdash.domain.ports import ChainPort, FraudPort, UseCaseError
from ledgerdash.domain.state import (
    ContractHistoryMode,
    DashboardState,
    DashboardStore,
    DeployPhase,
    ExecutePhase,
    MiningPhase,
    ReadPhase,
    TransactionPhase,
    merge_contract,
)
from ledgerdash.usecases.error_mapping import map_error
from ledgerdash.usecases.validate_input import (
    ExecuteRequest,
    require_address,
    validate_deploy,
    validate_execute,
    validate_transaction,
)

LOGGER = logging.getLogger(__name__)

Runner = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class WorkflowResult:
    """Outcome of one workflow invocation."""

    event: str
    """Outcome classification: 'committed', 'gated', 'failed', 'invalid', 'rejected' or 'done'."""
    value: Any = None
    """Workflow payload when available (assessment, mine result, address, contract)."""
    error: Optional[UseCaseError] = None
    """Mapped failure, or the ``DomainFailure`` reported by a successful call."""

    @property
    def ok(self) -> bool:
        return self.event in ("committed", "gated", "done")


class WorkflowOrchestrator:
    """Runs dashboard workflows against the ledger and fraud ports.

    Every workflow method is a coroutine that never raises for validation,
    transport or domain failures: the outcome is returned as a
    ``WorkflowResult`` and the human-readable message is stored in
    ``state.last_error``. Port calls are blocking and are awaited through
    ``runner`` (``asyncio.to_thread`` by default); state is only touched on
    the event loop between those awaits.
    """

    def __init__(
        self,
        chain_port: ChainPort,
        fraud_port: FraudPort,
        *,
        fraud_context: Optional[FraudContext] = None,
        contract_history: ContractHistoryMode | str = ContractHistoryMode.APPEND,
        store: Optional[DashboardStore] = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self.chain_port = chain_port
        self.fraud_port = fraud_port
        self.fraud_context = fraud_context or FraudContext()
        self.contract_history = ContractHistoryMode.coerce(contract_history)
        self._store = store or DashboardStore()
        self._runner: Runner = runner or asyncio.to_thread

    # ------------------------------------------------------------------
    # Read view
    # ------------------------------------------------------------------
    @property
    def state(self) -> DashboardState:
        return self._store.state

    # ------------------------------------------------------------------
    # Form edits
    # ------------------------------------------------------------------
    def edit_transaction(
        self,
        *,
        sender: Optional[str] = None,
        recipient: Optional[str] = None,
        amount: Optional[str] = None,
    ) -> None:
        """Update pending transaction fields; ``None`` keeps the current value."""
        current = self.state.pending_transaction
        draft = TransactionDraft(
            sender=current.sender if sender is None else str(sender),
            recipient=current.recipient if recipient is None else str(recipient),
            amount=current.amount if amount is None else str(amount),
        )
        self._store.apply("form.transaction", pending_transaction=draft)

    def set_contract_address(self, address: str) -> None:
        self._store.apply("form.contract_address", contract_address=str(address or "").strip())

    # ------------------------------------------------------------------
    # Chain workflow
    # ------------------------------------------------------------------
    async def refresh_chain(self) -> WorkflowResult:
        """Replace the chain view with a fresh read of the whole chain."""
        self._store.apply("chain.loading", last_error=None)
        error = await self._reload_chain()
        if error is not None:
            return WorkflowResult(event="failed", error=error)
        return WorkflowResult(event="done", value=self.state.chain)

    # ------------------------------------------------------------------
    # Transaction workflow
    # ------------------------------------------------------------------
    async def submit_transaction(self) -> WorkflowResult:
        """Validate, score and (when not anomalous) submit the pending transaction."""
        if self.state.is_submitting:
            LOGGER.info("Transaction submit ignored: a submission is already in flight")
            return WorkflowResult(event="rejected")

        self._store.apply(
            "transaction.validating",
            is_submitting=True,
            transaction_phase=TransactionPhase.VALIDATING,
            last_error=None,
        )
        try:
            return await self._run_transaction()
        finally:
            self._store.apply(
                "transaction.idle",
                is_submitting=False,
                transaction_phase=TransactionPhase.IDLE,
            )

    async def _run_transaction(self) -> WorkflowResult:
        try:
            tx = validate_transaction(self.state.pending_transaction)
        except ValidationError as exc:
            LOGGER.info("Transaction rejected by validation: %s", exc.code)
            self._store.apply("transaction.invalid", last_error=exc.message)
            return WorkflowResult(event="invalid", error=exc)

        self._store.apply(
            "transaction.scoring",
            transaction_phase=TransactionPhase.SCORING,
            last_fraud_assessment=None,
            last_transaction_message=None,
        )
        try:
            assessment: FraudAssessment = await self._call(
                self.fraud_port.score, tx, self.fraud_context
            )
        except Exception as exc:
            return self._failed("Transaction failed", exc, "TRANSACTION_FAILED")

        if assessment.anomaly:
            LOGGER.warning(
                "Transaction %s -> %s gated by fraud score %.4f",
                tx.sender,
                tx.recipient,
                assessment.error,
            )
            self._store.apply("transaction.gated", last_fraud_assessment=assessment)
            return WorkflowResult(event="gated", value=assessment)

        self._store.apply(
            "transaction.submitting",
            transaction_phase=TransactionPhase.SUBMITTING,
            last_fraud_assessment=assessment,
        )
        try:
            message: str = await self._call(self.chain_port.submit_transaction, tx)
        except Exception as exc:
            return self._failed("Transaction failed", exc, "TRANSACTION_FAILED")

        LOGGER.info("Transaction committed: %s", message)
        self._store.apply(
            "transaction.committed",
            last_transaction_message=message,
            pending_transaction=TransactionDraft(),
        )
        await self._reload_chain()
        return WorkflowResult(event="committed", value=assessment)

    # ------------------------------------------------------------------
    # Mining workflow
    # ------------------------------------------------------------------
    async def mine(self) -> WorkflowResult:
        """Ask the ledger to forge a block and record its answer verbatim."""
        self._begin("mine", is_mining=True, mining_phase=MiningPhase.MINING, last_error=None)
        try:
            try:
                result: MineResult = await self._call(self.chain_port.mine)
            except Exception as exc:
                return self._failed("Mining failed", exc, "MINING_FAILED")

            self._store.apply("mine.recorded", last_mine_result=result)
            failure: Optional[DomainFailure] = None
            if not result.forged:
                failure = DomainFailure("BLOCK_NOT_FORGED", result.message)
                LOGGER.warning("Mining did not forge a block: %s", result.message)
            else:
                LOGGER.info("Block %s forged with proof %s", result.index, result.proof)
            await self._reload_chain()
            return WorkflowResult(event="done", value=result, error=failure)
        finally:
            self._finish("mine", is_mining=False, mining_phase=MiningPhase.IDLE)

    # ------------------------------------------------------------------
    # Contract workflows
    # ------------------------------------------------------------------
    async def deploy_contract(
        self, owner: str, initial_supply: str, contract_type: str = "token"
    ) -> WorkflowResult:
        """Deploy a contract and remember its address for later calls."""
        try:
            draft = validate_deploy(owner, initial_supply, contract_type)
        except ValidationError as exc:
            self._store.apply("deploy.invalid", last_error=exc.message)
            return WorkflowResult(event="invalid", error=exc)

        self._begin("deploy", deploy_phase=DeployPhase.DEPLOYING, last_error=None)
        try:
            try:
                address: str = await self._call(self.chain_port.deploy_contract, draft)
            except Exception as exc:
                return self._failed("Contract deployment failed", exc, "DEPLOY_FAILED")
            LOGGER.info("Deployed %s contract for %s at %s", draft.type, draft.owner, address)
            self._store.apply("deploy.done", contract_address=address)
            return WorkflowResult(event="done", value=address)
        finally:
            self._finish("deploy", deploy_phase=DeployPhase.IDLE)

    async def execute_contract(
        self, method: str, params_text: str, address: Optional[str] = None
    ) -> WorkflowResult:
        """Invoke a contract method, then read back and record its state."""
        target = self.state.contract_address if address is None else address
        try:
            request = validate_execute(target, method, params_text)
        except ValidationError as exc:
            self._store.apply("execute.invalid", last_error=exc.message)
            return WorkflowResult(event="invalid", error=exc)

        self._begin("execute", execute_phase=ExecutePhase.EXECUTING, last_error=None)
        try:
            try:
                contract = await self._execute_and_read(request)
            except Exception as exc:
                return self._failed("Contract execution failed", exc, "EXECUTE_FAILED")
            self._record_contract("execute.done", contract)
            return WorkflowResult(event="done", value=contract)
        finally:
            self._finish("execute", execute_phase=ExecutePhase.IDLE)

    async def read_contract_state(self, address: Optional[str] = None) -> WorkflowResult:
        """Read the state of ``address`` (default: the current contract address)."""
        target = self.state.contract_address if address is None else address
        try:
            cleaned = require_address(target)
        except ValidationError as exc:
            self._store.apply("read.invalid", last_error=exc.message)
            return WorkflowResult(event="invalid", error=exc)

        self._begin("read", read_phase=ReadPhase.READING, last_error=None)
        try:
            try:
                contract: Contract = await self._call(
                    self.chain_port.read_contract_state, cleaned
                )
            except Exception as exc:
                return self._failed(
                    "Failed to fetch contract state", exc, "CONTRACT_STATE_FAILED"
                )
            self._record_contract("read.done", contract)
            return WorkflowResult(event="done", value=contract)
        finally:
            self._finish("read", read_phase=ReadPhase.IDLE)

    async def _execute_and_read(self, request: ExecuteRequest) -> Contract:
        await self._call(
            self.chain_port.execute_contract, request.address, request.method, request.params
        )
        self._store.apply("execute.reading", execute_phase=ExecutePhase.READING)
        return await self._call(self.chain_port.read_contract_state, request.address)

    def _record_contract(self, event: str, contract: Contract) -> None:
        merged = merge_contract(self.state.contracts, contract, self.contract_history)
        self._store.apply(event, contracts=merged)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return await self._runner(fn, *args)

    def _begin(self, operation: str, **changes: Any) -> None:
        self._store.begin(operation)
        self._store.apply(f"{operation}.started", **changes)

    def _finish(self, operation: str, **idle: Any) -> None:
        """Apply the idle fields once no other ``operation`` is still running."""
        if self._store.finish(operation) == 0:
            self._store.apply(f"{operation}.idle", **idle)

    async def _reload_chain(self) -> Optional[UseCaseError]:
        try:
            chain = await self._call(self.chain_port.read_chain)
        except Exception as exc:
            mapped = map_error(exc, default_code="CHAIN_FETCH_FAILED")
            LOGGER.warning(
                "Chain refresh failed [%s] at %s: %s",
                mapped.code,
                _endpoint(exc),
                mapped.message,
            )
            self._store.apply(
                "chain.failed",
                last_error=f"Failed to fetch blockchain data: {mapped.message}",
            )
            return mapped
        self._store.apply("chain.loaded", chain=tuple(chain))
        return None

    def _failed(self, label: str, exc: Exception, default_code: str) -> WorkflowResult:
        mapped = map_error(exc, default_code=default_code)
        LOGGER.warning("%s [%s] at %s: %s", label, mapped.code, _endpoint(exc), mapped.message)
        self._store.apply("workflow.failed", last_error=f"{label}: {mapped.message}")
        return WorkflowResult(event="failed", error=mapped)


def _endpoint(exc: Exception) -> str:
    if isinstance(exc, RemoteError) and exc.endpoint:
        return exc.endpoint
    return type(exc).__name__


__all__ = ["Runner", "WorkflowOrchestrator", "WorkflowResult"]
