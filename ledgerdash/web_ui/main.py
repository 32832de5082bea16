"""NiceGUI entrypoint for the ledger dashboard."""

from __future__ import annotations

import argparse
import json
import os
from typing import Any, Awaitable, Callable, Dict

from nicegui import context, ui

from ledgerdash.utils.logging import configure_root
from ledgerdash.viewmodels import dashboard_vm
from ledgerdash.viewmodels.settings_vm import SettingsVM, parse_settings_json
from ledgerdash.web_ui.runtime import DashboardRuntime


def _install_theme() -> None:
    """Install global CSS tokens for the dashboard."""
    ui.add_head_html(
        """
<style>
.ld-page { max-width: 1100px; margin: 0 auto; padding: 14px; }
.ld-card { border: 1px solid #d6dde8; border-radius: 12px; }
.ld-mono { font-family: monospace; }
.ld-truncate { overflow: hidden; text-overflow: ellipsis; white-space: nowrap; }
</style>
        """
    )


def _build_ui(runtime: DashboardRuntime) -> None:
    """Register the dashboard page for the runtime."""

    @ui.page("/")
    async def index() -> None:
        tx_inputs: Dict[str, Any] = {}

        def sync_transaction_inputs() -> None:
            """Push pending transaction fields into the form widgets."""
            draft = runtime.state.pending_transaction
            tx_inputs["sender"].value = draft.sender
            tx_inputs["recipient"].value = draft.recipient
            tx_inputs["amount"].value = draft.amount

        @ui.refreshable
        def render_status() -> None:
            with ui.row().classes("w-full justify-between items-center"):
                ui.label("Blockchain Dashboard").classes("text-h5")
                ui.label(runtime.status_message).classes("ld-mono text-caption")
            if runtime.state.last_error:
                ui.label(runtime.state.last_error).classes("text-negative")

        @ui.refreshable
        def render_fraud_alert() -> None:
            alert = dashboard_vm.fraud_alert(runtime.state)
            if alert is None:
                return
            with ui.card().classes(f"w-full bg-{alert.tone}-1 ld-card"):
                ui.label(f"{alert.text} {alert.detail}")

        @ui.refreshable
        def render_submit_button() -> None:
            button = ui.button(
                dashboard_vm.submit_label(runtime.state),
                on_click=lambda: run(runtime.submit_transaction, after=sync_transaction_inputs),
            ).classes("w-full")
            if runtime.state.is_submitting:
                button.disable()

        @ui.refreshable
        def render_mine_button() -> None:
            button = ui.button(
                dashboard_vm.mine_label(runtime.state),
                on_click=lambda: run(runtime.mine),
            ).classes("w-full")
            if runtime.state.is_mining:
                button.disable()

        @ui.refreshable
        def render_mine_alert() -> None:
            alert = dashboard_vm.mine_alert(runtime.state)
            if alert is None:
                return
            with ui.card().classes(f"w-full bg-{alert.tone}-1 ld-card"):
                ui.label(alert.text).classes("ld-truncate")
                ui.label(alert.detail).classes("ld-mono text-caption ld-truncate")

        @ui.refreshable
        def render_contracts() -> None:
            for card in dashboard_vm.contract_cards(runtime.state.contracts):
                with ui.card().classes("w-full ld-card"):
                    ui.label(card.title).classes("text-subtitle2")
                    ui.label(card.owner_label).classes("text-caption")
                    ui.code(card.state_json, language="json").classes("w-full")

        @ui.refreshable
        def render_chain() -> None:
            ui.echart(dashboard_vm.chain_chart_options(runtime.state.chain)).classes("w-full h-80")
            for row in dashboard_vm.block_rows(runtime.state.chain):
                with ui.card().classes("w-full ld-card"):
                    ui.label(row.title).classes("text-subtitle2")
                    ui.label(row.hash_label).classes("ld-mono text-caption ld-truncate")
                    ui.label(f"Transactions: {row.transaction_count}")

        def refresh_all() -> None:
            render_status.refresh()
            render_fraud_alert.refresh()
            render_submit_button.refresh()
            render_mine_button.refresh()
            render_mine_alert.refresh()
            render_contracts.refresh()
            render_chain.refresh()

        async def run(
            action: Callable[[], Awaitable[Any]],
            *,
            after: Callable[[], None] | None = None,
        ) -> None:
            """Run a runtime workflow; store events re-render the views meanwhile."""
            try:
                await action()
            except ValueError as exc:
                # Raised while building ports from incomplete settings.
                ui.notify(str(exc), color="negative", close_button="OK")
                return
            if after is not None:
                after()
            render_status.refresh()

        def apply_settings_text(text: str) -> None:
            try:
                runtime.apply_settings_payload(parse_settings_json(text))
            except ValueError as exc:
                ui.notify(str(exc), color="negative", close_button="OK")
                return
            ui.notify("Settings applied.", color="positive")

        form = runtime.contract_form
        with ui.column().classes("ld-page w-full"):
            render_status()
            with ui.tabs().classes("w-full") as tabs:
                tab_tx = ui.tab("Transactions")
                tab_mine = ui.tab("Mining")
                tab_contracts = ui.tab("Contracts")
                tab_chain = ui.tab("Blockchain")
                tab_settings = ui.tab("Settings")
            with ui.tab_panels(tabs, value=tab_tx).classes("w-full"):
                with ui.tab_panel(tab_tx):
                    tx_inputs["sender"] = ui.input(
                        "Sender Address",
                        on_change=lambda e: runtime.orchestrator.edit_transaction(sender=str(e.value or "")),
                    ).classes("w-full")
                    tx_inputs["recipient"] = ui.input(
                        "Recipient Address",
                        on_change=lambda e: runtime.orchestrator.edit_transaction(recipient=str(e.value or "")),
                    ).classes("w-full")
                    tx_inputs["amount"] = ui.input(
                        "Amount",
                        on_change=lambda e: runtime.orchestrator.edit_transaction(amount=str(e.value or "")),
                    ).classes("w-full")
                    render_submit_button()
                    render_fraud_alert()
                with ui.tab_panel(tab_mine):
                    render_mine_button()
                    render_mine_alert()
                with ui.tab_panel(tab_contracts):
                    ui.input("Contract Owner", on_change=lambda e: setattr(form, "owner", str(e.value or ""))).classes("w-full")
                    ui.input("Initial Supply", on_change=lambda e: setattr(form, "initial_supply", str(e.value or ""))).classes("w-full")
                    ui.button(
                        "Deploy Token Contract",
                        on_click=lambda: run(
                            runtime.deploy_contract,
                            after=lambda: address_input.set_value(runtime.state.contract_address),
                        ),
                    ).classes("w-full")
                    ui.separator()
                    address_input = ui.input(
                        "Contract Address",
                        value=runtime.state.contract_address,
                        on_change=lambda e: runtime.orchestrator.set_contract_address(str(e.value or "")),
                    ).classes("w-full")
                    ui.input("Method Name", on_change=lambda e: setattr(form, "method", str(e.value or ""))).classes("w-full")
                    ui.input("Method Parameters (JSON)", on_change=lambda e: setattr(form, "params_text", str(e.value or ""))).classes("w-full")
                    with ui.row():
                        ui.button("Execute Contract", on_click=lambda: run(runtime.execute_contract))
                        ui.button("Read State", on_click=lambda: run(runtime.read_contract_state))
                    render_contracts()
                with ui.tab_panel(tab_chain):
                    ui.button("Reload Chain", on_click=lambda: run(runtime.load))
                    render_chain()
                with ui.tab_panel(tab_settings):
                    settings_text = ui.textarea(
                        "Settings (JSON)",
                        value=_settings_json(runtime.settings_vm),
                    ).classes("w-full ld-mono")
                    ui.button("Apply Settings", on_click=lambda: apply_settings_text(str(settings_text.value or "")))

        unsubscribe = runtime.subscribe(lambda _state: refresh_all())
        context.client.on_disconnect(unsubscribe)
        await run(runtime.load)


def _settings_json(settings_vm: SettingsVM) -> str:
    return json.dumps(settings_vm.to_dict(), indent=2)


def _parse_args() -> argparse.Namespace:
    """Parse CLI args for web runtime startup."""
    parser = argparse.ArgumentParser(description="Run the ledger dashboard web UI.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument("--mock", action="store_true", help="Use in-memory ledger and scorer.")
    parser.add_argument("--smoke-test", action="store_true")
    return parser.parse_args()


def main() -> None:
    """CLI entrypoint for the NiceGUI runtime."""
    args = _parse_args()
    configure_root()
    settings_vm = SettingsVM.from_env()
    if args.mock:
        settings_vm.apply_dict({"use_mock": True})
    runtime = DashboardRuntime(settings_vm)
    if args.smoke_test:
        payload = runtime.settings_payload()
        print("web-smoke-ok", payload["ledger_url"], payload["fraud_url"])
        return
    _install_theme()
    _build_ui(runtime)
    ui.run(
        host=args.host,
        port=args.port,
        title="Ledger Dashboard",
        reload=args.reload,
        show=False,
        storage_secret=os.environ.get("LEDGERDASH_STORAGE_SECRET", "ledgerdash-web-secret"),
    )


if __name__ in {"__main__", "__mp_main__"}:
    main()
