"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports: the ledger and fraud
    REST clients plus offline in-memory substitutes.

Dependencies:
    REST submodules depend on ``requests`` and the domain protocol
    definitions.

Call context:
    Imported by ``ledgerdash.web_ui.runtime`` (for runtime wiring) and by tests
    (for transport-level behavior verification).
"""
