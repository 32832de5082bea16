"""Operator dashboard for a remote ledger node gated by a fraud-scoring service."""

__version__ = "0.1.0"
