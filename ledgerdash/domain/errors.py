"""Domain-level error types for use-case and adapter mapping.

Transport failures live in :mod:`ledgerdash.adapters.api_errors`; the types
here describe failures that never involve the network (bad input) or that
arrive inside a successful response (negative domain outcome).
"""
from __future__ import annotations

from .ports import UseCaseError


class ValidationError(UseCaseError):
    """Operator input rejected before any remote call was issued."""


class DomainFailure(UseCaseError):
    """A successful response that nonetheless reports a negative outcome."""


__all__ = ["DomainFailure", "ValidationError"]
