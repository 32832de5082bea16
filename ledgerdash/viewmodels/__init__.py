"""ViewModel package for settings state and view-facing projections.

Dependencies:
    Modules in this package depend on domain types and lightweight formatting
    helpers only. I/O adapters and use-case orchestration remain outside.
"""
