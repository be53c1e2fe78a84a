"""
Pocket Ledger - Source Package

The local persistence and aggregation layer of a personal expense tracker.
A presentation layer (screens, charts, sheets) calls into this package to
record expenses, keep user preferences and read back the totals it renders.

DESIGN PRINCIPLES:
1. One database handle, created once and injected everywhere
2. Schema migrations run exactly once, even under concurrent first use
3. Bad input is rejected before anything is written
4. Errors surface to the caller; the core never retries silently
5. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Pocket Ledger Team"
