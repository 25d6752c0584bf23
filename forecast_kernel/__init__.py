"""
Forecast Kernel

Shared primitives for the revenue forecast engine:
- Structured JSON logging
- Typed exception hierarchy
- Injectable clock
- Immutable input records (contracts, invoice ledger rows)
"""

__version__ = "0.1.0"
