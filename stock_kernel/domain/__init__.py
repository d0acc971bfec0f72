"""
Pure domain layer.

This module contains value objects and helpers with NO dependencies on:
- Persistence
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from stock_kernel.domain.rounding import round_minor, to_decimal
from stock_kernel.domain.stock import StockBucket

__all__ = [
    "StockBucket",
    "round_minor",
    "to_decimal",
]
