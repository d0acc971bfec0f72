"""
Stock Kernel - shared infrastructure for the inventory computation engines.

Provides:
- Structured JSON logging with request-scoped context
- A typed exception hierarchy with machine-readable codes
- Pure domain value helpers (rounding, stock bucket snapshots)
"""

__version__ = "0.1.0"
