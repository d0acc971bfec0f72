"""
Pytest fixtures for the stock engines test suite.

Provides:
- Structured logging configured for every test run
- ``captured_logs`` for asserting on emitted log records
- Snapshot factories for stock buckets
"""

import json
import logging
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from io import StringIO

import pytest

from stock_kernel.domain.stock import StockBucket
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Fixed reference time for all engine tests; engines never read the clock.
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            build_category_hierarchy(...)
            logs = captured_logs()
            assert any(r["message"] == "STOCK_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Snapshot factories
# =============================================================================


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_bucket():
    """
    Factory for StockBucket snapshots with sensible defaults.

    ``received_days_ago`` and ``expires_in_days`` are relative to NOW.
    """

    def _make(
        bucket_id: str,
        quantity,
        *,
        product_id: str = "P1",
        warehouse_id: str = "W1",
        reserved=0,
        received_days_ago: int = 10,
        expires_in_days: int | None = None,
        location_id: str | None = None,
        batch_number: str | None = None,
        serial_number: str | None = None,
        unit_cost: int | None = None,
    ) -> StockBucket:
        return StockBucket(
            bucket_id=bucket_id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity=Decimal(str(quantity)),
            reserved_quantity=Decimal(str(reserved)),
            created_at=NOW - timedelta(days=received_days_ago),
            expiry_date=(
                NOW + timedelta(days=expires_in_days)
                if expires_in_days is not None
                else None
            ),
            location_id=location_id,
            batch_number=batch_number,
            serial_number=serial_number,
            unit_cost=unit_cost,
        )

    return _make
