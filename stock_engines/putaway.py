"""
Module: stock_engines.putaway
Responsibility:
    Rank storage locations of a warehouse for putting away received stock,
    preferring the emptiest shelves.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel.

Invariants enforced:
    - Only active locations of type STANDARD in the target warehouse are
      candidates.
    - Determinism: candidates are ordered by code before a stable sort on
      score, so equal scores keep code order.

Failure modes:
    - ValueError on a non-positive quantity or an invalid policy.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from stock_engines.tracer import traced_engine
from stock_kernel.domain.rounding import to_decimal
from stock_kernel.domain.stock import StockBucket
from stock_kernel.logging_config import get_logger

logger = get_logger("engines.putaway")


class LocationType(str, Enum):
    STANDARD = "STANDARD"
    RECEIVING = "RECEIVING"
    SHIPPING = "SHIPPING"
    QUARANTINE = "QUARANTINE"


@dataclass(frozen=True)
class LocationSnapshot:
    location_id: str
    warehouse_id: str
    code: str
    location_type: LocationType = LocationType.STANDARD
    is_active: bool = True


@dataclass(frozen=True)
class PutawayPolicy:
    """Scoring knobs: each bucket at a location counts ``bucket_weight`` units."""

    bucket_weight: int = 10
    limit: int = 5

    def __post_init__(self) -> None:
        if self.bucket_weight < 0:
            raise ValueError(f"bucket_weight cannot be negative, got {self.bucket_weight}")
        if self.limit < 1:
            raise ValueError(f"limit must be at least 1, got {self.limit}")


@dataclass(frozen=True)
class PutawaySuggestion:
    location_id: str
    code: str
    score: Decimal
    occupied_quantity: Decimal
    bucket_count: int
    recommended_quantity: Decimal


@traced_engine(
    "putaway",
    "1.0",
    fingerprint_fields=("locations", "buckets", "warehouse_id", "quantity", "policy"),
)
def suggest_putaway_locations(
    locations: Iterable[LocationSnapshot],
    buckets: Iterable[StockBucket],
    warehouse_id: str,
    quantity: Decimal | int,
    policy: PutawayPolicy | None = None,
) -> tuple[PutawaySuggestion, ...]:
    """Suggest up to ``policy.limit`` locations, lowest score first.

    score = stock held at the location + bucket count * bucket_weight
    """
    policy = policy or PutawayPolicy()
    amount = to_decimal(quantity)
    if amount <= 0:
        raise ValueError(f"Putaway quantity must be positive, got {amount}")

    candidates = sorted(
        (
            loc for loc in locations
            if loc.warehouse_id == warehouse_id
            and loc.is_active
            and loc.location_type is LocationType.STANDARD
        ),
        key=lambda loc: loc.code,
    )

    occupied: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for bucket in buckets:
        if bucket.location_id is None:
            continue
        occupied[bucket.location_id] = (
            occupied.get(bucket.location_id, Decimal("0")) + bucket.quantity
        )
        counts[bucket.location_id] = counts.get(bucket.location_id, 0) + 1

    suggestions = []
    for loc in candidates:
        held = occupied.get(loc.location_id, Decimal("0"))
        count = counts.get(loc.location_id, 0)
        suggestions.append(
            PutawaySuggestion(
                location_id=loc.location_id,
                code=loc.code,
                score=held + count * policy.bucket_weight,
                occupied_quantity=held,
                bucket_count=count,
                recommended_quantity=amount,
            )
        )
    suggestions.sort(key=lambda s: s.score)

    logger.debug("putaway_locations_scored", extra={
        "warehouse_id": warehouse_id,
        "candidate_count": len(candidates),
        "quantity": str(amount),
    })
    return tuple(suggestions[: policy.limit])
