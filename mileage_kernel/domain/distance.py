"""
Distance Helpers (``mileage_kernel.domain.distance``).

Responsibility
--------------
Pure functions for trip distances: the straight-line route estimate with a
road correction factor, the manual-versus-computed resolution applied when a
trip record is created, and the monthly distance sum used by settlement.

Architecture position
---------------------
**Kernel domain layer** -- no I/O, no session, no clock.  Called by
``TripRecordService``, ``SubmissionService`` and the selectors.

Invariants enforced
-------------------
* Stored distances are ``Decimal`` and never negative.
* A present, non-blank manual value always wins over the computed value.
* ``sum_distance`` treats missing or non-numeric distances as zero, so the
  same set of records always sums to the same value.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from mileage_kernel.domain.values import is_blank, parse_decimal, try_decimal
from mileage_kernel.exceptions import ValidationError

EARTH_RADIUS_KM = 6371.0
DEFAULT_ROAD_CORRECTION_FACTOR = Decimal("1.3")
DEFAULT_DISTANCE_PRECISION = Decimal("0.1")


@dataclass(frozen=True)
class Coordinate:
    """A geocoded point (degrees)."""

    latitude: float
    longitude: float


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def estimate_route_distance(
    points: Sequence[Coordinate],
    correction_factor: Decimal = DEFAULT_ROAD_CORRECTION_FACTOR,
    precision: Decimal = DEFAULT_DISTANCE_PRECISION,
) -> Decimal:
    """
    Estimate road distance along departure, waypoints..., destination.

    Preconditions:
        - ``points`` is ordered as driven.
        - ``correction_factor`` > 0.
    Postconditions:
        - Returns the sum of consecutive straight-line legs times
          ``correction_factor``, rounded half-up to ``precision``.
        - Fewer than two points yields ``Decimal("0")`` at ``precision``.
    """
    if correction_factor <= 0:
        raise ValidationError("correction_factor", "must be greater than zero")
    straight = sum(
        (haversine_km(points[i - 1], points[i]) for i in range(1, len(points))),
        0.0,
    )
    road = Decimal(str(straight)) * correction_factor
    return road.quantize(precision, rounding=ROUND_HALF_UP)


def resolve_distance(
    computed: Any,
    manual: Any = None,
    round_trip: bool = False,
) -> tuple[Decimal, bool]:
    """
    Decide which distance a new trip record stores.

    Preconditions:
        - ``computed`` is the route estimate (may be None if no estimate).
        - ``manual`` is whatever the driver typed (None or blank if nothing).
    Postconditions:
        - Returns ``(distance, is_manual_distance)``.
        - Round trip doubles the computed value before resolution; a manual
          value is taken as entered.
    Raises:
        ValidationError: manual value not a non-negative number, computed
            value negative or malformed, or neither value present.
    """
    if not is_blank(manual):
        return parse_decimal(manual, "manual_distance"), True

    if is_blank(computed):
        raise ValidationError("distance", "enter a distance or select a route")
    distance = parse_decimal(computed, "distance")
    if round_trip:
        distance = distance * 2
    return distance, False


def _distance_of(record: Any) -> Any:
    if isinstance(record, dict):
        return record.get("distance")
    return getattr(record, "distance", None)


def sum_distance(records: Iterable[Any]) -> Decimal:
    """
    Total distance of a sequence of records.

    Postconditions:
        - Missing, blank, or non-numeric distances count as zero.
        - Accepts DTOs, ORM rows, or mappings with a ``distance`` key.
    """
    total = Decimal("0")
    for record in records:
        value = try_decimal(_distance_of(record))
        if value is not None:
            total += value
    return total
