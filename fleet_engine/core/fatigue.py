"""Driver fatigue classification for the fleet engine.

Fatigue is a coarse bucketing of elapsed duty time::

    elapsed <= 6 h        -> LOW
    6 h  < elapsed <= 8 h -> MEDIUM
    8 h  < elapsed <= 12 h -> HIGH
    elapsed > 12 h        -> CRITICAL

Each boundary belongs to the lower bucket.  Drivers who are off duty have
no fatigue level (``None``).  Nothing here is cached: the level is always
computed against the instant passed in, so two calls either side of a
boundary may legitimately disagree.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from fleet_engine.core.driver import DriverRecord

# ---------------------------------------------------------------------------
# Thresholds
# ---------------------------------------------------------------------------

MEDIUM_AFTER_HOURS: float = 6.0
HIGH_AFTER_HOURS: float = 8.0
CRITICAL_AFTER_HOURS: float = 12.0

_SECONDS_PER_HOUR: float = 3600.0


class FatigueLevel(str, Enum):
    """Fatigue severity buckets, ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def severity(self) -> int:
        """Zero-based rank of the level (LOW = 0, CRITICAL = 3)."""
        return _SEVERITY[self]


_SEVERITY: dict[FatigueLevel, int] = {
    level: rank for rank, level in enumerate(FatigueLevel)
}


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def duty_hours(duty_start: datetime, now: datetime) -> float:
    """Return elapsed duty time in hours (negative if *duty_start* is ahead)."""
    return (now - duty_start).total_seconds() / _SECONDS_PER_HOUR


def classify_duty_hours(hours: float) -> FatigueLevel:
    """Map elapsed duty hours to a :class:`FatigueLevel`."""
    if hours > CRITICAL_AFTER_HOURS:
        return FatigueLevel.CRITICAL
    if hours > HIGH_AFTER_HOURS:
        return FatigueLevel.HIGH
    if hours > MEDIUM_AFTER_HOURS:
        return FatigueLevel.MEDIUM
    return FatigueLevel.LOW


def get_fatigue_level(
    duty_start: datetime | None,
    now: datetime,
) -> FatigueLevel | None:
    """Classify a duty window ending at *now*.

    Args:
        duty_start: Instant duty began, or ``None`` if off duty.
        now: Reference instant, normally read from a clock at call time.

    Returns:
        The fatigue level, or ``None`` when *duty_start* is ``None``.
    """
    if duty_start is None:
        return None
    return classify_duty_hours(duty_hours(duty_start, now))


# ---------------------------------------------------------------------------
# Aggregate summary
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FatigueSummary:
    """Counts of on-duty drivers per fatigue level.

    Attributes:
        low: Drivers at LOW.
        medium: Drivers at MEDIUM.
        high: Drivers at HIGH.
        critical: Drivers at CRITICAL.
    """

    low: int = 0
    medium: int = 0
    high: int = 0
    critical: int = 0

    def count(self, level: FatigueLevel) -> int:
        return getattr(self, level.value.lower())

    @property
    def total(self) -> int:
        """Number of drivers currently on duty."""
        return self.low + self.medium + self.high + self.critical

    def as_dict(self) -> dict[str, int]:
        return {level.value: self.count(level) for level in FatigueLevel}


def compute_fatigue_summary(
    drivers: Iterable[DriverRecord],
    now: datetime,
) -> FatigueSummary:
    """Scan *drivers* and count on-duty drivers per fatigue level.

    This is a full O(n) rescan; callers recompute it after every mutation
    rather than maintaining running counts.
    """
    counts: dict[FatigueLevel, int] = {level: 0 for level in FatigueLevel}
    for driver in drivers:
        level = get_fatigue_level(driver.duty_start, now)
        if level is not None:
            counts[level] += 1
    return FatigueSummary(
        low=counts[FatigueLevel.LOW],
        medium=counts[FatigueLevel.MEDIUM],
        high=counts[FatigueLevel.HIGH],
        critical=counts[FatigueLevel.CRITICAL],
    )
