"""Randomised initial duty state for a demo fleet.

At start-up most of the base roster is put on duty with a duty start a few
hours in the past, so that every fatigue bucket is populated.  All
randomness comes from a ``numpy.random.Generator``; passing the same seed
reproduces the same fleet.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

import numpy as np
from numpy.random import Generator

from fleet_engine.core.driver import DriverRecord

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SEED_OFFLINE_SHARE: float = 0.2  # probability a seeded driver starts off duty
SEED_MIN_HOURS: float = 1.0
SEED_MAX_HOURS: float = 14.0


def seed_duty_starts(
    roster: Iterable[DriverRecord],
    now: datetime,
    rng: Generator | None = None,
    seed: int | None = None,
    offline_share: float = SEED_OFFLINE_SHARE,
    min_hours: float = SEED_MIN_HOURS,
    max_hours: float = SEED_MAX_HOURS,
) -> list[DriverRecord]:
    """Assign random duty starts to *roster*.

    Each driver is independently left off duty with probability
    *offline_share*; otherwise its duty start is drawn uniformly between
    *max_hours* and *min_hours* before *now*.

    Args:
        roster: Base driver records.  Existing duty starts are overwritten.
        now: Reference instant.
        rng: Random generator.  Created from *seed* if not supplied.
        seed: Seed for a fresh generator when *rng* is ``None``.
        offline_share: Probability in ``[0, 1]`` of starting off duty.
        min_hours: Shortest seeded duty window, in hours.
        max_hours: Longest seeded duty window, in hours.

    Returns:
        New records in roster order.

    Raises:
        ValueError: If *offline_share* or the hour range is invalid.
    """
    if not 0.0 <= offline_share <= 1.0:
        raise ValueError("offline_share must be between 0.0 and 1.0.")
    if min_hours < 0.0 or max_hours < min_hours:
        raise ValueError("require 0 <= min_hours <= max_hours.")

    if rng is None:
        rng = np.random.default_rng(seed)

    seeded: list[DriverRecord] = []
    for driver in roster:
        if rng.random() < offline_share:
            seeded.append(driver.with_duty_start(None))
            continue
        hours_ago = float(rng.uniform(min_hours, max_hours))
        seeded.append(driver.with_duty_start(now - timedelta(hours=hours_ago)))
    return seeded
