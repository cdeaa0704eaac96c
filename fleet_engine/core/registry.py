"""Driver registry: the mutable source of truth for duty state.

The registry owns the ordered list of :class:`DriverRecord` objects and the
:class:`FatigueSummary` derived from them.  Every mutation rebuilds the
summary by rescanning all drivers, then notifies subscribers synchronously.
A background :class:`PeriodicTask` re-derives the summary once per refresh
interval so that fatigue levels drift with elapsed time even when nothing
is mutated.

Mutations and refresh ticks are serialised by a re-entrant lock and
subscribers run while it is held, so an observer always sees the state
produced by the change that triggered it.  Derived components share the
same lock (:attr:`DriverRegistry.lock`) so there is a single lock order.

A mutation computes the new driver list and summary first and only then
swaps them in; if that fails (bad input, a clock returning naive times)
the registry is left exactly as it was.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Callable

from fleet_engine.core.clock import Clock, system_clock
from fleet_engine.core.driver import DriverRecord
from fleet_engine.core.fatigue import (
    FatigueLevel,
    FatigueSummary,
    compute_fatigue_summary,
    get_fatigue_level,
)
from fleet_engine.core.scheduler import PeriodicTask

logger = logging.getLogger(__name__)

Listener = Callable[["DriverRegistry"], None]

DEFAULT_REFRESH_SECONDS: float = 60.0


class DriverRegistry:
    """In-memory registry of drivers and their duty windows.

    Attributes:
        clock: Time source used for fatigue classification.
        refresh_interval: Seconds between background summary refreshes.
    """

    def __init__(
        self,
        drivers: Iterable[DriverRecord] = (),
        clock: Clock = system_clock,
        refresh_interval: float = DEFAULT_REFRESH_SECONDS,
    ) -> None:
        self.clock: Clock = clock
        self.refresh_interval: float = refresh_interval
        self._lock = threading.RLock()
        self._drivers: list[DriverRecord] = list(drivers)
        self._listeners: list[Listener] = []
        self._summary: FatigueSummary = compute_fatigue_summary(
            self._drivers, self.clock()
        )
        self._task = PeriodicTask(
            refresh_interval, self.refresh, name="fatigue-refresh"
        )

    def __repr__(self) -> str:
        return f"DriverRegistry(drivers={len(self._drivers)})"

    def __len__(self) -> int:
        return len(self._drivers)

    # -- Read side ------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        """The lock serialising mutations, ticks and listener delivery."""
        return self._lock

    @property
    def drivers(self) -> tuple[DriverRecord, ...]:
        """Snapshot of all drivers, most recently added first."""
        with self._lock:
            return tuple(self._drivers)

    @property
    def fatigue_summary(self) -> FatigueSummary:
        with self._lock:
            return self._summary

    def get_driver(self, license_number: str) -> DriverRecord | None:
        """Return the first driver with *license_number*, or ``None``."""
        with self._lock:
            for driver in self._drivers:
                if driver.license_number == license_number:
                    return driver
        return None

    def get_fatigue_level(
        self, duty_start: datetime | None
    ) -> FatigueLevel | None:
        """Classify *duty_start* against the registry clock, read now."""
        return get_fatigue_level(duty_start, self.clock())

    def fatigue_level_for(self, license_number: str) -> FatigueLevel | None:
        driver = self.get_driver(license_number)
        if driver is None:
            return None
        return self.get_fatigue_level(driver.duty_start)

    # -- Mutations ------------------------------------------------------------

    def add_driver(self, record: DriverRecord) -> None:
        """Prepend *record* as an off-duty driver.

        Duplicate licence numbers are accepted; lookups resolve to the
        most recently added record.
        """
        with self._lock:
            self._commit([record.with_duty_start(None), *self._drivers])
            logger.debug("Added driver %s", record.license_number)

    def remove_drivers(self, license_numbers: Iterable[str]) -> int:
        """Remove every driver whose licence number is in *license_numbers*.

        Returns:
            Number of records removed.  Unknown licence numbers are ignored;
            when nothing matches the registry is left untouched and
            subscribers are not notified.

        Raises:
            TypeError: If *license_numbers* is a single string rather than a
                collection of licence numbers.
        """
        if isinstance(license_numbers, str):
            raise TypeError(
                "license_numbers must be a collection of licence numbers, "
                f"not a single string ({license_numbers!r})."
            )
        targets = set(license_numbers)
        with self._lock:
            kept = [d for d in self._drivers if d.license_number not in targets]
            removed = len(self._drivers) - len(kept)
            if removed == 0:
                logger.debug("remove_drivers: no match for %s", sorted(targets))
                return 0
            self._commit(kept)
            logger.debug("Removed %d driver(s)", removed)
            return removed

    def set_duty_start(
        self, license_number: str, duty_start: datetime | None
    ) -> bool:
        """Open (timestamp) or close (``None``) a driver's duty window.

        Returns:
            ``True`` if the driver exists, ``False`` (and no change)
            otherwise.

        Raises:
            ValueError: If *duty_start* is a naive datetime.  The registry
                is left unchanged.
        """
        with self._lock:
            found = False
            updated: list[DriverRecord] = []
            for driver in self._drivers:
                if driver.license_number == license_number:
                    driver = driver.with_duty_start(duty_start)
                    found = True
                updated.append(driver)
            if not found:
                logger.debug("set_duty_start: unknown driver %s", license_number)
                return False
            self._commit(updated)
            return True

    def start_duty(self, license_number: str) -> bool:
        """Open a duty window starting at the current clock reading."""
        return self.set_duty_start(license_number, self.clock())

    def end_duty(self, license_number: str) -> bool:
        return self.set_duty_start(license_number, None)

    def refresh(self) -> FatigueSummary:
        """Re-derive the fatigue summary against the current time."""
        with self._lock:
            self._commit(self._drivers)
            return self._summary

    # -- Observers ------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; return a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # -- Background refresh ---------------------------------------------------

    @property
    def running(self) -> bool:
        return self._task.running

    def start(self) -> None:
        """Start the periodic fatigue refresh."""
        self._task.start()

    def stop(self, timeout: float | None = None) -> None:
        self._task.stop(timeout)

    def __enter__(self) -> DriverRegistry:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # -- Internals ------------------------------------------------------------

    def _commit(self, drivers: list[DriverRecord]) -> None:
        """Install *drivers* with a fresh summary and notify listeners.

        The summary is computed before any state changes.  Caller holds the
        lock.
        """
        summary = compute_fatigue_summary(drivers, self.clock())
        self._drivers = list(drivers)
        self._summary = summary
        for listener in list(self._listeners):
            listener(self)
