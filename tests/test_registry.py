"""Tests for the driver registry: mutations, summary and background refresh."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from fleet_engine.core.clock import ManualClock
from fleet_engine.core.driver import DriverRecord, DutyStatus
from fleet_engine.core.fatigue import FatigueLevel, compute_fatigue_summary
from fleet_engine.core.registry import DriverRegistry

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_T0 = datetime(2024, 8, 1, 20, 0, tzinfo=timezone.utc)


def _make_driver(dl: str, hours: float | None = None) -> DriverRecord:
    start = _T0 - timedelta(hours=hours) if hours is not None else None
    return DriverRecord(
        license_number=dl,
        name=f"Driver {dl}",
        assigned_vehicle_registration=f"SA-{dl}",
        make="Volvo",
        duty_start=start,
    )


def _registry(**hours: float | None) -> tuple[DriverRegistry, ManualClock]:
    clock = ManualClock(_T0)
    drivers = [_make_driver(dl, h) for dl, h in hours.items()]
    return DriverRegistry(drivers, clock=clock), clock


# ---------------------------------------------------------------------------
# Driver record
# ---------------------------------------------------------------------------


def test_duty_status_derived_from_duty_start() -> None:
    """ON_DUTY iff a duty start is recorded."""
    assert _make_driver("A", 2).duty_status is DutyStatus.ON_DUTY
    assert _make_driver("A").duty_status is DutyStatus.OFFLINE


def test_driver_requires_license_and_name() -> None:
    """Empty identity fields are rejected."""
    with pytest.raises(ValueError, match="license_number"):
        DriverRecord(license_number="", name="X")
    with pytest.raises(ValueError, match="name"):
        DriverRecord(license_number="D1", name="")


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def test_add_driver_prepends_offline() -> None:
    """New drivers go first and start off duty regardless of input."""
    registry, _ = _registry(A=3)
    registry.add_driver(_make_driver("NEW", 5))

    first = registry.drivers[0]
    assert first.license_number == "NEW"
    assert first.duty_start is None
    assert first.duty_status is DutyStatus.OFFLINE
    assert len(registry) == 2


def test_add_driver_accepts_duplicate_license() -> None:
    """No uniqueness check; lookups resolve to the newest record."""
    registry, _ = _registry(A=3)
    registry.add_driver(DriverRecord(license_number="A", name="Second A"))
    assert len(registry) == 2
    assert registry.get_driver("A").name == "Second A"


def test_remove_drivers_returns_count() -> None:
    """Matching drivers are removed and counted."""
    registry, _ = _registry(A=1, B=2, C=None)
    assert registry.remove_drivers({"A", "C", "ZZZ"}) == 2
    assert [d.license_number for d in registry.drivers] == ["B"]


def test_remove_unknown_leaves_registry_unchanged() -> None:
    """Removing an unknown licence changes nothing and notifies no one."""
    registry, _ = _registry(A=1, B=None)
    before = registry.drivers
    calls: list[int] = []
    registry.subscribe(lambda _r: calls.append(1))

    assert registry.remove_drivers(["NOPE"]) == 0
    assert registry.drivers == before
    assert calls == []


def test_set_duty_start_unknown_returns_false() -> None:
    """Unknown licence numbers are reported, not raised."""
    registry, _ = _registry(A=None)
    before = registry.drivers
    assert registry.set_duty_start("NOPE", _T0) is False
    assert registry.drivers == before


def test_remove_drivers_rejects_bare_string() -> None:
    """A single licence string is not split into characters."""
    registry, _ = _registry(A=1)
    with pytest.raises(TypeError, match="single string"):
        registry.remove_drivers("A")
    assert len(registry) == 1


def test_naive_duty_start_rejected_without_side_effects() -> None:
    """A naive timestamp raises and leaves records, summary and listeners alone."""
    registry, clock = _registry(A=None, B=None)
    before = registry.drivers
    summary = registry.fatigue_summary
    calls: list[int] = []
    registry.subscribe(lambda _r: calls.append(1))

    with pytest.raises(ValueError, match="timezone-aware"):
        registry.set_duty_start("A", datetime(2024, 8, 1, 15, 0))

    assert registry.drivers == before
    assert registry.fatigue_summary == summary
    assert calls == []

    # Later valid mutations still work.
    assert registry.set_duty_start("B", clock() - timedelta(hours=9))
    registry.add_driver(_make_driver("C"))
    assert len(registry) == 3
    assert registry.fatigue_summary.high == 1


def test_driver_record_rejects_naive_duty_start() -> None:
    """Records carrying a naive duty start cannot be built."""
    with pytest.raises(ValueError, match="timezone-aware"):
        DriverRecord(license_number="D1", name="X", duty_start=datetime(2024, 8, 1))


def test_set_duty_start_updates_status_and_summary() -> None:
    """Opening a duty window flips status and fills the summary."""
    registry, clock = _registry(A=None)
    assert registry.set_duty_start("A", clock() - timedelta(hours=9)) is True

    driver = registry.get_driver("A")
    assert driver.duty_status is DutyStatus.ON_DUTY
    assert registry.fatigue_summary.high == 1


def test_toggle_duty_changes_summary_by_one() -> None:
    """Duty off then on moves exactly one driver out of and back into a bucket."""
    registry, clock = _registry(A=7, B=2)
    initial = registry.fatigue_summary
    assert initial.medium == 1

    registry.end_duty("A")
    off = registry.fatigue_summary
    assert off.medium == initial.medium - 1
    assert off.low == initial.low

    registry.start_duty("A")
    on = registry.fatigue_summary
    assert on.low == off.low + 1
    assert on.medium == off.medium
    assert registry.get_driver("A").duty_start == clock()


def test_summary_matches_full_rescan_after_mutations() -> None:
    """The cached summary always equals a fresh scan of the records."""
    registry, clock = _registry(A=1, B=7, C=9, D=13, E=None)
    registry.set_duty_start("E", clock() - timedelta(hours=11))
    registry.remove_drivers(["B"])
    registry.add_driver(_make_driver("F"))
    assert registry.fatigue_summary == compute_fatigue_summary(
        registry.drivers, clock()
    )


def test_status_invariant_holds_for_all_records() -> None:
    """dutyStatus == ON_DUTY <=> duty_start is not None, after any mutation."""
    registry, clock = _registry(A=1, B=None, C=13)
    registry.set_duty_start("B", clock())
    registry.set_duty_start("C", None)
    registry.add_driver(_make_driver("D", 4))
    for d in registry.drivers:
        assert (d.duty_status is DutyStatus.ON_DUTY) == (d.duty_start is not None)


# ---------------------------------------------------------------------------
# Fatigue queries and refresh
# ---------------------------------------------------------------------------


def test_get_fatigue_level_reads_clock_each_call() -> None:
    """Advancing the clock changes the level without any mutation."""
    registry, clock = _registry(A=5)
    start = registry.get_driver("A").duty_start
    assert registry.get_fatigue_level(start) is FatigueLevel.LOW
    clock.advance(hours=2)
    assert registry.get_fatigue_level(start) is FatigueLevel.MEDIUM
    assert registry.get_fatigue_level(None) is None


def test_fatigue_level_for_unknown_driver() -> None:
    """Unknown or off-duty drivers have no level."""
    registry, _ = _registry(A=None)
    assert registry.fatigue_level_for("A") is None
    assert registry.fatigue_level_for("NOPE") is None


def test_refresh_captures_elapsed_time_drift() -> None:
    """The summary only moves when refreshed."""
    registry, clock = _registry(A=5)
    clock.advance(hours=2)
    assert registry.fatigue_summary.low == 1

    summary = registry.refresh()
    assert summary.medium == 1
    assert summary.low == 0


# ---------------------------------------------------------------------------
# Observers
# ---------------------------------------------------------------------------


def test_subscribers_see_post_mutation_state() -> None:
    """Listeners run after the change is applied."""
    registry, _ = _registry(A=None)
    seen: list[DutyStatus] = []
    registry.subscribe(lambda r: seen.append(r.get_driver("A").duty_status))

    registry.start_duty("A")
    registry.end_duty("A")
    assert seen == [DutyStatus.ON_DUTY, DutyStatus.OFFLINE]


def test_unsubscribe_stops_notifications() -> None:
    """An unsubscribed listener is no longer called."""
    registry, _ = _registry(A=None)
    calls: list[int] = []
    unsubscribe = registry.subscribe(lambda _r: calls.append(1))
    registry.start_duty("A")
    unsubscribe()
    registry.end_duty("A")
    assert calls == [1]


def test_listener_error_propagates_from_mutation() -> None:
    """A raising subscriber surfaces to the caller after the change is applied."""
    registry, clock = _registry(A=None)

    def _broken(_r: DriverRegistry) -> None:
        raise RuntimeError("listener failed")

    registry.subscribe(_broken)
    with pytest.raises(RuntimeError, match="listener failed"):
        registry.set_duty_start("A", clock() - timedelta(hours=13))

    assert registry.get_driver("A").on_duty
    assert registry.fatigue_summary.critical == 1


# ---------------------------------------------------------------------------
# Background refresh
# ---------------------------------------------------------------------------


def test_background_refresh_ticks_and_stops() -> None:
    """The periodic task refreshes the summary until stopped."""
    clock = ManualClock(_T0)
    registry = DriverRegistry(
        [_make_driver("A", 5)], clock=clock, refresh_interval=0.01
    )
    ticked = threading.Event()

    def _on_change(r: DriverRegistry) -> None:
        if r.fatigue_summary.medium == 1:
            ticked.set()

    registry.subscribe(_on_change)
    clock.advance(hours=2)

    with registry:
        assert registry.running
        assert ticked.wait(timeout=5.0)
    assert not registry.running


def test_concurrent_toggles_with_fast_refresh() -> None:
    """Mutations racing a 1 ms refresh all finish and the summary stays exact."""
    clock = ManualClock(_T0)
    registry = DriverRegistry(
        [_make_driver(dl) for dl in "ABCD"], clock=clock, refresh_interval=0.001
    )
    errors: list[Exception] = []

    def _toggle(dl: str) -> None:
        try:
            for _ in range(200):
                registry.start_duty(dl)
                registry.end_duty(dl)
            registry.start_duty(dl)
        except Exception as exc:
            errors.append(exc)

    workers = [
        threading.Thread(target=_toggle, args=(dl,), daemon=True) for dl in "ABCD"
    ]
    registry.start()
    try:
        for w in workers:
            w.start()
        for w in workers:
            w.join(timeout=30.0)
    finally:
        registry.stop(timeout=5.0)

    assert not any(w.is_alive() for w in workers)
    assert errors == []
    assert registry.fatigue_summary == compute_fatigue_summary(
        registry.drivers, clock()
    )
    assert registry.fatigue_summary.low == 4


def test_invalid_refresh_interval() -> None:
    """A non-positive refresh interval is rejected."""
    with pytest.raises(ValueError, match="interval"):
        DriverRegistry([], refresh_interval=0.0)
