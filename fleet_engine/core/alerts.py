"""Dispatcher alerts derived from vehicle and driver snapshots.

Alerts are recomputed from scratch on every call; nothing here keeps state.
Each alert id is deterministic (``<kind>-<job id or licence>``) so a feed can
de-duplicate across regenerations.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from fleet_engine.core.driver import DriverRecord
from fleet_engine.core.fatigue import FatigueLevel, get_fatigue_level
from fleet_engine.core.job import JobStatus, eta_minutes
from fleet_engine.core.vehicle import VehicleRecord, VehicleStatus

# ---------------------------------------------------------------------------
# Alert kinds and priorities
# ---------------------------------------------------------------------------

LATE_ACCEPT = "late-accept"
LATE_PICKUP = "late-pickup"
WAITING_TIME = "waiting-time"
LATE_DROPOFF = "late-dropoff"
DRIVER_OFFLINE = "offline"
FLIGHT_NUMBER = "flight"
FATIGUE = "fatigue"

PRIORITY_LOW = "Low"
PRIORITY_MEDIUM = "Medium"
PRIORITY_HIGH = "High"
PRIORITY_CRITICAL = "Critical"

# Feed order: lower rank first.  Unknown priorities sort last.
PRIORITY_RANK: dict[str, int] = {
    PRIORITY_CRITICAL: 1,
    PRIORITY_HIGH: 2,
    PRIORITY_MEDIUM: 3,
    PRIORITY_LOW: 4,
}

_PICKUP_PENDING_STATUSES: frozenset[str] = frozenset(
    {JobStatus.ACCEPTED, JobStatus.ON_ROUTE_TO_PICKUP}
)

_DROPOFF_PENDING_STATUSES: frozenset[str] = frozenset(
    {
        JobStatus.ON_ROUTE_TO_PICKUP,
        JobStatus.PASSENGER_ON_BOARD,
        JobStatus.EN_ROUTE_TO_DROPOFF,
    }
)


@dataclass(frozen=True)
class AlertRules:
    """Per-rule switches and minute thresholds.

    Attributes:
        late_accept_enabled: Raise Late Accept alerts.
        late_accept_minutes: Minutes a job may stay ``Received``.
        late_pickup_enabled: Raise Late to Pickup alerts.
        late_pickup_minutes: Grace period after the scheduled pickup.
        waiting_time_enabled: Raise Waiting Time alerts.
        waiting_time_minutes: Minutes a driver may wait at pickup.
        late_dropoff_enabled: Raise Late to Drop Off alerts.
        late_dropoff_minutes: Grace period after pickup time plus ETA.
        driver_offline_enabled: Raise Driver Offline alerts.
        flight_number_enabled: Raise Flight Number alerts.
        fatigue_enabled: Raise fatigue alerts.
        fatigue_min_level: Lowest fatigue level that raises an alert.
    """

    late_accept_enabled: bool = True
    late_accept_minutes: float = 2.0
    late_pickup_enabled: bool = True
    late_pickup_minutes: float = 15.0
    waiting_time_enabled: bool = True
    waiting_time_minutes: float = 10.0
    late_dropoff_enabled: bool = True
    late_dropoff_minutes: float = 10.0
    driver_offline_enabled: bool = True
    flight_number_enabled: bool = True
    fatigue_enabled: bool = True
    fatigue_min_level: FatigueLevel = FatigueLevel.HIGH

    def __post_init__(self) -> None:
        """Validate thresholds."""
        for name in (
            "late_accept_minutes",
            "late_pickup_minutes",
            "waiting_time_minutes",
            "late_dropoff_minutes",
        ):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be >= 0.")


@dataclass(frozen=True)
class Alert:
    """A single entry in the dispatcher alert feed."""

    alert_id: str
    kind: str
    priority: str
    message: str
    job_id: str | None = None
    vehicle_id: str | None = None
    driver_license: str | None = None


def _minutes_since(instant: datetime, now: datetime) -> float:
    return (now - instant).total_seconds() / 60.0


# ---------------------------------------------------------------------------
# Job alerts
# ---------------------------------------------------------------------------


def generate_job_alerts(
    vehicles: Iterable[VehicleRecord],
    now: datetime,
    rules: AlertRules | None = None,
) -> list[Alert]:
    """Evaluate the job-based alert rules against a vehicle snapshot.

    Vehicles without a job id never raise job alerts.
    """
    rules = rules or AlertRules()
    alerts: list[Alert] = []

    for vehicle in vehicles:
        job = vehicle.job
        if job.job_id is None:
            continue

        def _alert(kind: str, priority: str, message: str) -> Alert:
            return Alert(
                alert_id=f"{kind}-{job.job_id}",
                kind=kind,
                priority=priority,
                message=message,
                job_id=job.job_id,
                vehicle_id=vehicle.id,
                driver_license=vehicle.driver.license_number,
            )

        if (
            rules.late_accept_enabled
            and job.status == JobStatus.RECEIVED
            and job.booking_time is not None
            and _minutes_since(job.booking_time, now) > rules.late_accept_minutes
        ):
            alerts.append(
                _alert(
                    LATE_ACCEPT,
                    PRIORITY_HIGH,
                    f"Job #{job.job_id} was not accepted by driver "
                    f"within {rules.late_accept_minutes:g} min.",
                )
            )

        if (
            rules.late_pickup_enabled
            and job.status in _PICKUP_PENDING_STATUSES
            and job.pickup_time is not None
            and _minutes_since(job.pickup_time, now) > rules.late_pickup_minutes
        ):
            alerts.append(
                _alert(
                    LATE_PICKUP,
                    PRIORITY_HIGH,
                    f"Driver {vehicle.driver.name} is >{rules.late_pickup_minutes:g}m "
                    f"late for pickup for job #{job.job_id}.",
                )
            )

        if (
            rules.waiting_time_enabled
            and job.status == JobStatus.ARRIVED
            and job.pickup_time is not None
            and _minutes_since(job.pickup_time, now) > rules.waiting_time_minutes
        ):
            alerts.append(
                _alert(
                    WAITING_TIME,
                    PRIORITY_MEDIUM,
                    f"Driver for job #{job.job_id} has been waiting at pickup "
                    f">{rules.waiting_time_minutes:g} min.",
                )
            )

        eta = eta_minutes(job.eta_description)
        if (
            rules.late_dropoff_enabled
            and job.status in _DROPOFF_PENDING_STATUSES
            and job.pickup_time is not None
            and eta is not None
            and _minutes_since(job.pickup_time, now) - eta > rules.late_dropoff_minutes
        ):
            alerts.append(
                _alert(
                    LATE_DROPOFF,
                    PRIORITY_HIGH,
                    f"Driver {vehicle.driver.name} is expected to be late for "
                    f"drop-off for job #{job.job_id}.",
                )
            )

        if (
            rules.driver_offline_enabled
            and vehicle.display_status == VehicleStatus.OFFLINE
            and job.is_active
        ):
            alerts.append(
                _alert(
                    DRIVER_OFFLINE,
                    PRIORITY_CRITICAL,
                    f"Driver {vehicle.driver.name} is offline but has an "
                    f"uncompleted job (#{job.job_id}).",
                )
            )

        if rules.flight_number_enabled and job.flight:
            alerts.append(
                _alert(
                    FLIGHT_NUMBER,
                    PRIORITY_MEDIUM,
                    f"Job #{job.job_id} has a flight number ({job.flight}). "
                    "Check flight status.",
                )
            )

    return alerts


# ---------------------------------------------------------------------------
# Fatigue alerts
# ---------------------------------------------------------------------------


def generate_fatigue_alerts(
    drivers: Iterable[DriverRecord],
    now: datetime,
    rules: AlertRules | None = None,
) -> list[Alert]:
    """One alert per on-duty driver at or above ``rules.fatigue_min_level``."""
    rules = rules or AlertRules()
    if not rules.fatigue_enabled:
        return []

    alerts: list[Alert] = []
    for driver in drivers:
        level = get_fatigue_level(driver.duty_start, now)
        if level is None or level.severity < rules.fatigue_min_level.severity:
            continue
        priority = PRIORITY_CRITICAL if level is FatigueLevel.CRITICAL else PRIORITY_HIGH
        alerts.append(
            Alert(
                alert_id=f"{FATIGUE}-{driver.license_number}",
                kind=FATIGUE,
                priority=priority,
                message=f"Driver {driver.name} fatigue level is {level.value}.",
                driver_license=driver.license_number,
            )
        )
    return alerts


# ---------------------------------------------------------------------------
# Alert feed
# ---------------------------------------------------------------------------


def build_alert_feed(*alert_lists: Iterable[Alert]) -> list[Alert]:
    """Merge alert lists into one feed ordered Critical to Low.

    Alerts sharing an ``alert_id`` are collapsed; the last one given wins.
    Ties in priority are broken by ``alert_id`` so the order is stable
    across regenerations.
    """
    merged: dict[str, Alert] = {}
    for alerts in alert_lists:
        for alert in alerts:
            merged[alert.alert_id] = alert
    return sorted(
        merged.values(),
        key=lambda a: (PRIORITY_RANK.get(a.priority, len(PRIORITY_RANK) + 1), a.alert_id),
    )
