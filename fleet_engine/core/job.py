"""Job assignment model for the fleet engine.

A vehicle always carries a :class:`JobAssignment`.  Scripted scenarios come
from :class:`JobTemplate` entries keyed by vehicle registration; vehicles
without a template get a synthesised ``Idle`` job.  Manual dispatch builds a
``Received`` job from a :class:`JobRequest`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta

# ---------------------------------------------------------------------------
# Job statuses
# ---------------------------------------------------------------------------


class JobStatus:
    """Job status strings as reported by drivers' devices.

    The usual progression is ``Idle -> Received -> Accepted -> (en-route
    states) -> Completed``.  Transitions are driven externally and are not
    enforced here.
    """

    IDLE = "Idle"
    RECEIVED = "Received"
    ACCEPTED = "Accepted"
    ON_ROUTE_TO_PICKUP = "ON ROUTE TO PU"
    ARRIVED = "Arrived"
    PASSENGER_ON_BOARD = "POB-ON ROUTE"
    EN_ROUTE_TO_DROPOFF = "En Route to Dropoff"
    COMPLETED = "Completed"
    EMPTY = "Empty"


INACTIVE_STATUSES: frozenset[str] = frozenset(
    {JobStatus.COMPLETED, JobStatus.IDLE, JobStatus.EMPTY}
)

MANUAL_DISPATCH_ETA: str = "15 minutes"

_ETA_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:m|min|mins|minute|minutes)\s*$", re.I)


def is_active_status(status: str) -> bool:
    """Return ``True`` for any status other than Completed, Idle or Empty."""
    return status not in INACTIVE_STATUSES


def format_elapsed(delta: timedelta) -> str:
    """Render a duration as ``"42m"``, ``"5h 07m"`` or ``"1d 02h"``."""
    minutes = max(0, int(delta.total_seconds() // 60))
    days, minutes = divmod(minutes, 24 * 60)
    hours, minutes = divmod(minutes, 60)
    if days:
        return f"{days}d {hours:02d}h"
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def eta_minutes(eta_description: str | None) -> float | None:
    """Parse ``"22 minutes"`` / ``"10m"`` into minutes.

    Free-text ETAs such as ``"Now"`` or ``"Completed"`` give ``None``.
    """
    if not eta_description:
        return None
    match = _ETA_PATTERN.match(eta_description)
    return float(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Job assignment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JobAssignment:
    """Job currently attached to a vehicle.

    Attributes:
        job_id: Job identifier, or ``None`` when the vehicle has no job.
        status: One of the :class:`JobStatus` strings.
        service_type: Service family (``"Freight"``, ``"Passenger"``...).
        account: Customer account name.
        pickup_location: Free-text pickup place.
        pickup_time: Scheduled pickup instant.
        eta_description: Human-readable ETA (``"22 minutes"``).
        distance: Trip distance in kilometres.
        dwell_time: Time spent waiting or idle, already formatted.
        booking_time: Instant the job was sent to the driver.
        flight: Flight number for airport pickups.
        passengers: Passenger or load description (``"2 PAX"``).
    """

    job_id: str | None = None
    status: str = JobStatus.IDLE
    service_type: str | None = None
    account: str | None = None
    pickup_location: str | None = None
    pickup_time: datetime | None = None
    eta_description: str | None = None
    distance: float = 0.0
    dwell_time: str = "N/A"
    booking_time: datetime | None = None
    flight: str | None = None
    passengers: str | None = None

    @property
    def is_active(self) -> bool:
        """A real job that is neither finished nor a placeholder."""
        return self.job_id is not None and is_active_status(self.status)


def default_job(duty_start: datetime | None, now: datetime) -> JobAssignment:
    """Synthesise the job shown for a vehicle with no scripted scenario.

    Dwell time is the time since duty started, or ``"N/A"`` off duty.
    """
    dwell = format_elapsed(now - duty_start) if duty_start is not None else "N/A"
    return JobAssignment(job_id=None, status=JobStatus.IDLE, dwell_time=dwell)


# ---------------------------------------------------------------------------
# Templates and requests
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JobTemplate:
    """Scripted job scenario for one vehicle registration.

    Times may be absolute or relative to the moment a vehicle generation is
    built.  When both are given the relative offset wins.

    Attributes:
        job_id: Job identifier.
        status: Job status string.
        service_type: Service family.
        account: Customer account name.
        pickup_location: Pickup place.
        distance: Trip distance in kilometres.
        dwell_time: Formatted dwell time.
        eta_description: Human-readable ETA.
        flight: Flight number, if any.
        passengers: Passenger or load description.
        pickup_time: Absolute pickup instant.
        booking_time: Absolute booking instant.
        pickup_minutes_ago: Pickup offset before "now", in minutes.
        booking_minutes_ago: Booking offset before "now", in minutes.
    """

    job_id: str
    status: str
    service_type: str | None = None
    account: str | None = None
    pickup_location: str | None = None
    distance: float = 0.0
    dwell_time: str = "0m"
    eta_description: str | None = None
    flight: str | None = None
    passengers: str | None = None
    pickup_time: datetime | None = None
    booking_time: datetime | None = None
    pickup_minutes_ago: float | None = None
    booking_minutes_ago: float | None = None

    def __post_init__(self) -> None:
        """Validate template fields."""
        if not self.job_id:
            raise ValueError("job_id must not be empty.")
        if not self.status:
            raise ValueError("status must not be empty.")
        if self.distance < 0.0:
            raise ValueError("distance must be >= 0.")

    def resolve(self, now: datetime) -> JobAssignment:
        """Build the concrete :class:`JobAssignment` as of *now*."""
        pickup_time = self.pickup_time
        if self.pickup_minutes_ago is not None:
            pickup_time = now - timedelta(minutes=self.pickup_minutes_ago)
        booking_time = self.booking_time
        if self.booking_minutes_ago is not None:
            booking_time = now - timedelta(minutes=self.booking_minutes_ago)
        return JobAssignment(
            job_id=self.job_id,
            status=self.status,
            service_type=self.service_type,
            account=self.account,
            pickup_location=self.pickup_location,
            pickup_time=pickup_time,
            eta_description=self.eta_description,
            distance=self.distance,
            dwell_time=self.dwell_time,
            booking_time=booking_time,
            flight=self.flight,
            passengers=self.passengers,
        )


@dataclass(frozen=True)
class JobRequest:
    """Manual dispatch request raised from the dispatcher's job form.

    Attributes:
        id: Job identifier.
        vehicle_type: Requested vehicle type, used as the service type.
        customer_name: Customer account, if known.
        from_location: Pickup place.
        title: Short job description.
    """

    id: str
    vehicle_type: str
    from_location: str
    title: str
    customer_name: str | None = None

    def to_assignment(self, now: datetime) -> JobAssignment:
        """Return a freshly ``Received`` job booked at *now*."""
        return JobAssignment(
            job_id=self.id,
            status=JobStatus.RECEIVED,
            service_type=self.vehicle_type,
            account=self.customer_name or "N/A",
            pickup_location=self.from_location,
            pickup_time=now,
            eta_description=MANUAL_DISPATCH_ETA,
            distance=0.0,
            dwell_time="0m",
            booking_time=now,
            flight=None,
            passengers=self.title,
        )
