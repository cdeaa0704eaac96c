"""Driver record for the fleet engine.

A driver's duty status is never stored: it is derived from the duty-start
timestamp, so the two cannot disagree.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class DutyStatus(str, Enum):
    """Duty state shown in driver tables."""

    ON_DUTY = "On Duty"
    OFFLINE = "Offline"


@dataclass(frozen=True)
class DriverRecord:
    """Immutable representation of a registered driver.

    Attributes:
        license_number: Driving licence number.  Used as the registry key.
        name: Display name.
        contact_number: Phone number.
        license_expiry: Licence expiry date (opaque, not validated).
        allowed_vehicle_classes: Vehicle classes the licence covers.
        assigned_vehicle_registration: Plate of the vehicle the driver uses.
            Job templates are keyed by this value.
        vehicle_class: Class of the assigned vehicle (e.g. ``"TRUCK 15T"``).
        make: Manufacturer of the assigned vehicle.
        model: Model of the assigned vehicle.
        capacity: Free-text capacity (``"15T"``, ``"5 Seats"``).
        insurance_expiry: Insurance expiry date (opaque).
        last_fitness_check: Date of the last fitness certificate check.
        fitness_expiry: Fitness certificate expiry date (opaque).
        permit: Operating permit scope.
        emissions_expiry: Emissions certificate expiry date (opaque).
        duty_start: Instant duty began, or ``None`` when off duty.
    """

    license_number: str
    name: str
    contact_number: str = ""
    license_expiry: str = ""
    allowed_vehicle_classes: tuple[str, ...] = ()
    assigned_vehicle_registration: str = ""
    vehicle_class: str = ""
    make: str = ""
    model: str = ""
    capacity: str = ""
    insurance_expiry: str = ""
    last_fitness_check: str = ""
    fitness_expiry: str = ""
    permit: str = ""
    emissions_expiry: str = ""
    duty_start: datetime | None = None

    def __post_init__(self) -> None:
        """Validate driver identity and the duty start timestamp."""
        if not self.license_number:
            raise ValueError("license_number must not be empty.")
        if not self.name:
            raise ValueError("name must not be empty.")
        if self.duty_start is not None and self.duty_start.utcoffset() is None:
            raise ValueError("duty_start must be timezone-aware.")

    @property
    def duty_status(self) -> DutyStatus:
        """``ON_DUTY`` iff a duty start is recorded."""
        if self.duty_start is not None:
            return DutyStatus.ON_DUTY
        return DutyStatus.OFFLINE

    @property
    def on_duty(self) -> bool:
        return self.duty_start is not None

    def with_duty_start(self, duty_start: datetime | None) -> DriverRecord:
        """Return a copy of this record with a new duty start."""
        return replace(self, duty_start=duty_start)
