"""Vehicle record and display-status derivation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from fleet_engine.core.driver import DriverRecord
from fleet_engine.core.job import JobAssignment, JobStatus


class VehicleStatus(str, Enum):
    """Status shown in vehicle tables and on fleet cards."""

    ON_DUTY = "On Duty"
    IDLE = "Idle"
    OFFLINE = "Offline"
    MAINTENANCE = "Maintenance"
    ON_BREAK = "On Break"


@dataclass(frozen=True)
class DriverRef:
    """Lookup key for the driver of a vehicle.  Not an owning reference."""

    license_number: str
    name: str
    contact_number: str = ""


@dataclass(frozen=True)
class VehicleRecord:
    """One vehicle as shown to dispatchers.

    Attributes:
        id: ``VEH-<n>``, where *n* is the driver's 1-based position.
        callsign: Radio callsign built from make and position.
        registration: Licence plate.
        vehicle_class: Vehicle class (``"SEDAN"``, ``"TRUCK 15T"``...).
        make: Manufacturer.
        model: Model name.
        capacity: Free-text capacity.
        driver: Reference to the driver record.
        display_status: Derived status (see :func:`derive_display_status`).
        job: Current job assignment.
    """

    id: str
    callsign: str
    registration: str
    vehicle_class: str
    make: str
    model: str
    capacity: str
    driver: DriverRef
    display_status: VehicleStatus
    job: JobAssignment

    def with_job(self, job: JobAssignment, status: VehicleStatus) -> VehicleRecord:
        return replace(self, job=job, display_status=status)

    def with_status(self, status: VehicleStatus) -> VehicleRecord:
        return replace(self, display_status=status)


def derive_display_status(job: JobAssignment, driver_on_duty: bool) -> VehicleStatus:
    """Derive a vehicle's display status from its job and its driver.

    ``ON_DUTY`` when the vehicle has a real job that is not completed,
    otherwise ``IDLE`` if the driver is on duty, otherwise ``OFFLINE``.
    """
    if job.job_id is not None and job.status != JobStatus.COMPLETED:
        return VehicleStatus.ON_DUTY
    if driver_on_duty:
        return VehicleStatus.IDLE
    return VehicleStatus.OFFLINE


def vehicle_id_for(position: int) -> str:
    """Vehicle id for the driver at 0-based *position*."""
    return f"VEH-{position + 1}"


def callsign_for(make: str, position: int) -> str:
    """``"VOLV-01"`` style callsign for the driver at 0-based *position*."""
    prefix = make.upper()[:4] or "UNIT"
    return f"{prefix}-{position + 1:02d}"


def build_vehicle(
    driver: DriverRecord,
    position: int,
    job: JobAssignment,
) -> VehicleRecord:
    """Project *driver* and its resolved *job* into a :class:`VehicleRecord`."""
    return VehicleRecord(
        id=vehicle_id_for(position),
        callsign=callsign_for(driver.make, position),
        registration=driver.assigned_vehicle_registration,
        vehicle_class=driver.vehicle_class,
        make=driver.make,
        model=driver.model,
        capacity=driver.capacity,
        driver=DriverRef(
            license_number=driver.license_number,
            name=driver.name,
            contact_number=driver.contact_number,
        ),
        display_status=derive_display_status(job, driver.on_duty),
        job=job,
    )
