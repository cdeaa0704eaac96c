"""JSON-ready snapshot of the derived fleet state."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any

from fleet_engine.core.driver import DriverRecord
from fleet_engine.core.fatigue import get_fatigue_level
from fleet_engine.core.job import JobAssignment
from fleet_engine.core.projector import VehicleJobProjector
from fleet_engine.core.registry import DriverRegistry
from fleet_engine.core.vehicle import VehicleRecord


def _iso(instant: datetime | None) -> str | None:
    return instant.isoformat() if instant is not None else None


def driver_to_dict(driver: DriverRecord, now: datetime) -> dict[str, Any]:
    """Serialise a driver with its derived duty status and fatigue level."""
    data = asdict(driver)
    data["allowed_vehicle_classes"] = list(driver.allowed_vehicle_classes)
    data["duty_start"] = _iso(driver.duty_start)
    data["duty_status"] = driver.duty_status.value
    level = get_fatigue_level(driver.duty_start, now)
    data["fatigue_level"] = level.value if level is not None else None
    return data


def job_to_dict(job: JobAssignment) -> dict[str, Any]:
    data = asdict(job)
    data["pickup_time"] = _iso(job.pickup_time)
    data["booking_time"] = _iso(job.booking_time)
    return data


def vehicle_to_dict(vehicle: VehicleRecord) -> dict[str, Any]:
    return {
        "id": vehicle.id,
        "callsign": vehicle.callsign,
        "registration": vehicle.registration,
        "vehicle_class": vehicle.vehicle_class,
        "make": vehicle.make,
        "model": vehicle.model,
        "capacity": vehicle.capacity,
        "driver": asdict(vehicle.driver),
        "display_status": vehicle.display_status.value,
        "job": job_to_dict(vehicle.job),
    }


def build_snapshot(
    registry: DriverRegistry,
    projector: VehicleJobProjector,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Render drivers, fatigue summary and vehicles into plain data.

    Args:
        registry: Driver registry to read.
        projector: Projector following *registry*.
        now: Reference instant for fatigue levels.  Defaults to the
            registry clock.

    Returns:
        Dictionary with keys ``generated_at``, ``drivers``,
        ``fatigue_summary``, ``vehicles``, ``status_counts`` and
        ``active_jobs``.
    """
    now = now if now is not None else registry.clock()
    return {
        "generated_at": now.isoformat(),
        "drivers": [driver_to_dict(d, now) for d in registry.drivers],
        "fatigue_summary": registry.fatigue_summary.as_dict(),
        "vehicles": [vehicle_to_dict(v) for v in projector.vehicles],
        "status_counts": {
            status.value: count for status, count in projector.status_counts().items()
        },
        "active_jobs": projector.active_job_count(),
    }
