"""Vehicle/job projector.

Derives the vehicle list from the driver registry.  The projector does not
patch vehicles incrementally: every registry notification (mutation or
refresh tick) throws away the previous generation and builds a new one from
scratch.  Vehicle ids are positional (``VEH-1`` is the first driver), so a
vehicle keeps its id only for as long as its driver keeps its position.

Manual changes made through :meth:`VehicleJobProjector.assign_job_to_vehicle`
or :meth:`VehicleJobProjector.set_vehicle_status` last until the next
regeneration.

The projector has no lock of its own: it uses the registry's, so vehicle
listeners may read the registry freely.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Mapping
from typing import Callable

from fleet_engine.core.clock import Clock
from fleet_engine.core.job import JobRequest, JobTemplate, default_job
from fleet_engine.core.registry import DriverRegistry
from fleet_engine.core.vehicle import VehicleRecord, VehicleStatus, build_vehicle

logger = logging.getLogger(__name__)

VehicleListener = Callable[[tuple[VehicleRecord, ...]], None]


class VehicleJobProjector:
    """Owns the vehicle list derived from a :class:`DriverRegistry`.

    Attributes:
        registry: Upstream driver registry.
        templates: Job templates keyed by vehicle registration.
        clock: Time source for resolving templates and dwell times.
    """

    def __init__(
        self,
        registry: DriverRegistry,
        templates: Mapping[str, JobTemplate] | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry: DriverRegistry = registry
        self.templates: dict[str, JobTemplate] = dict(templates or {})
        self.clock: Clock = clock if clock is not None else registry.clock
        # Same lock as the registry: _regenerate always runs under it.
        self._lock: threading.RLock = registry.lock
        self._vehicles: tuple[VehicleRecord, ...] = ()
        self._generation: int = -1
        self._listeners: list[VehicleListener] = []
        with self._lock:
            self._regenerate(registry)
            self._unsubscribe = registry.subscribe(self._regenerate)

    def __repr__(self) -> str:
        return (
            f"VehicleJobProjector(vehicles={len(self._vehicles)}, "
            f"generation={self._generation})"
        )

    # -- Read side ------------------------------------------------------------

    @property
    def vehicles(self) -> tuple[VehicleRecord, ...]:
        with self._lock:
            return self._vehicles

    @property
    def lock(self) -> threading.RLock:
        """Lock shared with the upstream registry."""
        return self._lock

    @property
    def generation(self) -> int:
        """Number of regenerations since construction (0 = initial build)."""
        with self._lock:
            return self._generation

    def get_vehicle(self, vehicle_id: str) -> VehicleRecord | None:
        for vehicle in self.vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    def status_counts(self) -> dict[VehicleStatus, int]:
        """Vehicles per display status, including statuses with no vehicles."""
        counts = Counter(v.display_status for v in self.vehicles)
        return {status: counts.get(status, 0) for status in VehicleStatus}

    def active_job_count(self) -> int:
        """Vehicles whose job is neither Completed, Idle nor Empty."""
        return sum(1 for v in self.vehicles if v.job.is_active)

    # -- Manual dispatch ------------------------------------------------------

    def assign_job_to_vehicle(
        self, vehicle_id: str, job: JobRequest | None
    ) -> str | None:
        """Attach a ``Received`` job built from *job* to a vehicle.

        Returns:
            The job id, or ``None`` (with no change) when *job* is missing
            or the vehicle does not exist.
        """
        if job is None:
            return None
        with self._lock:
            assignment = job.to_assignment(self.clock())
            updated = self._replace(
                vehicle_id,
                lambda v: v.with_job(assignment, VehicleStatus.ON_DUTY),
            )
            if not updated:
                logger.debug("assign_job_to_vehicle: unknown vehicle %s", vehicle_id)
                return None
            logger.info("Assigned job %s to %s", job.id, vehicle_id)
            return assignment.job_id

    def set_vehicle_status(self, vehicle_id: str, status: VehicleStatus) -> bool:
        """Override a vehicle's display status until the next regeneration."""
        with self._lock:
            return self._replace(vehicle_id, lambda v: v.with_status(status))

    # -- Observers ------------------------------------------------------------

    def subscribe(self, listener: VehicleListener) -> Callable[[], None]:
        """Register *listener* for new vehicle snapshots."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop following the registry."""
        self._unsubscribe()

    # -- Internals ------------------------------------------------------------

    def _regenerate(self, registry: DriverRegistry) -> None:
        with self._lock:
            now = self.clock()
            vehicles: list[VehicleRecord] = []
            for position, driver in enumerate(registry.drivers):
                template = self.templates.get(driver.assigned_vehicle_registration)
                if template is not None:
                    job = template.resolve(now)
                else:
                    job = default_job(driver.duty_start, now)
                vehicles.append(build_vehicle(driver, position, job))
            self._vehicles = tuple(vehicles)
            self._generation += 1
            self._publish()

    def _replace(
        self,
        vehicle_id: str,
        change: Callable[[VehicleRecord], VehicleRecord],
    ) -> bool:
        found = False
        vehicles: list[VehicleRecord] = []
        for vehicle in self._vehicles:
            if vehicle.id == vehicle_id:
                vehicle = change(vehicle)
                found = True
            vehicles.append(vehicle)
        if found:
            self._vehicles = tuple(vehicles)
            self._publish()
        return found

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self._vehicles)
