"""Core duty, fatigue and vehicle projection modules for the fleet engine."""

from fleet_engine.core.alerts import (
    Alert,
    AlertRules,
    build_alert_feed,
    generate_fatigue_alerts,
    generate_job_alerts,
)
from fleet_engine.core.clock import Clock, ManualClock, system_clock
from fleet_engine.core.driver import DriverRecord, DutyStatus
from fleet_engine.core.fatigue import (
    FatigueLevel,
    FatigueSummary,
    compute_fatigue_summary,
    get_fatigue_level,
)
from fleet_engine.core.job import (
    JobAssignment,
    JobRequest,
    JobStatus,
    JobTemplate,
    default_job,
    is_active_status,
)
from fleet_engine.core.projector import VehicleJobProjector
from fleet_engine.core.registry import DriverRegistry
from fleet_engine.core.scheduler import PeriodicTask
from fleet_engine.core.seeding import seed_duty_starts
from fleet_engine.core.snapshot import build_snapshot
from fleet_engine.core.vehicle import (
    DriverRef,
    VehicleRecord,
    VehicleStatus,
    derive_display_status,
)

__all__ = [
    "Alert",
    "AlertRules",
    "Clock",
    "DriverRecord",
    "DriverRef",
    "DriverRegistry",
    "DutyStatus",
    "FatigueLevel",
    "FatigueSummary",
    "JobAssignment",
    "JobRequest",
    "JobStatus",
    "JobTemplate",
    "ManualClock",
    "PeriodicTask",
    "VehicleJobProjector",
    "VehicleRecord",
    "VehicleStatus",
    "build_alert_feed",
    "build_snapshot",
    "compute_fatigue_summary",
    "default_job",
    "derive_display_status",
    "generate_fatigue_alerts",
    "generate_job_alerts",
    "get_fatigue_level",
    "is_active_status",
    "seed_duty_starts",
    "system_clock",
]
