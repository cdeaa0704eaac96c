"""CLI entrypoint for the Fleet Duty Engine."""

from __future__ import annotations

import logging
import sys

from fleet_engine import __version__
from fleet_engine.config import load_alert_rules, load_driver_roster, load_job_templates
from fleet_engine.core.alerts import (
    build_alert_feed,
    generate_fatigue_alerts,
    generate_job_alerts,
)
from fleet_engine.core.clock import system_clock
from fleet_engine.core.projector import VehicleJobProjector
from fleet_engine.core.registry import DriverRegistry
from fleet_engine.core.seeding import seed_duty_starts


def main() -> None:
    """Seed a demo fleet and print drivers, fatigue and vehicles."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    print(f"Fleet Duty Engine v{__version__}")
    print("=" * 64)

    # -- Load roster and seed duty state --------------------------------------
    now = system_clock()
    roster = load_driver_roster()
    drivers = seed_duty_starts(roster, now, seed=2024)
    registry = DriverRegistry(drivers)
    projector = VehicleJobProjector(registry, load_job_templates())

    print(f"\nRoster: {len(registry)} drivers loaded")
    print(f"  {'Licence':<10}  {'Name':<16}  {'Status':<8}  {'Fatigue':<8}")
    for d in registry.drivers:
        level = registry.get_fatigue_level(d.duty_start)
        print(
            f"  {d.license_number:<10}  {d.name:<16}  "
            f"{d.duty_status.value:<8}  {level.value if level else '-':<8}"
        )

    # -- Fatigue summary -------------------------------------------------------
    summary = registry.fatigue_summary
    print("\nFatigue summary (on-duty drivers):")
    for level, count in summary.as_dict().items():
        print(f"  {level:<8} {count:3d}")

    # -- Vehicles --------------------------------------------------------------
    print("\nVehicles:")
    print(f"  {'Id':<6}  {'Callsign':<8}  {'Plate':<9}  {'Status':<8}  {'Job':<8}  Job status")
    for v in projector.vehicles:
        print(
            f"  {v.id:<6}  {v.callsign:<8}  {v.registration:<9}  "
            f"{v.display_status.value:<8}  {v.job.job_id or '-':<8}  {v.job.status}"
        )

    # -- Alerts ----------------------------------------------------------------
    rules = load_alert_rules()
    alerts = build_alert_feed(
        generate_job_alerts(projector.vehicles, now, rules),
        generate_fatigue_alerts(registry.drivers, now, rules),
    )
    print(f"\nAlerts: {len(alerts)}")
    for a in alerts:
        print(f"  [{a.priority:<8}] {a.message}")

    projector.close()


if __name__ == "__main__":
    sys.exit(main() or 0)
