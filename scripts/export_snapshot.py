#!/usr/bin/env python
"""Export a snapshot of the seeded demo fleet.

This script:

1. Loads the base roster, job templates and alert rules from ``data/``.
2. Seeds duty starts (reproducible via ``--seed``).
3. Builds the driver registry and the vehicle projection.
4. Writes drivers, fatigue summary, vehicles and alerts to
   ``results/fleet_snapshot.json``.
5. Prints a structured summary.

Usage
-----
::

    python scripts/export_snapshot.py [--seed 7] [--output path.json]
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict

# Ensure the project root is on the import path.
_project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fleet_engine.config import (  # noqa: E402
    load_alert_rules,
    load_driver_roster,
    load_job_templates,
)
from fleet_engine.core.alerts import (  # noqa: E402
    build_alert_feed,
    generate_fatigue_alerts,
    generate_job_alerts,
)
from fleet_engine.core.clock import system_clock  # noqa: E402
from fleet_engine.core.projector import VehicleJobProjector  # noqa: E402
from fleet_engine.core.registry import DriverRegistry  # noqa: E402
from fleet_engine.core.seeding import seed_duty_starts  # noqa: E402
from fleet_engine.core.snapshot import build_snapshot  # noqa: E402

logger = logging.getLogger("export_snapshot")

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

DEFAULT_SEED: int = 2024
RESULTS_DIR: str = os.path.join(_project_root, "results")
OUTPUT_PATH: str = os.path.join(RESULTS_DIR, "fleet_snapshot.json")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED)
    parser.add_argument("--output", default=OUTPUT_PATH)
    return parser.parse_args(argv)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """Seed the demo fleet, export a snapshot and print a summary."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = _parse_args(argv)
    now = system_clock()

    print("=" * 60)
    print("FLEET SNAPSHOT EXPORT")
    print("=" * 60)
    print()

    # -- Step 1: Load configuration ------------------------------------------
    print("[1/3] Loading roster, templates and alert rules")
    roster = load_driver_roster()
    templates = load_job_templates()
    rules = load_alert_rules()
    print(f"      {len(roster)} drivers, {len(templates)} job templates.")
    print()

    # -- Step 2: Build registry and projection -------------------------------
    print(f"[2/3] Seeding duty state (seed={args.seed})")
    registry = DriverRegistry(seed_duty_starts(roster, now, seed=args.seed))
    projector = VehicleJobProjector(registry, templates)
    snapshot = build_snapshot(registry, projector, now)
    alerts = build_alert_feed(
        generate_job_alerts(projector.vehicles, now, rules),
        generate_fatigue_alerts(registry.drivers, now, rules),
    )
    snapshot["alerts"] = [asdict(a) for a in alerts]
    print()

    # -- Step 3: Save ---------------------------------------------------------
    print("[3/3] Saving snapshot")
    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as fh:
        json.dump(snapshot, fh, indent=2, sort_keys=True)
    logger.info("Snapshot written to %s", args.output)
    print()

    # -- Structured summary ---------------------------------------------------
    print("=" * 60)
    print("FATIGUE SUMMARY")
    print("=" * 60)
    for level, count in snapshot["fatigue_summary"].items():
        print(f"  {level:<10s} {count:3d}")
    print()
    print("=" * 60)
    print("VEHICLE STATUS")
    print("=" * 60)
    for status, count in snapshot["status_counts"].items():
        print(f"  {status:<12s} {count:3d}")
    print(f"  {'Active jobs':<12s} {snapshot['active_jobs']:3d}")
    print(f"  {'Alerts':<12s} {len(alerts):3d}")
    print()
    print("Export complete.")

    projector.close()


if __name__ == "__main__":
    main()
