"""Configuration loader for the fleet engine.

Three YAML files live under ``data/``:

- ``drivers.yaml``       -- base driver roster.
- ``job_templates.yaml`` -- scripted job scenarios keyed by registration.
- ``alert_rules.yaml``   -- alert switches and thresholds.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from fleet_engine.core.alerts import AlertRules
from fleet_engine.core.driver import DriverRecord
from fleet_engine.core.fatigue import FatigueLevel
from fleet_engine.core.job import JobTemplate

logger = logging.getLogger(__name__)

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"
DRIVERS_PATH: Path = DATA_DIR / "drivers.yaml"
JOB_TEMPLATES_PATH: Path = DATA_DIR / "job_templates.yaml"
ALERT_RULES_PATH: Path = DATA_DIR / "alert_rules.yaml"

_REQUIRED_DRIVER_FIELDS: tuple[str, ...] = (
    "license_number",
    "name",
    "assigned_vehicle_registration",
)

_OPTIONAL_DRIVER_FIELDS: tuple[str, ...] = (
    "contact_number",
    "license_expiry",
    "vehicle_class",
    "make",
    "model",
    "capacity",
    "insurance_expiry",
    "last_fitness_check",
    "fitness_expiry",
    "permit",
    "emissions_expiry",
)

_REQUIRED_TEMPLATE_FIELDS: tuple[str, ...] = ("job_id", "status")

_OPTIONAL_TEMPLATE_TEXT: tuple[str, ...] = (
    "service_type",
    "account",
    "pickup_location",
    "dwell_time",
    "eta_description",
    "flight",
    "passengers",
)

_MINUTE_FIELDS: tuple[str, ...] = ("pickup_minutes_ago", "booking_minutes_ago")
_INSTANT_FIELDS: tuple[str, ...] = ("pickup_time", "booking_time")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_yaml(path: Path, label: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{label} file not found: {path}")
    with open(path, encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    logger.debug("Loaded %s from %s", label, path)
    return data


def _text(value: Any) -> str:
    """YAML turns bare dates into ``date`` objects; keep them as ISO text."""
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _instant(value: Any, where: str) -> datetime:
    if isinstance(value, datetime):
        instant = value
    elif isinstance(value, str):
        try:
            instant = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValueError(f"{where}: invalid timestamp {value!r}") from exc
    else:
        raise ValueError(f"{where}: timestamp must be a string, got {value!r}")
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(
            f"{where} must be numeric, got {type(value).__name__}"
        )
    return float(value)


# ---------------------------------------------------------------------------
# Driver roster
# ---------------------------------------------------------------------------


def load_driver_roster(path: Path | None = None) -> list[DriverRecord]:
    """Load the base driver roster.

    Every driver is returned off duty; duty starts are assigned at run time
    (see :func:`fleet_engine.core.seeding.seed_duty_starts`).

    Args:
        path: Optional override for the roster file path.

    Returns:
        Drivers in file order.

    Raises:
        FileNotFoundError: If the roster file does not exist.
        ValueError: If an entry is missing a required field.
    """
    data = _read_yaml(path or DRIVERS_PATH, "Driver roster")
    entries: list[dict] = data["drivers"]
    drivers: list[DriverRecord] = []

    for idx, entry in enumerate(entries):
        for field in _REQUIRED_DRIVER_FIELDS:
            if not entry.get(field):
                raise ValueError(
                    f"Driver entry {idx} ({entry.get('name', '<unknown>')}) "
                    f"is missing required field '{field}'"
                )

        allowed = entry.get("allowed_vehicle_classes", [])
        if isinstance(allowed, str):
            allowed = [part.strip() for part in allowed.split(",") if part.strip()]

        drivers.append(
            DriverRecord(
                license_number=str(entry["license_number"]),
                name=str(entry["name"]),
                assigned_vehicle_registration=str(
                    entry["assigned_vehicle_registration"]
                ),
                allowed_vehicle_classes=tuple(str(a) for a in allowed),
                **{f: _text(entry.get(f)) for f in _OPTIONAL_DRIVER_FIELDS},
            )
        )

    return drivers


# ---------------------------------------------------------------------------
# Job templates
# ---------------------------------------------------------------------------


def load_job_templates(path: Path | None = None) -> dict[str, JobTemplate]:
    """Load scripted job scenarios keyed by vehicle registration.

    Args:
        path: Optional override for the templates file path.

    Returns:
        Mapping ``{registration: JobTemplate}``.

    Raises:
        FileNotFoundError: If the templates file does not exist.
        ValueError: If an entry is missing fields or has malformed values.
    """
    data = _read_yaml(path or JOB_TEMPLATES_PATH, "Job templates")
    entries: dict[str, dict] = data.get("templates") or {}
    templates: dict[str, JobTemplate] = {}

    for registration, entry in entries.items():
        where = f"Template {registration}"
        for field in _REQUIRED_TEMPLATE_FIELDS:
            if not entry.get(field):
                raise ValueError(f"{where} is missing required field '{field}'")

        kwargs: dict[str, Any] = {
            "job_id": str(entry["job_id"]),
            "status": str(entry["status"]),
            "distance": _number(entry.get("distance", 0), f"{where}: 'distance'"),
        }
        for field in _OPTIONAL_TEMPLATE_TEXT:
            if entry.get(field) is not None:
                kwargs[field] = str(entry[field])
        for field in _MINUTE_FIELDS:
            if entry.get(field) is not None:
                kwargs[field] = _number(entry[field], f"{where}: '{field}'")
        for field in _INSTANT_FIELDS:
            if entry.get(field) is not None:
                kwargs[field] = _instant(entry[field], f"{where}: '{field}'")

        templates[str(registration)] = JobTemplate(**kwargs)

    return templates


# ---------------------------------------------------------------------------
# Alert rules
# ---------------------------------------------------------------------------


def load_alert_rules(path: Path | None = None) -> AlertRules:
    """Load alert switches and thresholds.

    The file holds one mapping per rule (``enabled`` plus an optional
    ``threshold_minutes``); rules not mentioned keep their defaults.

    Raises:
        FileNotFoundError: If the rules file does not exist.
        ValueError: If a threshold or fatigue level is invalid.
    """
    data = _read_yaml(path or ALERT_RULES_PATH, "Alert rules")
    rules: dict[str, dict] = data.get("rules") or {}
    kwargs: dict[str, Any] = {}

    for rule in ("late_accept", "late_pickup", "waiting_time", "late_dropoff"):
        entry = rules.get(rule) or {}
        if "enabled" in entry:
            kwargs[f"{rule}_enabled"] = bool(entry["enabled"])
        if "threshold_minutes" in entry:
            kwargs[f"{rule}_minutes"] = _number(
                entry["threshold_minutes"], f"Rule {rule}: 'threshold_minutes'"
            )

    for rule in ("driver_offline", "flight_number", "fatigue"):
        entry = rules.get(rule) or {}
        if "enabled" in entry:
            kwargs[f"{rule}_enabled"] = bool(entry["enabled"])

    min_level = (rules.get("fatigue") or {}).get("min_level")
    if min_level is not None:
        try:
            kwargs["fatigue_min_level"] = FatigueLevel(str(min_level).upper())
        except ValueError as exc:
            raise ValueError(f"Rule fatigue: unknown level {min_level!r}") from exc

    return AlertRules(**kwargs)
