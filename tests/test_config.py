"""Tests for the YAML configuration loaders."""

from datetime import timezone
from pathlib import Path

import pytest

from fleet_engine.config import load_alert_rules, load_driver_roster, load_job_templates
from fleet_engine.core.alerts import AlertRules
from fleet_engine.core.fatigue import FatigueLevel
from fleet_engine.core.job import JobStatus

# ---------------------------------------------------------------------------
# Shipped data files
# ---------------------------------------------------------------------------


def test_roster_loads_six_off_duty_drivers() -> None:
    """The shipped roster has six drivers and none is on duty."""
    roster = load_driver_roster()
    assert len(roster) == 6
    assert all(not d.on_duty for d in roster)
    assert roster[0].license_number == "D12345678"
    assert roster[0].assigned_vehicle_registration == "SA-12345"


def test_roster_dates_kept_as_text() -> None:
    """Bare YAML dates come back as ISO strings."""
    driver = load_driver_roster()[0]
    assert driver.license_expiry == "2025-12-31"
    assert driver.allowed_vehicle_classes == ("Truck", "Van")


def test_templates_keyed_by_registration() -> None:
    """Templates load with relative and absolute times."""
    templates = load_job_templates()
    assert templates["SA-24680"].status == JobStatus.RECEIVED
    assert templates["SA-24680"].booking_minutes_ago == 3.0
    assert templates["SA-24680"].flight == "SV123"
    assert templates["SA-12345"].pickup_time.tzinfo is not None
    assert "SA-54321" not in templates


def test_shipped_alert_rules_match_defaults() -> None:
    """The shipped rules file restates the built-in defaults."""
    assert load_alert_rules() == AlertRules()


# ---------------------------------------------------------------------------
# Malformed files
# ---------------------------------------------------------------------------


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file(tmp_path: Path) -> None:
    """A missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError, match="not found"):
        load_driver_roster(tmp_path / "absent.yaml")


def test_driver_missing_required_field(tmp_path: Path) -> None:
    """Entries without a registration are rejected."""
    path = _write(
        tmp_path,
        "drivers.yaml",
        "drivers:\n  - license_number: D1\n    name: Test\n",
    )
    with pytest.raises(ValueError, match="assigned_vehicle_registration"):
        load_driver_roster(path)


def test_allowed_classes_as_comma_string(tmp_path: Path) -> None:
    """A comma-separated class list is split."""
    path = _write(
        tmp_path,
        "drivers.yaml",
        "drivers:\n"
        "  - license_number: D1\n"
        "    name: Test\n"
        "    assigned_vehicle_registration: SA-1\n"
        "    allowed_vehicle_classes: 'Saloon, Van'\n",
    )
    assert load_driver_roster(path)[0].allowed_vehicle_classes == ("Saloon", "Van")


def test_template_bad_distance(tmp_path: Path) -> None:
    """Non-numeric distances are rejected."""
    path = _write(
        tmp_path,
        "templates.yaml",
        "templates:\n  SA-1:\n    job_id: J\n    status: Idle\n    distance: far\n",
    )
    with pytest.raises(ValueError, match="distance"):
        load_job_templates(path)


def test_template_naive_timestamp_is_utc(tmp_path: Path) -> None:
    """Timestamps without an offset are read as UTC."""
    path = _write(
        tmp_path,
        "templates.yaml",
        "templates:\n"
        "  SA-1:\n"
        "    job_id: J\n"
        "    status: Accepted\n"
        "    pickup_time: '2024-08-01T10:00:00'\n",
    )
    pickup = load_job_templates(path)["SA-1"].pickup_time
    assert pickup.tzinfo is timezone.utc
    assert pickup.hour == 10


def test_template_bad_timestamp(tmp_path: Path) -> None:
    """Unparseable timestamps are rejected."""
    path = _write(
        tmp_path,
        "templates.yaml",
        "templates:\n  SA-1:\n    job_id: J\n    status: Idle\n    booking_time: soon\n",
    )
    with pytest.raises(ValueError, match="invalid timestamp"):
        load_job_templates(path)


def test_alert_rules_partial_override(tmp_path: Path) -> None:
    """Unmentioned rules keep their defaults."""
    path = _write(
        tmp_path,
        "rules.yaml",
        "rules:\n"
        "  waiting_time:\n"
        "    threshold_minutes: 25\n"
        "  fatigue:\n"
        "    min_level: critical\n",
    )
    rules = load_alert_rules(path)
    assert rules.waiting_time_minutes == 25.0
    assert rules.fatigue_min_level is FatigueLevel.CRITICAL
    assert rules.late_accept_minutes == AlertRules().late_accept_minutes


def test_alert_rules_unknown_level(tmp_path: Path) -> None:
    """An unknown fatigue level is rejected."""
    path = _write(tmp_path, "rules.yaml", "rules:\n  fatigue:\n    min_level: SLEEPY\n")
    with pytest.raises(ValueError, match="unknown level"):
        load_alert_rules(path)
