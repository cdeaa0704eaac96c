"""Fleet Duty Dashboard.

Read-only dispatcher dashboard built with Streamlit and Plotly.  Shows the
fatigue summary, fleet status, driver and vehicle tables and the alert
feed, with controls for duty toggles and manual job dispatch.

Launch with::

    streamlit run dashboard/app.py
"""

from __future__ import annotations

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from fleet_engine.config import load_alert_rules, load_driver_roster, load_job_templates
from fleet_engine.core.alerts import (
    build_alert_feed,
    generate_fatigue_alerts,
    generate_job_alerts,
)
from fleet_engine.core.clock import system_clock
from fleet_engine.core.fatigue import FatigueLevel
from fleet_engine.core.job import JobRequest
from fleet_engine.core.projector import VehicleJobProjector
from fleet_engine.core.registry import DriverRegistry
from fleet_engine.core.seeding import seed_duty_starts
from fleet_engine.core.vehicle import VehicleStatus

# ---------------------------------------------------------------------------
# Display constants
# ---------------------------------------------------------------------------

_FATIGUE_COLOURS: dict[FatigueLevel, str] = {
    FatigueLevel.LOW: "#2e7d32",
    FatigueLevel.MEDIUM: "#f9a825",
    FatigueLevel.HIGH: "#ef6c00",
    FatigueLevel.CRITICAL: "#c62828",
}

_STATUS_COLOURS: dict[VehicleStatus, str] = {
    VehicleStatus.ON_DUTY: "#1565c0",
    VehicleStatus.IDLE: "#90a4ae",
    VehicleStatus.OFFLINE: "#424242",
    VehicleStatus.MAINTENANCE: "#6a1b9a",
    VehicleStatus.ON_BREAK: "#00838f",
}

_SEED: int = 2024


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@st.cache_resource
def _build_fleet() -> tuple[DriverRegistry, VehicleJobProjector]:
    """Seed the demo fleet once per server process and start its refresh."""
    roster = load_driver_roster()
    registry = DriverRegistry(seed_duty_starts(roster, system_clock(), seed=_SEED))
    projector = VehicleJobProjector(registry, load_job_templates())
    registry.start()
    return registry, projector


def _drivers_frame(registry: DriverRegistry) -> pd.DataFrame:
    rows = []
    for d in registry.drivers:
        level = registry.get_fatigue_level(d.duty_start)
        rows.append(
            {
                "Licence": d.license_number,
                "Name": d.name,
                "Contact": d.contact_number,
                "Vehicle": d.assigned_vehicle_registration,
                "Status": d.duty_status.value,
                "Duty start": d.duty_start.strftime("%H:%M") if d.duty_start else "",
                "Fatigue": level.value if level else "",
                "Licence expiry": d.license_expiry,
            }
        )
    return pd.DataFrame(rows)


def _vehicles_frame(projector: VehicleJobProjector) -> pd.DataFrame:
    rows = []
    for v in projector.vehicles:
        rows.append(
            {
                "Id": v.id,
                "Callsign": v.callsign,
                "Plate": v.registration,
                "Type": v.vehicle_class,
                "Driver": v.driver.name,
                "Status": v.display_status.value,
                "Job": v.job.job_id or "",
                "Job status": v.job.status,
                "Account": v.job.account or "",
                "Pickup": v.job.pickup_location or "",
                "ETA": v.job.eta_description or "",
                "Dwell": v.job.dwell_time,
            }
        )
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Streamlit app
# ---------------------------------------------------------------------------


def main() -> None:  # noqa: C901
    """Entry point for the Streamlit dashboard."""
    st.set_page_config(page_title="Fleet Duty Dashboard", layout="wide")
    st.title("Fleet Duty Dashboard")

    registry, projector = _build_fleet()

    # ── Sidebar: duty toggle ─────────────────────────────────────────────
    st.sidebar.header("Driver Duty")
    names = {d.license_number: d.name for d in registry.drivers}
    selected: str = st.sidebar.selectbox(
        "Driver",
        options=list(names),
        format_func=lambda dl: f"{names[dl]} ({dl})",
    )
    driver = registry.get_driver(selected)
    if driver is not None:
        label = "End duty" if driver.on_duty else "Start duty"
        if st.sidebar.button(label):
            if driver.on_duty:
                registry.end_duty(selected)
            else:
                registry.start_duty(selected)
            st.rerun()

    # ── Sidebar: manual dispatch ─────────────────────────────────────────
    st.sidebar.header("Manual Dispatch")
    with st.sidebar.form("dispatch"):
        vehicle_id: str = st.selectbox(
            "Vehicle", options=[v.id for v in projector.vehicles]
        )
        job_id: str = st.text_input("Job id", value="JOB-900")
        customer: str = st.text_input("Customer")
        pickup: str = st.text_input("Pickup", value="King Khalid Airport")
        title: str = st.text_input("Description", value="1 PAX")
        vehicle_type: str = st.selectbox("Vehicle type", options=["Car", "Van", "Truck"])
        submitted = st.form_submit_button("Assign job")

    if submitted:
        assigned = projector.assign_job_to_vehicle(
            vehicle_id,
            JobRequest(
                id=job_id,
                vehicle_type=vehicle_type,
                customer_name=customer or None,
                from_location=pickup,
                title=title,
            ),
        )
        if assigned is None:
            st.sidebar.warning(f"Vehicle {vehicle_id} not found.")
        else:
            st.sidebar.success(f"Job {assigned} sent to {vehicle_id}.")

    now = registry.clock()

    # ── Section 1: Summary cards ─────────────────────────────────────────
    st.header("1 -- Fleet Summary")
    summary = registry.fatigue_summary
    counts = projector.status_counts()
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Drivers on duty", f"{summary.total}/{len(registry)}")
    col2.metric("Active jobs", projector.active_job_count())
    col3.metric("Idle vehicles", counts[VehicleStatus.IDLE])
    col4.metric("Critical fatigue", summary.critical)

    # ── Section 2: Charts ────────────────────────────────────────────────
    st.header("2 -- Fatigue & Fleet Status")
    col_fatigue, col_status = st.columns(2)

    with col_fatigue:
        levels = list(FatigueLevel)
        fig_fatigue = go.Figure(
            go.Bar(
                x=[lvl.value for lvl in levels],
                y=[summary.count(lvl) for lvl in levels],
                marker_color=[_FATIGUE_COLOURS[lvl] for lvl in levels],
            )
        )
        fig_fatigue.update_layout(
            title="Driver Fatigue",
            xaxis_title="Fatigue level",
            yaxis_title="Drivers",
            height=350,
        )
        st.plotly_chart(fig_fatigue, use_container_width=True)

    with col_status:
        statuses = [s for s in VehicleStatus if counts[s] > 0]
        fig_status = go.Figure(
            go.Pie(
                labels=[s.value for s in statuses],
                values=[counts[s] for s in statuses],
                marker=dict(colors=[_STATUS_COLOURS[s] for s in statuses]),
                hole=0.45,
            )
        )
        fig_status.update_layout(title="Fleet Status", height=350)
        st.plotly_chart(fig_status, use_container_width=True)

    # ── Section 3: Tables ────────────────────────────────────────────────
    st.header("3 -- Drivers")
    st.dataframe(_drivers_frame(registry), use_container_width=True, hide_index=True)

    st.header("4 -- Vehicles")
    st.dataframe(_vehicles_frame(projector), use_container_width=True, hide_index=True)

    # ── Section 5: Alerts ────────────────────────────────────────────────
    st.header("5 -- Alerts")
    rules = load_alert_rules()
    alerts = build_alert_feed(
        generate_job_alerts(projector.vehicles, now, rules),
        generate_fatigue_alerts(registry.drivers, now, rules),
    )
    if not alerts:
        st.info("No active alerts.")
    for alert in alerts:
        st.write(f"**{alert.priority}** -- {alert.message}")

    # ── Footer ───────────────────────────────────────────────────────────
    st.markdown("---")
    st.caption(
        "Fleet Duty Dashboard -- fatigue refreshes every "
        f"{registry.refresh_interval:.0f}s. Duty toggles update the "
        "driver registry; manual dispatches last until the next refresh."
    )


if __name__ == "__main__":
    main()
