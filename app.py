#!/usr/bin/env python3
"""
Streamlit sales dashboard.

Pick a state and a date range in the sidebar; the app pulls KPI cards and the
chart datasets from the sales API (see dashboard_api.py) and draws them with
the shared geometry engine:
  - Sales by City      → bars.py (proportional fills + tick axis)
  - Category / Segment → donut.py (wedges from chart_geometry)
  - Products / Sub Category tables
A one-page PDF of the current view can be downloaded (build_report.py).
"""
from __future__ import annotations

import traceback
from datetime import date
from typing import Sequence

import pandas as pd
import streamlit as st

from bars import bar_chart_svg_string, table_rows
from build_report import kpi_items, paint_report, report_filename
from chart_geometry import DataPoint
from dashboard_api import DashboardSession
from donut import donut_svg_string

# ----------------------------
# Helpers
# ----------------------------

def log(msg: str) -> None:
    st.session_state.setdefault("log", [])
    st.session_state.log.append(msg)


def reset_log() -> None:
    st.session_state["log"] = []


def note_error(message: str) -> None:
    """Log a session error once; reruns with the same error stay quiet."""
    if message and st.session_state.get("last_error") != message:
        log(f"⚠️ {message}")
    st.session_state["last_error"] = message


def get_session() -> DashboardSession:
    """One DashboardSession per browser session; it only refetches stale stages."""
    if "dashboard" not in st.session_state:
        session = DashboardSession()
        log("▶️ Loading states …")
        session.load_states()
        st.session_state["dashboard"] = session
    return st.session_state["dashboard"]


def to_date(value: str) -> date | None:
    if not value:
        return None
    return pd.to_datetime(value).date()


def table_frame(dataset: Sequence[DataPoint], label_header: str) -> pd.DataFrame:
    return pd.DataFrame(table_rows(dataset), columns=[label_header, "Sales in $"])


def show_svg(svg: str) -> None:
    st.markdown(f'<div style="text-align:center">{svg}</div>', unsafe_allow_html=True)


def show_table(title: str, dataset: Sequence[DataPoint], label_header: str) -> None:
    st.subheader(title)
    if dataset:
        st.dataframe(table_frame(dataset, label_header), hide_index=True, use_container_width=True)
    else:
        st.caption("No data available")

# ----------------------------
# Streamlit UI
# ----------------------------

def sidebar_filters(session: DashboardSession) -> None:
    with st.sidebar:
        st.header("Filters")
        if not session.states:
            st.warning("No states available.")
            return
        idx = session.states.index(session.selected_state) if session.selected_state in session.states else 0
        state = st.selectbox("Select a state", session.states, index=idx)
        if state != session.selected_state:
            log(f"State → {state}")
            session.select_state(state)

        rng = session.date_range
        lo = to_date(rng.min_date) if rng else None
        hi = to_date(rng.max_date) if rng else None
        from_d = st.date_input("Select From date", to_date(session.from_date), min_value=lo, max_value=hi)
        to_d = st.date_input("Select To date", to_date(session.to_date), min_value=lo, max_value=hi)
        if from_d and to_d:
            session.set_dates(from_d.isoformat(), to_d.isoformat())


def main() -> None:
    st.set_page_config(page_title="Sales Overview", page_icon="📊", layout="wide")
    if "log" not in st.session_state:
        reset_log()

    st.title("Sales Overview")
    try:
        session = get_session()
        sidebar_filters(session)
    except Exception as e:
        st.error("Dashboard failed. See log below.")
        log(f"❌ Fatal error: {e}\n{traceback.format_exc()}")
        st.code("\n".join(st.session_state.log), language="text")
        return

    data = session.data
    note_error(session.error)
    if session.error:
        if data is None:
            st.error(f"Error: {session.error}")
            return
        st.error(session.error)
    elif data is None:
        st.info("Loading dashboard data...")
        return

    # KPI cards
    for col, (title, value) in zip(st.columns(4), kpi_items(data)):
        col.metric(title, value)

    left, right = st.columns(2)
    with left:
        st.subheader("Sales by City")
        show_svg(bar_chart_svg_string(data.sales_by_city))
    with right:
        show_table("Sales by Products", data.sales_by_products, "Product Name")

    c1, c2, c3 = st.columns(3)
    with c1:
        st.subheader("Sales By Category")
        show_svg(donut_svg_string(data.sales_by_category))
    with c2:
        show_table("Sales By Sub Category", data.sales_by_sub_category, "Sub Category")
    with c3:
        st.subheader("Sales By Segment")
        show_svg(donut_svg_string(data.sales_by_segment))

    st.divider()
    pdf = paint_report(data, session.selected_state, session.from_date, session.to_date)
    st.download_button(
        "Download PDF report",
        data=pdf,
        file_name=report_filename(session.selected_state, session.from_date, session.to_date),
        mime="application/pdf",
        use_container_width=True,
    )

    with st.expander("Log"):
        st.code("\n".join(st.session_state.log) or "Ready.", language="text")


if __name__ == "__main__":
    main()
