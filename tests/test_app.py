from datetime import date
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from app import table_frame, to_date
from chart_geometry import DataPoint
from dashboard_api import DashboardSession
from fakes import FakeResponse, default_routes, make_client

APP = str(Path(__file__).parents[1] / "app.py")


def test_table_frame_columns_and_money():
    df = table_frame([DataPoint("Chairs", 2500), DataPoint("Tables", 99.5)], "Sub Category")
    assert list(df.columns) == ["Sub Category", "Sales in $"]
    assert df["Sales in $"].tolist() == ["$2,500", "$99.5"]


def test_table_frame_empty():
    assert table_frame([], "Product Name").empty


def test_to_date():
    assert to_date("2023-06-30") == date(2023, 6, 30)
    assert to_date("") is None


# ----------------------------
# Full script runs against a stubbed API
# ----------------------------

def _session(**routes):
    client, http = make_client(default_routes(**routes))
    session = DashboardSession(client)
    session.load_states()
    return session, http


def _app(session):
    at = AppTest.from_file(APP, default_timeout=30)
    at.session_state["dashboard"] = session
    return at


def _warnings_logged(at):
    return [line for line in at.session_state["log"] if line.startswith("⚠️")]


def test_dashboard_renders_cards_and_filters():
    session, _ = _session()
    at = _app(session).run()
    assert not at.exception
    assert at.title[0].value == "Sales Overview"
    assert [m.label for m in at.metric] == ["Total Sales", "Quantity Sold", "Discount%", "Profit"]
    assert at.metric[0].value == "$12,500.5"
    assert at.sidebar.selectbox[0].value == "Texas"
    assert not at.error


def test_changing_state_in_sidebar_refetches():
    session, http = _session()
    at = _app(session).run()
    n = len(http.calls)

    at.sidebar.selectbox[0].select("New York").run()
    assert not at.exception
    assert [p for p, _ in http.calls[n:n + 2]] == ["/date-range/New%20York", "/dashboard-data"]
    assert session.selected_state == "New York"
    assert "State → New York" in at.session_state["log"]


def test_states_failure_shows_error_without_charts():
    session, _ = _session(**{"/states": FakeResponse({}, status=500)})
    at = _app(session).run()
    assert not at.exception
    assert at.error[0].value == "Error: Failed to fetch states"
    assert not at.metric
    assert at.sidebar.warning[0].value == "No states available."


def test_data_failure_keeps_previous_charts():
    session, http = _session()
    http.routes["/dashboard-data"] = FakeResponse({"success": False, "message": "query timeout"})
    session.set_dates("2023-06-01", "2023-06-30")

    at = _app(session).run()
    assert not at.exception
    assert at.error[0].value == "query timeout"
    assert len(at.metric) == 4


@pytest.mark.parametrize("runs", [1, 3])
def test_same_error_logged_once_across_reruns(runs):
    session, _ = _session(**{"/states": FakeResponse({}, status=500)})
    at = _app(session)
    for _ in range(runs):
        at.run()
    assert _warnings_logged(at) == ["⚠️ Failed to fetch states"]
