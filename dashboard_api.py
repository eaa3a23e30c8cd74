# dashboard_api.py
# Client for the sales backend + the filter session that chains
#   state selection -> valid date range -> dashboard data
# Each stage refetches only when its input changed; failures are recorded,
# never raised out of the session, so charts keep rendering the last data.
# Requires: pip install requests

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote

import requests

from chart_geometry import DataPoint, dataset_from_records
from config import API_BASE, API_TIMEOUT_S

logger = logging.getLogger(__name__)


class DashboardApiError(RuntimeError):
    pass


# ----------------------------
# Data containers
# ----------------------------

@dataclass
class DateRange:
    min_date: str
    max_date: str


@dataclass
class KpiCards:
    total_sales: float = 0.0
    quantity_sold: float = 0.0
    discount_percentage: float = 0.0
    profit: float = 0.0


@dataclass
class DashboardData:
    cards: KpiCards = field(default_factory=KpiCards)
    sales_by_city: List[DataPoint] = field(default_factory=list)
    sales_by_products: List[DataPoint] = field(default_factory=list)
    sales_by_category: List[DataPoint] = field(default_factory=list)
    sales_by_sub_category: List[DataPoint] = field(default_factory=list)
    sales_by_segment: List[DataPoint] = field(default_factory=list)


# (attribute, payload key, label key) for every chart in the payload
CHART_KEYS = [
    ("sales_by_city", "salesByCity", "city"),
    ("sales_by_products", "salesByProducts", "productName"),
    ("sales_by_category", "salesByCategory", "category"),
    ("sales_by_sub_category", "salesBySubCategory", "subCategory"),
    ("sales_by_segment", "salesBySegment", "segment"),
]


def parse_dashboard_data(payload: dict) -> DashboardData:
    cards = payload.get("cards") or {}
    charts = payload.get("charts") or {}
    data = DashboardData(
        cards=KpiCards(
            total_sales=float(cards.get("totalSales", 0) or 0),
            quantity_sold=float(cards.get("quantitySold", 0) or 0),
            discount_percentage=float(cards.get("discountPercentage", 0) or 0),
            profit=float(cards.get("profit", 0) or 0),
        )
    )
    for attr, key, label_key in CHART_KEYS:
        setattr(data, attr, dataset_from_records(charts.get(key), label_key, "sales"))
    return data


# ----------------------------
# HTTP client
# ----------------------------

class DashboardClient:
    def __init__(self, base_url: str = API_BASE, timeout: float = API_TIMEOUT_S, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str, params: Optional[dict] = None) -> Any:
        """GET ``path`` and unwrap the {success, data, message, error} envelope."""
        url = f"{self.base_url}{path}"
        try:
            r = self.http.get(url, params=params, timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except requests.RequestException as e:
            raise DashboardApiError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise DashboardApiError(f"GET {path} returned invalid JSON: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            msg = None
            if isinstance(body, dict):
                msg = body.get("message") or body.get("error")
            raise DashboardApiError(msg or f"GET {path} was not successful")
        return body.get("data")

    def fetch_states(self) -> List[str]:
        return [str(s) for s in self._get("/states") or []]

    def fetch_date_range(self, state: str) -> DateRange:
        data = self._get(f"/date-range/{quote(state, safe='')}") or {}
        return DateRange(min_date=str(data.get("minDate", "")), max_date=str(data.get("maxDate", "")))

    def fetch_dashboard_data(self, state: str, from_date: str = "", to_date: str = "") -> DashboardData:
        params = {"state": state}
        if from_date:
            params["fromDate"] = from_date
        if to_date:
            params["toDate"] = to_date
        payload = self._get("/dashboard-data", params=params) or {}
        try:
            return parse_dashboard_data(payload)
        except (TypeError, ValueError, AttributeError) as e:
            raise DashboardApiError(f"GET /dashboard-data returned malformed data: {e}") from e


# ----------------------------
# Filter session
# ----------------------------

class DashboardSession:
    def __init__(self, client: DashboardClient | None = None):
        self.client = client or DashboardClient()
        self.states: List[str] = []
        self.selected_state: str = ""
        self.date_range: Optional[DateRange] = None
        self.from_date: str = ""
        self.to_date: str = ""
        self.data: Optional[DashboardData] = None
        self.error: str = ""
        # the (state, from, to) the current data was fetched for
        self._loaded_key: Optional[tuple] = None

    def _fail(self, what: str, exc: Exception, show_message: bool = False) -> None:
        # the backend message is only surfaced for the data call, like the web dashboard
        self.error = (show_message and str(exc)) or f"Failed to fetch {what}"
        logger.warning("%s: %s", self.error, exc)

    def load_states(self) -> List[str]:
        try:
            self.states = self.client.fetch_states()
        except DashboardApiError as e:
            self._fail("states", e)
            return self.states
        if self.states and not self.selected_state:
            self.select_state(self.states[0])
        return self.states

    def select_state(self, state: str) -> None:
        if not state or state == self.selected_state:
            return
        try:
            date_range = self.client.fetch_date_range(state)
        except DashboardApiError as e:
            # keep the previous selection so dates and data still belong together
            self._fail("date range", e)
            return
        self.selected_state = state
        self.date_range = date_range
        self.from_date = self.date_range.min_date
        self.to_date = self.date_range.max_date
        self.refresh()

    def set_dates(self, from_date: str, to_date: str) -> None:
        if (from_date, to_date) == (self.from_date, self.to_date):
            return
        self.from_date, self.to_date = from_date, to_date
        self.refresh()

    def refresh(self, force: bool = False) -> Optional[DashboardData]:
        """Fetch dashboard data for the current filters unless it is already loaded."""
        if not (self.selected_state and self.from_date and self.to_date):
            return self.data
        key = (self.selected_state, self.from_date, self.to_date)
        if key == self._loaded_key and not force:
            return self.data
        try:
            self.data = self.client.fetch_dashboard_data(*key)
        except DashboardApiError as e:
            self._fail("dashboard data", e, show_message=True)
            return self.data
        self._loaded_key = key
        self.error = ""
        return self.data
