"""Canned sales-API responses shared by the client, session and app tests."""
import requests

from dashboard_api import DashboardClient

PAYLOAD = {
    "cards": {"totalSales": 12500.5, "quantitySold": 320, "discountPercentage": 12.5, "profit": 2100},
    "charts": {
        "salesByCity": [{"city": "Austin", "sales": 1200}, {"city": "Dallas", "sales": 5000}],
        "salesByProducts": [{"productName": "Chair", "sales": 900.25}],
        "salesByCategory": [{"category": "Furniture", "sales": 30}, {"category": "Technology", "sales": 70}],
        "salesBySubCategory": [{"subCategory": "Chairs", "sales": 900.25}],
        "salesBySegment": [{"segment": "Consumer", "sales": 60}],
    },
}


class FakeResponse:
    def __init__(self, body, status=200):
        self.body = body
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.body


class FakeHttp:
    """Routes GET paths to canned responses and records every call."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def get(self, url, params=None, timeout=None):
        path = url.replace("http://api.test", "")
        self.calls.append((path, params))
        resp = self.routes.get(path)
        if isinstance(resp, Exception):
            raise resp
        if resp is None:
            return FakeResponse({"success": False, "message": f"no route {path}"}, 404)
        return resp


def ok(data):
    return FakeResponse({"success": True, "data": data})


def make_client(routes):
    http = FakeHttp(routes)
    return DashboardClient(base_url="http://api.test/", timeout=3, session=http), http


def default_routes(**overrides):
    routes = {
        "/states": ok(["Texas", "New York"]),
        "/date-range/Texas": ok({"minDate": "2023-01-01", "maxDate": "2023-12-31"}),
        "/date-range/New%20York": ok({"minDate": "2022-05-01", "maxDate": "2022-06-30"}),
        "/dashboard-data": ok(PAYLOAD),
    }
    routes.update(overrides)
    return routes
