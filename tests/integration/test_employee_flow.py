"""
Integration tests for the employee facade against the mock upstream API.
"""

import pytest
import httpx
from fastapi.testclient import TestClient

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from mocks.employee_api.server import MockEmployeeApiServer, SEED_EMPLOYEES
from service_employees.app.main import EmployeeGatewayService


class TestEmployeeFlow:
    """End-to-end flow: facade -> service -> client -> mock upstream."""

    @pytest.fixture(autouse=True)
    def fast_retries(self, monkeypatch):
        monkeypatch.setenv("EMPLOYEE_RETRY_WAIT_SECONDS", "0")
        monkeypatch.setenv("EMPLOYEE_CACHE_BACKEND", "memory")

    @pytest.fixture
    def upstream(self):
        """Seeded mock upstream API."""
        return MockEmployeeApiServer()

    @pytest.fixture
    def gateway(self, upstream):
        return EmployeeGatewayService(upstream_transport=httpx.ASGITransport(app=upstream.app))

    @pytest.fixture
    def client(self, gateway):
        return TestClient(gateway.app)

    def _upstream_fetches(self, gateway, operation="fetch_all"):
        value = gateway.metrics.registry.get_sample_value(
            "upstream_requests_total", {"operation": operation, "outcome": "200"}
        )
        return value or 0

    def test_list_all_is_cached(self, gateway, client):
        first = client.get("/api/v1/employee")
        second = client.get("/api/v1/employee")

        assert first.status_code == 200
        assert len(first.json()) == len(SEED_EMPLOYEES)
        assert first.json() == second.json()
        assert self._upstream_fetches(gateway) == 1

    def test_aggregations(self, client):
        assert client.get("/api/v1/employee/highestSalary").json() == 150000

        top_ten = client.get("/api/v1/employee/topTenHighestEarningEmployeeNames").json()
        assert len(top_ten) == 10
        assert top_ten[0] == "Eve Black"
        assert "Bob Brown" not in top_ten

        matches = client.get("/api/v1/employee/search/john").json()
        assert sorted(match["employee_name"] for match in matches) == ["John Doe", "Mary Johnson"]

    def test_create_then_list(self, gateway, client):
        client.get("/api/v1/employee")

        created = client.post(
            "/api/v1/employee",
            json={"name": "New Hire", "salary": 70000, "age": 28, "title": "Engineer"}
        )
        assert created.status_code == 200
        body = created.json()
        assert body["employee_name"] == "New Hire"
        assert body["employee_email"] == "new.hire@company.com"

        names = [employee["employee_name"] for employee in client.get("/api/v1/employee").json()]
        assert "New Hire" in names
        assert self._upstream_fetches(gateway) == 2

    def test_delete_by_id(self, upstream, client):
        employee_id = next(
            employee_id for employee_id, employee in upstream.employees.items()
            if employee["employee_name"] == "John Doe"
        )

        assert client.get(f"/api/v1/employee/{employee_id}").status_code == 200

        response = client.delete(f"/api/v1/employee/{employee_id}")
        assert response.status_code == 200
        assert response.json() == "John Doe"
        assert "John Doe" not in upstream.list_names()

        assert client.get(f"/api/v1/employee/{employee_id}").status_code == 404
        names = [employee["employee_name"] for employee in client.get("/api/v1/employee").json()]
        assert "John Doe" not in names

    def test_delete_unknown_id(self, upstream, client):
        before = len(upstream.employees)

        response = client.delete("/api/v1/employee/does-not-exist")

        assert response.status_code == 404
        assert len(upstream.employees) == before

    def test_blank_search_is_rejected(self, client):
        response = client.get("/api/v1/employee/search/%20%20")
        assert response.status_code == 400

    def test_invalid_create_never_reaches_upstream(self, upstream, client):
        before = len(upstream.employees)

        response = client.post(
            "/api/v1/employee",
            json={"name": "Kid", "salary": 1000, "age": 12, "title": "Intern"}
        )

        assert response.status_code == 400
        assert len(upstream.employees) == before


class TestRateLimitedUpstream:
    """Facade behaviour when the upstream API rate limits."""

    @pytest.fixture(autouse=True)
    def fast_retries(self, monkeypatch):
        monkeypatch.setenv("EMPLOYEE_RETRY_WAIT_SECONDS", "0")
        monkeypatch.setenv("EMPLOYEE_RETRY_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("EMPLOYEE_CACHE_BACKEND", "memory")

    def test_exhausted_retries_surface_429(self):
        upstream = MockEmployeeApiServer(rate_limit_requests=1, rate_limit_window_seconds=3600)
        gateway = EmployeeGatewayService(upstream_transport=httpx.ASGITransport(app=upstream.app))
        client = TestClient(gateway.app)

        assert client.get("/api/v1/employee/highestSalary").status_code == 200
        # Listing is cached; a by-id lookup has to reach the limited upstream
        response = client.get("/api/v1/employee/some-id")

        assert response.status_code == 429
        assert gateway.metrics.registry.get_sample_value(
            "retry_attempts_total", {"operation": "fetch_by_id"}
        ) == 3.0


class TestMockEmployeeApi:
    """Contract checks for the mock upstream."""

    @pytest.fixture
    def client(self):
        return TestClient(MockEmployeeApiServer().app)

    def test_list_envelope(self, client):
        body = client.get("/api/v1/employee").json()
        assert body["status"] == "Successfully processed request."
        assert len(body["data"]) == len(SEED_EMPLOYEES)

    def test_get_unknown_id_is_404(self, client):
        assert client.get("/api/v1/employee/unknown").status_code == 404

    def test_delete_unknown_name_returns_false(self, client):
        response = client.request("DELETE", "/api/v1/employee", json={"name": "Nobody"})
        assert response.json()["data"] is False

    def test_rate_limit(self):
        client = TestClient(MockEmployeeApiServer(rate_limit_requests=2).app)
        assert client.get("/api/v1/employee").status_code == 200
        assert client.get("/api/v1/employee").status_code == 200
        assert client.get("/api/v1/employee").status_code == 429
