"""
Mock upstream employee API implementing the list/get/create/delete contract.
"""

import time
import uuid
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shared.logging import get_logger

STATUS_OK = "Successfully processed request."

SEED_EMPLOYEES = [
    ("John Doe", 50000, 34, "Software Engineer"),
    ("Mary Johnson", 75000, 41, "Engineering Manager"),
    ("Alice Smith", 90000, 29, "Data Scientist"),
    ("Bob Brown", 45000, 23, "Support Specialist"),
    ("Carol White", 120000, 52, "Director of Engineering"),
    ("David Green", 60000, 37, "QA Engineer"),
    ("Eve Black", 150000, 48, "Chief Technology Officer"),
    ("Frank Moore", 85000, 31, "DevOps Engineer"),
    ("Grace Lee", 110000, 45, "Principal Engineer"),
    ("Henry Clark", 135000, 50, "VP of Product"),
    ("Ivy Lewis", 140000, 39, "VP of Engineering"),
]


class CreateMockEmployeeInput(BaseModel):
    name: str
    salary: int
    age: int
    title: str


class DeleteMockEmployeeInput(BaseModel):
    name: str


class MockEmployeeApiServer:
    """Mock upstream employee API server implementation."""

    def __init__(
        self,
        port: int = 8112,
        *,
        seed: bool = True,
        rate_limit_requests: Optional[int] = None,
        rate_limit_window_seconds: float = 60.0,
    ):
        self.port = port
        self.logger = get_logger("mock.employee_api")
        self.app = FastAPI(title="Mock Employee API", version="1.0.0")

        self.rate_limit_requests = rate_limit_requests
        self.rate_limit_window_seconds = rate_limit_window_seconds
        self._request_times: Deque[float] = deque()

        self.employees: Dict[str, Dict[str, Any]] = {}
        if seed:
            for name, salary, age, title in SEED_EMPLOYEES:
                self.add_employee(name, salary, age, title)

        self._setup_routes()

    def add_employee(self, name: str, salary: int, age: int, title: str) -> Dict[str, Any]:
        """Insert an employee and return its wire representation."""
        employee = {
            "id": str(uuid.uuid4()),
            "employee_name": name,
            "employee_salary": salary,
            "employee_age": age,
            "employee_title": title,
            "employee_email": f"{name.lower().replace(' ', '.')}@company.com",
        }
        self.employees[employee["id"]] = employee
        return employee

    def _setup_routes(self):
        """Set up mock employee API routes."""

        @self.app.middleware("http")
        async def rate_limit(request: Request, call_next):
            if self._rate_limited():
                self.logger.info("Rate limiting mock request", path=request.url.path)
                return JSONResponse(status_code=429, content={"error": "Too Many Requests"})
            return await call_next(request)

        @self.app.get("/api/v1/employee")
        async def list_employees():
            return {"data": list(self.employees.values()), "status": STATUS_OK}

        @self.app.get("/api/v1/employee/{employee_id}")
        async def get_employee(employee_id: str):
            employee = self.employees.get(employee_id)
            if employee is None:
                return JSONResponse(status_code=404, content={"data": None, "status": "Not found"})
            return {"data": employee, "status": STATUS_OK}

        @self.app.post("/api/v1/employee")
        async def create_employee(payload: CreateMockEmployeeInput):
            employee = self.add_employee(payload.name, payload.salary, payload.age, payload.title)
            return {"data": employee, "status": STATUS_OK}

        @self.app.delete("/api/v1/employee")
        async def delete_employee(payload: DeleteMockEmployeeInput):
            for employee_id, employee in list(self.employees.items()):
                if employee["employee_name"] == payload.name:
                    del self.employees[employee_id]
                    return {"data": True, "status": STATUS_OK}
            return {"data": False, "status": STATUS_OK}

    def _rate_limited(self) -> bool:
        """Sliding-window request limit; disabled when no limit is set."""
        if not self.rate_limit_requests:
            return False

        now = time.monotonic()
        while self._request_times and now - self._request_times[0] >= self.rate_limit_window_seconds:
            self._request_times.popleft()

        if len(self._request_times) >= self.rate_limit_requests:
            return True

        self._request_times.append(now)
        return False

    def list_names(self) -> List[str]:
        return [employee["employee_name"] for employee in self.employees.values()]


def create_app():
    """Create mock employee API application."""
    server = MockEmployeeApiServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8112)
