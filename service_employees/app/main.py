"""
Employee API facade for the Employee Access Layer.
"""

from typing import Dict, List, Optional

import httpx

from shared.base_service import BaseService
from shared.retry import RetryConfig
from .adapters.employee_api_client import EmployeeApiClient
from .caching.backends import create_backend
from .caching.employee_cache import EmployeeCache
from .domain.employee_service import EmployeeService
from .domain.models import CreateEmployeeRequest, Employee

API_PREFIX = "/api/v1/employee"


class EmployeeGatewayService(BaseService):
    """Employee facade service implementation."""

    def __init__(self, *, upstream_transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("employees", 8111)

        self.api_client = EmployeeApiClient(
            self.config.employee_api_url,
            timeout=self.config.http_timeout_seconds,
            retry_config=RetryConfig(
                max_attempts=self.config.retry_max_attempts,
                base_delay=self.config.retry_wait_seconds,
            ),
            metrics=self.metrics,
            transport=upstream_transport,
        )
        self.cache = EmployeeCache(
            create_backend(self.config.cache_backend, self.config.redis_url),
            ttl_seconds=self.config.cache_ttl_seconds,
            metrics=self.metrics,
        )
        self.employee_service = EmployeeService(self.api_client, self.cache)

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.cache.close()

        self._setup_employee_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.employee_gateway = self

        self.logger.info(
            "Employee gateway configured",
            upstream=self.config.employee_api_url,
            cache_backend=self.config.cache_backend,
            cache_ttl_seconds=self.config.cache_ttl_seconds,
            retry_max_attempts=self.config.retry_max_attempts,
        )

    def _setup_employee_routes(self):
        """Set up employee routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "employees",
                "message": "Employee Access Layer - Employee API",
                "version": "1.0.0"
            }

        @self.app.get(API_PREFIX, response_model=List[Employee], response_model_by_alias=True)
        async def get_all_employees():
            """List every employee."""
            self.logger.info("Getting all employees")
            return await self.employee_service.list_all()

        @self.app.get(f"{API_PREFIX}/search/{{search_string}}", response_model=List[Employee], response_model_by_alias=True)
        async def get_employees_by_name_search(search_string: str):
            """Employees whose name contains the search string, ignoring case."""
            self.logger.info("Searching employees by name", search_string=search_string)
            return await self.employee_service.search_by_name(search_string)

        @self.app.get(f"{API_PREFIX}/highestSalary", response_model=int)
        async def get_highest_salary_of_employees():
            """Highest salary across all employees; 0 when there are none."""
            self.logger.info("Getting highest salary")
            return await self.employee_service.highest_salary()

        @self.app.get(f"{API_PREFIX}/topTenHighestEarningEmployeeNames", response_model=List[Optional[str]])
        async def get_top_ten_highest_earning_employee_names():
            """Names of the ten highest earners."""
            self.logger.info("Getting top ten highest earning employees")
            return await self.employee_service.top_ten_by_name()

        @self.app.get(f"{API_PREFIX}/{{employee_id}}", response_model=Employee, response_model_by_alias=True)
        async def get_employee_by_id(employee_id: str):
            """Get a single employee."""
            self.logger.info("Getting employee by id", employee_id=employee_id)
            return await self.employee_service.get_by_id(employee_id)

        @self.app.post(API_PREFIX, response_model=Employee, response_model_by_alias=True)
        async def create_employee(employee_input: CreateEmployeeRequest):
            """Create an employee upstream."""
            self.logger.info("Creating employee", name=employee_input.name)
            return await self.employee_service.create(employee_input)

        @self.app.delete(f"{API_PREFIX}/{{employee_id}}", response_model=str)
        async def delete_employee_by_id(employee_id: str):
            """Delete an employee and return its name."""
            self.logger.info("Deleting employee by id", employee_id=employee_id)
            return await self.employee_service.delete_by_id(employee_id)

        @self.app.get("/cache/stats")
        async def cache_stats():
            """Cache hit/miss counters."""
            return self.cache.stats()

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report cache backend health."""
        return {"cache": "ok" if await self.cache.ping() else "error"}


def create_app():
    """Create FastAPI application."""
    service = EmployeeGatewayService()
    return service.app


if __name__ == "__main__":
    service = EmployeeGatewayService()
    service.run()
