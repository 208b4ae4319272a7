"""
Upstream employee API client.
"""

import time
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.errors import NotFoundError, RateLimitError, ServiceError, UpstreamUnavailableError
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig, call_with_retry
from ..domain.models import ApiResponse, CreateEmployeeRequest, Employee

SERVICE_NAME = "employee_api"


class EmployeeApiClient:
    """Client for the upstream employee-data API.

    Every operation retries on upstream rate limiting (HTTP 429) according to
    ``retry_config``; all other failures are converted to the shared error
    types and raised without retry.
    """

    def __init__(
        self,
        employee_api_url: str,
        *,
        timeout: float = 10.0,
        retry_config: Optional[RetryConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = employee_api_url.rstrip('/')
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig(max_attempts=3, base_delay=0.5)
        self.metrics = metrics
        self.transport = transport
        self.logger = get_logger("employees.api_client")

    async def fetch_all(self) -> List[Employee]:
        """Fetch every employee. An empty payload yields an empty list."""
        return await self._with_retry(self._fetch_all)

    async def fetch_by_id(self, employee_id: str) -> Employee:
        """Fetch a single employee by id."""
        return await self._with_retry(self._fetch_by_id, employee_id)

    async def create(self, request: CreateEmployeeRequest) -> Employee:
        """Create an employee and return the upstream-assigned record."""
        return await self._with_retry(self._create, request)

    async def delete_by_name(self, name: str) -> str:
        """Delete an employee. The upstream API identifies deletions by name."""
        return await self._with_retry(self._delete_by_name, name)

    async def _with_retry(self, func, *args):
        return await call_with_retry(
            func,
            *args,
            exceptions=(RateLimitError,),
            config=self.retry_config,
            name=func.__name__.lstrip("_"),
            metrics=self.metrics,
        )

    async def _fetch_all(self) -> List[Employee]:
        self.logger.info("Fetching all employees from upstream")
        try:
            response = await self._request("fetch_all", "GET", self.base_url)
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", operation="fetch_all", error=str(exc))
            raise UpstreamUnavailableError(SERVICE_NAME, "Error while fetching employees", details={"error": str(exc)})

        if response.status_code != 200:
            raise self._unexpected_status("fetch_all", response)

        envelope = self._parse(response, ApiResponse[List[Employee]])
        if envelope.data is None:
            self.logger.warning("Upstream returned empty employee listing")
            return []

        self.logger.info("Fetched employees", count=len(envelope.data))
        return list(envelope.data)

    async def _fetch_by_id(self, employee_id: str) -> Employee:
        self.logger.info("Fetching employee", employee_id=employee_id)
        url = f"{self.base_url}/{quote(employee_id, safe='')}"
        try:
            response = await self._request("fetch_by_id", "GET", url)
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", operation="fetch_by_id", employee_id=employee_id, error=str(exc))
            raise UpstreamUnavailableError(SERVICE_NAME, "Failed to fetch employee", details={"error": str(exc)})

        if response.status_code == 404:
            self.logger.warning("Employee not found upstream", employee_id=employee_id)
            raise NotFoundError(employee_id, f"Employee not found with id: {employee_id}")

        if response.status_code != 200:
            raise self._unexpected_status("fetch_by_id", response)

        envelope = self._parse(response, ApiResponse[Employee])
        if envelope.data is None:
            self.logger.warning("No employee in upstream response", employee_id=employee_id)
            raise NotFoundError(employee_id, f"Employee not found with id: {employee_id}")

        return envelope.data

    async def _create(self, request: CreateEmployeeRequest) -> Employee:
        self.logger.info("Creating employee", name=request.name)
        payload = {
            "name": request.name,
            "salary": request.salary,
            "age": request.age,
            "title": request.title,
        }
        try:
            response = await self._request("create", "POST", self.base_url, json=payload)
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", operation="create", error=str(exc))
            raise UpstreamUnavailableError(SERVICE_NAME, "Failed to create employee", details={"error": str(exc)})

        if response.status_code not in (200, 201):
            raise self._unexpected_status("create", response)

        envelope = self._parse(response, ApiResponse[Employee])
        if envelope.data is None:
            self.logger.error("Upstream returned no employee on create", name=request.name)
            raise UpstreamUnavailableError(SERVICE_NAME, "Failed to create employee")

        self.logger.info("Created employee", employee_id=envelope.data.id, name=envelope.data.name)
        return envelope.data

    async def _delete_by_name(self, name: str) -> str:
        self.logger.info("Deleting employee", name=name)
        try:
            response = await self._request("delete_by_name", "DELETE", self.base_url, json={"name": name})
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", operation="delete_by_name", name=name, error=str(exc))
            raise ServiceError(f"Failed to delete employee: {name}", details={"error": str(exc)})

        if response.status_code != 200:
            self.logger.error("Unexpected upstream status on delete", name=name, status_code=response.status_code)
            raise ServiceError(
                f"Failed to delete employee: {name}",
                details={"status_code": response.status_code},
            )

        try:
            envelope = self._parse(response, ApiResponse[bool])
        except UpstreamUnavailableError as exc:
            raise ServiceError(f"Failed to delete employee: {name}", details=exc.details)

        if envelope.data is False:
            self.logger.info("Employee does not exist upstream", name=name)
            raise NotFoundError(name, f"Employee not found: {name}")

        if envelope.data is None:
            raise ServiceError(f"Failed to delete employee: {name}", details={"reason": "empty response"})

        self.logger.info("Deleted employee", name=name)
        return name

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request; a 429 raises RateLimitError so the caller can retry."""
        start = time.perf_counter()
        outcome = "error"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.request(method, url, json=json)
            outcome = str(response.status_code)
        finally:
            if self.metrics is not None:
                self.metrics.record_upstream_request(operation, outcome, time.perf_counter() - start)

        if response.status_code == 429:
            self.logger.warning("Upstream rate limit hit", operation=operation, url=url)
            raise RateLimitError(
                f"Upstream rate limit exceeded during {operation}",
                details={"status_code": 429, "operation": operation},
            )

        return response

    def _parse(self, response: httpx.Response, model: Type[ApiResponse]) -> ApiResponse:
        """Validate the upstream envelope; an empty body is an empty envelope."""
        if not response.content:
            return model()
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            self.logger.error("Unparseable upstream payload", status_code=response.status_code, error=str(exc))
            raise UpstreamUnavailableError(SERVICE_NAME, "Unparseable upstream response", details={"error": str(exc)})

    def _unexpected_status(self, operation: str, response: httpx.Response) -> UpstreamUnavailableError:
        self.logger.error(
            "Upstream request failed",
            operation=operation,
            status_code=response.status_code,
            response=response.text
        )
        return UpstreamUnavailableError(
            SERVICE_NAME,
            f"Unexpected status {response.status_code}",
            details={"status_code": response.status_code, "operation": operation},
        )
