"""
Employee query and mutation service with read-through caching.
"""

from typing import List, Optional, TYPE_CHECKING

from shared.errors import InvalidArgumentError, ServiceError
from shared.logging import get_logger
from .models import CreateEmployeeRequest, Employee

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.employee_api_client import EmployeeApiClient
    from ..caching.employee_cache import EmployeeCache

TOP_EARNERS_LIMIT = 10


class EmployeeService:
    """Aggregations over the upstream employee listing.

    Every derived result (search, highest salary, top earners) is computed
    from ``list_all`` so it shares the cached listing. Creation evicts the
    listing; deletion evicts the listing and the deleted id.
    """

    def __init__(self, client: "EmployeeApiClient", cache: "EmployeeCache"):
        self.client = client
        self.cache = cache
        self.logger = get_logger("employees.service")

    async def list_all(self) -> List[Employee]:
        cached = await self.cache.get_all()
        if cached is not None:
            return cached

        employees = await self.client.fetch_all()
        await self.cache.put_all(employees)
        return employees

    async def search_by_name(self, fragment: Optional[str]) -> List[Employee]:
        if fragment is None or not fragment.strip():
            raise InvalidArgumentError("Search term cannot be null or empty")

        self.logger.info("Searching employees by name", fragment=fragment)
        needle = fragment.lower()
        return [
            employee for employee in await self.list_all()
            if employee.name is not None and needle in employee.name.lower()
        ]

    async def get_by_id(self, employee_id: str) -> Employee:
        cached = await self.cache.get_by_id(employee_id)
        if cached is not None:
            return cached

        employee = await self.client.fetch_by_id(employee_id)
        await self.cache.put_by_id(employee)
        return employee

    async def highest_salary(self) -> int:
        employees = await self.list_all()
        return max((employee.salary for employee in employees), default=0)

    async def top_ten_by_name(self) -> List[Optional[str]]:
        """Names of the ten best paid employees, highest salary first."""
        employees = await self.list_all()
        # sorted() is stable with reverse=True, so ties keep listing order
        ranked = sorted(employees, key=lambda employee: employee.salary, reverse=True)
        return [employee.name for employee in ranked[:TOP_EARNERS_LIMIT]]

    async def create(self, request: CreateEmployeeRequest) -> Employee:
        employee = await self.client.create(request)
        await self.cache.evict_all()
        return employee

    async def delete_by_id(self, employee_id: str) -> str:
        """Delete by id and return the deleted employee's name.

        The upstream API deletes by name, so the id is resolved first; an
        unknown id raises NotFoundError before any delete is sent.
        """
        employee = await self.get_by_id(employee_id)
        if employee.name is None:
            raise ServiceError(
                f"Employee {employee_id} has no name and cannot be deleted upstream",
                details={"employee_id": employee_id},
            )
        self.logger.info("Deleting employee", employee_id=employee_id, name=employee.name)

        deleted_name = await self.client.delete_by_name(employee.name)

        await self.cache.evict_by_id(employee_id)
        await self.cache.evict_all()
        return deleted_name
