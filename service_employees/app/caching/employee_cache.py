"""
Read-through cache for employee listings and per-id lookups.
"""

import json
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from shared.logging import get_logger
from ..domain.models import Employee

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector

ALL_EMPLOYEES_KEY = "all-employees"
EMPLOYEE_BY_ID_PREFIX = "employee-by-id"

_employee_list = TypeAdapter(List[Employee])


class EmployeeCache:
    """Cache for the full employee listing and individual employees.

    Two cache types are kept:

    - ``all-employees``: a single slot holding the last fetched listing.
    - ``employee-by-id``: one entry per looked-up id.

    Values are stored as JSON so a cached listing cannot be mutated through a
    reference handed to a caller. A failed backend read is logged and reported
    as a miss, and a failed write is logged and skipped. Failed evictions
    propagate so a stale entry is never left behind silently.
    """

    def __init__(self, backend, *, ttl_seconds: Optional[int] = None, metrics: Optional["MetricsCollector"] = None):
        self.backend = backend
        self.ttl_seconds = ttl_seconds or None
        self.metrics = metrics
        self.logger = get_logger("employees.cache")
        self._hits = 0
        self._misses = 0

    async def get_all(self) -> Optional[List[Employee]]:
        """Return the cached listing, or None when absent."""
        raw = await self._safe_get(ALL_EMPLOYEES_KEY)
        if raw is None:
            self._record("all-employees", hit=False)
            return None

        try:
            employees = _employee_list.validate_json(raw)
        except ValidationError as exc:
            self.logger.warning("Discarding malformed cache payload", key=ALL_EMPLOYEES_KEY, error=str(exc))
            self._record("all-employees", hit=False)
            return None

        self._record("all-employees", hit=True)
        return employees

    async def put_all(self, employees: List[Employee]) -> None:
        payload = json.dumps([employee.to_wire() for employee in employees])
        if await self._safe_set(ALL_EMPLOYEES_KEY, payload):
            self.logger.debug("Cached employee listing", count=len(employees))

    async def evict_all(self) -> None:
        await self.backend.delete(ALL_EMPLOYEES_KEY)
        self._record_eviction("all-employees")
        self.logger.info("Evicted employee listing")

    async def get_by_id(self, employee_id: str) -> Optional[Employee]:
        """Return the cached employee for ``employee_id``, or None."""
        key = self._id_key(employee_id)
        raw = await self._safe_get(key)
        if raw is None:
            self._record("employee-by-id", hit=False)
            return None

        try:
            employee = Employee.model_validate_json(raw)
        except ValidationError as exc:
            self.logger.warning("Discarding malformed cache payload", key=key, error=str(exc))
            self._record("employee-by-id", hit=False)
            return None

        self._record("employee-by-id", hit=True)
        return employee

    async def put_by_id(self, employee: Employee) -> None:
        await self._safe_set(self._id_key(employee.id), json.dumps(employee.to_wire()))

    async def evict_by_id(self, employee_id: str) -> None:
        await self.backend.delete(self._id_key(employee_id))
        self._record_eviction("employee-by-id")
        self.logger.info("Evicted employee", employee_id=employee_id)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "backend": getattr(self.backend, "name", type(self.backend).__name__),
            "hits": self._hits,
            "misses": self._misses,
            "ttl_seconds": self.ttl_seconds,
        }

    async def ping(self) -> bool:
        return await self.backend.ping()

    async def close(self) -> None:
        await self.backend.close()

    async def _safe_get(self, key: str) -> Optional[str]:
        """Safely get cached data, handling errors."""
        try:
            return await self.backend.get(key)
        except Exception as exc:
            self.logger.error("Cache fetch error", key=key, error=str(exc))
            return None

    async def _safe_set(self, key: str, value: str) -> bool:
        """Safely store data, handling errors."""
        try:
            await self.backend.set(key, value, self.ttl_seconds)
            return True
        except Exception as exc:
            self.logger.error("Cache store error", key=key, error=str(exc))
            return False

    def _record(self, cache_type: str, hit: bool) -> None:
        if hit:
            self._hits += 1
        else:
            self._misses += 1

        if self.metrics is not None:
            metric = "cache_hits_total" if hit else "cache_misses_total"
            self.metrics.increment_counter(metric, cache_type=cache_type)

    def _record_eviction(self, cache_type: str) -> None:
        if self.metrics is not None:
            self.metrics.increment_counter("cache_evictions_total", cache_type=cache_type)

    @staticmethod
    def _id_key(employee_id: str) -> str:
        return f"{EMPLOYEE_BY_ID_PREFIX}:{employee_id}"
