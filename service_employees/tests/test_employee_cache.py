"""
Unit tests for the employee cache and its backends.
"""

import pytest
from unittest.mock import AsyncMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_employees.app.caching.backends import MemoryCacheBackend, RedisCacheBackend, create_backend
from service_employees.app.caching.employee_cache import EmployeeCache, ALL_EMPLOYEES_KEY
from service_employees.app.domain.models import Employee
from shared.metrics import MetricsCollector


@pytest.fixture
def mock_employees():
    """Mock employees."""
    return [
        Employee(id="e-1", name="John Doe", salary=50000, age=34, title="Engineer", email="john@company.com"),
        Employee(id="e-2", name="Mary Johnson", salary=75000, age=41, title="Manager", email="mary@company.com"),
    ]


class TestMemoryCacheBackend:
    """Test cases for MemoryCacheBackend."""

    @pytest.mark.asyncio
    async def test_set_get_delete(self):
        backend = MemoryCacheBackend()

        await backend.set("key", "value")
        assert await backend.get("key") == "value"

        await backend.delete("key")
        assert await backend.get("key") is None

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self):
        backend = MemoryCacheBackend()

        with patch("service_employees.app.caching.backends.time.monotonic", return_value=100.0):
            await backend.set("key", "value", ttl=30)
        with patch("service_employees.app.caching.backends.time.monotonic", return_value=129.0):
            assert await backend.get("key") == "value"
        with patch("service_employees.app.caching.backends.time.monotonic", return_value=130.0):
            assert await backend.get("key") is None

    @pytest.mark.asyncio
    async def test_delete_missing_key_is_noop(self):
        backend = MemoryCacheBackend()
        await backend.delete("absent")
        assert await backend.get("absent") is None


class TestRedisCacheBackend:
    """Test cases for RedisCacheBackend."""

    @pytest.fixture
    def backend(self):
        return RedisCacheBackend("redis://localhost:6379/0")

    @pytest.mark.asyncio
    async def test_set_uses_prefix_and_ttl(self, backend):
        with patch.object(backend, '_get_redis', new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_get_redis.return_value = mock_redis

            await backend.set("all-employees", "[]", ttl=60)

            mock_redis.set.assert_called_once_with("employees:all-employees", "[]", ex=60)

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, backend):
        with patch.object(backend, '_get_redis', new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_redis.get.return_value = b'{"id": "e-1"}'
            mock_get_redis.return_value = mock_redis

            assert await backend.get("employee-by-id:e-1") == '{"id": "e-1"}'
            mock_redis.get.assert_called_once_with("employees:employee-by-id:e-1")

    @pytest.mark.asyncio
    async def test_delete(self, backend):
        with patch.object(backend, '_get_redis', new_callable=AsyncMock) as mock_get_redis:
            mock_redis = AsyncMock()
            mock_get_redis.return_value = mock_redis

            await backend.delete("all-employees")

            mock_redis.delete.assert_called_once_with("employees:all-employees")


class TestCreateBackend:
    """Test cases for backend selection."""

    def test_memory(self):
        assert isinstance(create_backend("memory"), MemoryCacheBackend)

    def test_redis(self):
        backend = create_backend("redis", "redis://cache:6379/1")
        assert isinstance(backend, RedisCacheBackend)
        assert backend.redis_url == "redis://cache:6379/1"

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_backend("memcached")


class TestEmployeeCache:
    """Test cases for EmployeeCache."""

    @pytest.fixture
    def cache(self):
        return EmployeeCache(MemoryCacheBackend())

    @pytest.mark.asyncio
    async def test_listing_miss_then_hit(self, cache, mock_employees):
        assert await cache.get_all() is None

        await cache.put_all(mock_employees)

        assert await cache.get_all() == mock_employees
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    @pytest.mark.asyncio
    async def test_evict_all(self, cache, mock_employees):
        await cache.put_all(mock_employees)
        await cache.evict_all()

        assert await cache.get_all() is None

    @pytest.mark.asyncio
    async def test_empty_listing_is_cached(self, cache):
        await cache.put_all([])

        assert await cache.get_all() == []

    @pytest.mark.asyncio
    async def test_by_id_round_trip_and_evict(self, cache, mock_employees):
        await cache.put_by_id(mock_employees[0])

        assert await cache.get_by_id("e-1") == mock_employees[0]
        assert await cache.get_by_id("e-2") is None

        await cache.evict_by_id("e-1")
        assert await cache.get_by_id("e-1") is None

    @pytest.mark.asyncio
    async def test_evict_by_id_keeps_listing(self, cache, mock_employees):
        await cache.put_all(mock_employees)
        await cache.put_by_id(mock_employees[0])

        await cache.evict_by_id("e-1")

        assert await cache.get_all() == mock_employees

    @pytest.mark.asyncio
    async def test_cached_listing_is_a_copy(self, cache, mock_employees):
        await cache.put_all(mock_employees)

        first = await cache.get_all()
        first.clear()

        assert await cache.get_all() == mock_employees

    @pytest.mark.asyncio
    async def test_backend_read_error_is_a_miss(self, mock_employees):
        backend = MemoryCacheBackend()
        cache = EmployeeCache(backend)

        with patch.object(backend, 'get', new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = ConnectionError("redis down")

            assert await cache.get_all() is None

    @pytest.mark.asyncio
    async def test_backend_write_error_is_skipped(self, mock_employees):
        backend = MemoryCacheBackend()
        cache = EmployeeCache(backend)

        with patch.object(backend, 'set', new_callable=AsyncMock) as mock_set:
            mock_set.side_effect = ConnectionError("redis down")

            await cache.put_all(mock_employees)
            await cache.put_by_id(mock_employees[0])

        assert mock_set.await_count == 2
        assert await cache.get_all() is None

    @pytest.mark.asyncio
    async def test_backend_evict_error_propagates(self):
        backend = MemoryCacheBackend()
        cache = EmployeeCache(backend)

        with patch.object(backend, 'delete', new_callable=AsyncMock) as mock_delete:
            mock_delete.side_effect = ConnectionError("redis down")

            with pytest.raises(ConnectionError):
                await cache.evict_all()

    @pytest.mark.asyncio
    async def test_malformed_payload_is_a_miss(self, cache):
        await cache.backend.set(ALL_EMPLOYEES_KEY, "{not json")

        assert await cache.get_all() is None

    @pytest.mark.asyncio
    async def test_ttl_is_passed_to_backend(self, mock_employees):
        backend = MemoryCacheBackend()
        cache = EmployeeCache(backend, ttl_seconds=120)

        with patch.object(backend, 'set', new_callable=AsyncMock) as mock_set:
            await cache.put_by_id(mock_employees[0])

            args = mock_set.call_args[0]
            assert args[0] == "employee-by-id:e-1"
            assert args[2] == 120

    @pytest.mark.asyncio
    async def test_zero_ttl_means_no_expiry(self):
        cache = EmployeeCache(MemoryCacheBackend(), ttl_seconds=0)
        assert cache.ttl_seconds is None

    @pytest.mark.asyncio
    async def test_metrics_recorded(self, mock_employees):
        metrics = MetricsCollector("employees")
        cache = EmployeeCache(MemoryCacheBackend(), metrics=metrics)

        await cache.get_all()
        await cache.put_all(mock_employees)
        await cache.get_all()
        await cache.evict_all()

        registry = metrics.registry
        assert registry.get_sample_value("cache_misses_total", {"cache_type": "all-employees"}) == 1.0
        assert registry.get_sample_value("cache_hits_total", {"cache_type": "all-employees"}) == 1.0
        assert registry.get_sample_value("cache_evictions_total", {"cache_type": "all-employees"}) == 1.0
