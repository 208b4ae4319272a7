"""
Employee caching package.

Holds the full employee listing and per-id lookups between upstream calls.
Entries are evicted explicitly by the mutations that invalidate them.
"""

from .backends import MemoryCacheBackend, RedisCacheBackend, create_backend
from .employee_cache import EmployeeCache

__all__ = [
    "EmployeeCache",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "create_backend",
]
