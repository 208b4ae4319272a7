"""
Adapters package for the Employee Service.

Contains the HTTP client wrapper for the upstream employee API. The adapter
encapsulates:

- Base URL and request shapes
- Retry policy for upstream rate limiting
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .employee_api_client import EmployeeApiClient

__all__ = [
    "EmployeeApiClient",
]
