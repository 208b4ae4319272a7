"""
Domain layer for the Employee Service.
"""

from .models import ApiResponse, CreateEmployeeRequest, Employee
from .employee_service import EmployeeService

__all__ = [
    "ApiResponse",
    "CreateEmployeeRequest",
    "Employee",
    "EmployeeService",
]
