"""
Employee data models shared by the client, cache and facade.
"""

from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


T = TypeVar("T")


class Employee(BaseModel):
    """Employee record as served by the upstream API.

    Attribute names are short; the wire names carry the ``employee_`` prefix
    used by the upstream API. Either form is accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Upstream-assigned identifier")
    name: Optional[str] = Field(None, alias="employee_name")
    salary: int = Field(..., alias="employee_salary")
    age: Optional[int] = Field(None, alias="employee_age")
    title: Optional[str] = Field(None, alias="employee_title")
    email: Optional[str] = Field(None, alias="employee_email")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the upstream field names."""
        return self.model_dump(by_alias=True)


class CreateEmployeeRequest(BaseModel):
    """Request model for employee creation."""

    name: str = Field(..., description="Employee name")
    salary: int = Field(..., ge=1, description="Salary, must be greater than zero")
    age: int = Field(..., ge=16, le=75, description="Age between 16 and 75")
    title: str = Field(..., description="Job title")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Name cannot be blank")
        return value

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Title cannot be blank")
        return value


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every upstream endpoint."""

    data: Optional[T] = None
    status: Optional[str] = None
