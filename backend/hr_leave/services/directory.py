# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


class EmployeeInfo(BaseModel):
    """Employee metadata from the HR directory."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    job_title: str | None = None
    manager_id: uuid.UUID | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@runtime_checkable
class Directory(Protocol):
    """Read-only lookup of employees and reporting lines."""

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        ...

    async def get_manager_of(self, employee_id: uuid.UUID) -> uuid.UUID | None:
        """Return the current manager's employee ID, or None."""
        ...

    async def list_reports(self, manager_id: uuid.UUID) -> list[EmployeeInfo]:
        """List employees whose current manager is ``manager_id``."""
        ...


class InMemoryDirectory:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._employees: dict[uuid.UUID, EmployeeInfo] = {}

    def seed(self, employee: EmployeeInfo) -> None:
        """Seed an employee for testing."""
        self._employees[employee.id] = employee

    async def get_employee(self, employee_id: uuid.UUID) -> EmployeeInfo | None:
        """Fetch employee metadata. Returns None if not found."""
        return self._employees.get(employee_id)

    async def get_manager_of(self, employee_id: uuid.UUID) -> uuid.UUID | None:
        """Return the current manager's employee ID, or None."""
        employee = self._employees.get(employee_id)
        return employee.manager_id if employee is not None else None

    async def list_reports(self, manager_id: uuid.UUID) -> list[EmployeeInfo]:
        """List employees whose current manager is ``manager_id``."""
        return [e for e in self._employees.values() if e.manager_id == manager_id]


_directory: Directory = InMemoryDirectory()


def get_directory() -> Directory:
    """FastAPI dependency for the directory."""
    return _directory


def set_directory(directory: Directory) -> None:
    """Override the directory (for testing or production wiring)."""
    global _directory
    _directory = directory
