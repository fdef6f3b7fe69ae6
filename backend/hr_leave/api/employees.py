# ruff: noqa: TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from hr_leave.api.deps import AdminDep, AuthDep
from hr_leave.exceptions import AppError, NotFoundError
from hr_leave.schemas.employee import EmployeeResponse, UpsertEmployeeRequest
from hr_leave.services.directory import EmployeeInfo, InMemoryDirectory, get_directory

employees_router = APIRouter(prefix="/employees", tags=["employees"])


def _build_employee_response(employee: EmployeeInfo) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        job_title=employee.job_title,
        manager_id=employee.manager_id,
    )


@employees_router.put(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def upsert_employee(
    employee_id: uuid.UUID,
    payload: UpsertEmployeeRequest,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create or update an employee in the stub directory (HR admin only)."""
    directory = get_directory()
    if not isinstance(directory, InMemoryDirectory):
        raise AppError("Employee directory is read-only", status_code=status.HTTP_405_METHOD_NOT_ALLOWED)
    employee = EmployeeInfo(id=employee_id, **payload.model_dump())
    directory.seed(employee)
    return _build_employee_response(employee)


@employees_router.get(
    "/{employee_id}",
    response_model=EmployeeResponse,
)
async def get_employee(
    employee_id: uuid.UUID,
    auth: AuthDep,
) -> EmployeeResponse:
    """Get employee info from the directory."""
    employee = await get_directory().get_employee(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")
    return _build_employee_response(employee)
