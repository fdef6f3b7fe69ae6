# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from hr_leave.api.deps import AdminDep, AuthDep
from hr_leave.db import SessionDep
from hr_leave.exceptions import AuthorizationError
from hr_leave.schemas.balance import AllocateBalancePayload, BalanceSummaryResponse
from hr_leave.services import balance as balance_service
from hr_leave.services.directory import get_directory

balances_router = APIRouter(prefix="/leave/balances", tags=["leave balances"])
employee_balance_router = APIRouter(prefix="/employees/{employee_id}/leave-balance", tags=["leave balances"])


def _year_or_current(year: int | None) -> int:
    return year if year is not None else date.today().year


@balances_router.get("/me", response_model=BalanceSummaryResponse)
async def get_my_balance(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> BalanceSummaryResponse:
    """Get the caller's leave balance for a year (defaults to the current year)."""
    return await balance_service.get_balance_summary(session, auth.user_id, _year_or_current(year))


@balances_router.post("", response_model=BalanceSummaryResponse, status_code=status.HTTP_201_CREATED)
async def allocate_balance(
    payload: AllocateBalancePayload,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceSummaryResponse:
    """Allocate an employee's yearly leave allotment (HR admin only)."""
    return await balance_service.allocate_balance(session, auth, payload)


@employee_balance_router.get("", response_model=BalanceSummaryResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> BalanceSummaryResponse:
    """Get an employee's leave balance (the employee, their manager, or HR admin)."""
    if not auth.is_hr_admin and auth.user_id != employee_id:
        manager_id = await get_directory().get_manager_of(employee_id)
        if manager_id != auth.user_id:
            raise AuthorizationError("Unauthorized to view this leave balance")
    return await balance_service.get_balance_summary(session, employee_id, _year_or_current(year))
