# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from hr_leave.exceptions import ConflictError, NotFoundError
from hr_leave.models.balance import LeaveBalance
from hr_leave.models.enums import AuditAction, AuditEntityType, LeaveType
from hr_leave.schemas.balance import BalanceSummaryResponse, LeaveTypeBalance
from hr_leave.services import store
from hr_leave.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leave.schemas.auth import AuthContext
    from hr_leave.schemas.balance import AllocateBalancePayload


# ---------------------------------------------------------------------------
# Pure balance arithmetic
# ---------------------------------------------------------------------------


def remaining(balance: LeaveBalance, leave_type: LeaveType) -> int | None:
    """Days left for ``leave_type``. ``None`` means the type is not balance-tracked."""
    if leave_type == LeaveType.ANNUAL:
        return balance.annual_total - balance.annual_used
    if leave_type == LeaveType.SICK:
        return balance.sick_total - balance.sick_used
    return None


def has_sufficient_balance(balance: LeaveBalance, leave_type: LeaveType, days: int) -> bool:
    """Return True if ``days`` can be taken without exceeding the allotment."""
    left = remaining(balance, leave_type)
    return left is None or left >= days


def build_balance_summary(balance: LeaveBalance) -> BalanceSummaryResponse:
    """Map a balance row to its response schema, clamping remaining days at zero."""
    return BalanceSummaryResponse(
        employee_id=balance.employee_id,
        year=balance.year,
        annual=LeaveTypeBalance(
            total=balance.annual_total,
            used=balance.annual_used,
            remaining=max(0, balance.annual_total - balance.annual_used),
        ),
        sick=LeaveTypeBalance(
            total=balance.sick_total,
            used=balance.sick_used,
            remaining=max(0, balance.sick_total - balance.sick_used),
        ),
        updated_at=balance.updated_at,
    )


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_balance_summary(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> BalanceSummaryResponse:
    """Return the balance summary for an employee and year. Raises 404 if absent."""
    balance = await store.get_balance(session, employee_id, year)
    if balance is None:
        raise NotFoundError(
            f"Leave balance not found for year {year}",
            code="BALANCE_NOT_FOUND",
        )
    return build_balance_summary(balance)


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


async def allocate_balance(
    session: AsyncSession,
    auth: AuthContext,
    payload: AllocateBalancePayload,
) -> BalanceSummaryResponse:
    """Create the yearly allotment for an employee with zero usage.

    Allocation only ever inserts. Usage counters are moved exclusively by
    the approval workflow.
    """
    already_allocated = ConflictError(
        f"Leave balance already allocated for year {payload.year}",
        code="BALANCE_EXISTS",
    )
    try:
        async with store.transaction(session):
            if await store.get_balance(session, payload.employee_id, payload.year) is not None:
                raise already_allocated
            balance = await store.insert_balance(
                session,
                LeaveBalance(
                    employee_id=payload.employee_id,
                    year=payload.year,
                    annual_total=payload.annual_total,
                    sick_total=payload.sick_total,
                ),
            )
            write_audit_log(
                session,
                actor_id=auth.user_id,
                entity_type=AuditEntityType.LEAVE_BALANCE,
                entity_key=f"{balance.employee_id}:{balance.year}",
                action=AuditAction.ALLOCATE,
                after_json=model_to_audit_dict(balance),
            )
    except IntegrityError:
        # Lost a race with a concurrent allocation for the same key.
        raise already_allocated from None
    return build_balance_summary(balance)
