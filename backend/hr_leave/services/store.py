"""Persistence for leave requests and balances.

Every function works inside the caller's ``AsyncSession``; multi-step
mutations are grouped with :func:`transaction` so they commit or roll back
as one unit. ``*_for_update`` readers take a row-level write lock
(``SELECT ... FOR UPDATE``) that is held until the transaction ends.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import aliased
from sqlmodel import col

from hr_leave.exceptions import ConflictError, TransientError
from hr_leave.models.balance import LeaveBalance
from hr_leave.models.enums import LeaveStatus, LeaveType, can_transition
from hr_leave.models.request import LeaveRequest

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy import ColumnElement
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit everything done in the block, or roll it all back.

    Driver and connectivity failures are logged and re-raised as
    :class:`TransientError` so no storage detail reaches the caller.
    Integrity violations propagate unchanged for the caller to interpret.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise
    except DBAPIError as exc:
        logger.exception("Database failure, rolling back transaction")
        await _rollback_quietly(session)
        raise TransientError() from exc
    except BaseException:
        await session.rollback()
        raise


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except DBAPIError:
        logger.warning("Rollback failed after database error", exc_info=True)


# ---------------------------------------------------------------------------
# Leave requests
# ---------------------------------------------------------------------------


async def insert_request(session: AsyncSession, request: LeaveRequest) -> LeaveRequest:
    """Stage a new request row and flush it so database defaults are applied."""
    session.add(request)
    await session.flush()
    return request


async def get_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest | None:
    result = await session.execute(select(LeaveRequest).where(col(LeaveRequest.id) == request_id))
    return result.scalar_one_or_none()


async def get_request_for_update(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest | None:
    """Read a request under a write lock, bypassing any stale copy in the identity map."""
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.id) == request_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def lock_open_requests(session: AsyncSession, employee_id: uuid.UUID) -> list[uuid.UUID]:
    """Lock every PENDING and APPROVED request of an employee, in id order.

    Decisions that take this lock before touching a single request run one
    at a time per employee.
    """
    result = await session.execute(
        select(LeaveRequest.id)
        .where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status).in_([LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value]),
        )
        .order_by(col(LeaveRequest.id))
        .with_for_update()
    )
    return list(result.scalars().all())


def _no_overlapping_approved(request: LeaveRequest) -> ColumnElement[bool]:
    other = aliased(LeaveRequest)
    return ~(
        select(other.id)
        .where(
            other.employee_id == request.employee_id,
            other.id != request.id,
            other.status == LeaveStatus.APPROVED.value,
            other.start_date <= request.end_date,
            other.end_date >= request.start_date,
        )
        .exists()
    )


async def update_request_status(
    session: AsyncSession,
    request: LeaveRequest,
    *,
    expected: LeaveStatus,
    new_status: LeaveStatus,
    approver_id: uuid.UUID,
    decided_at: datetime,
    rejection_reason: str | None = None,
) -> None:
    """Move a request from ``expected`` to ``new_status``.

    The UPDATE only matches while the row still carries ``expected``, so a
    concurrent decision that committed first makes this one fail instead of
    overwriting it. An approval additionally only matches while no other
    approved request of the employee shares a day with this one.
    """
    if not can_transition(expected, new_status):
        raise ConflictError(
            f"Invalid status transition from {expected} to {new_status}",
            code="INVALID_TRANSITION",
        )
    guards = [
        col(LeaveRequest.id) == request.id,
        col(LeaveRequest.status) == expected.value,
    ]
    if new_status == LeaveStatus.APPROVED:
        guards.append(_no_overlapping_approved(request))

    result = await session.execute(
        update(LeaveRequest)
        .where(*guards)
        .values(
            status=new_status.value,
            approver_id=approver_id,
            approved_at=decided_at,
            rejection_reason=rejection_reason,
            updated_at=decided_at,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        await session.refresh(request)
        if request.status != expected.value:
            raise ConflictError("Leave request has already been decided", code="INVALID_TRANSITION")
        raise ConflictError(
            "Leave request overlaps with an existing approved request",
            code="OVERLAPPING_REQUEST",
        )
    await session.refresh(request)


async def list_by_employee(session: AsyncSession, employee_id: uuid.UUID) -> list[LeaveRequest]:
    """All requests owned by an employee, newest first."""
    return await list_by_employees(session, [employee_id])


async def list_by_employees(session: AsyncSession, employee_ids: list[uuid.UUID]) -> list[LeaveRequest]:
    """All requests owned by any of ``employee_ids``, newest first."""
    if not employee_ids:
        return []
    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.employee_id).in_(employee_ids))
        .order_by(col(LeaveRequest.created_at).desc(), col(LeaveRequest.id))
    )
    return list(result.scalars().all())


async def list_approved_for_employee(
    session: AsyncSession,
    employee_id: uuid.UUID,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[LeaveRequest]:
    """Approved requests of an employee, optionally narrowed to those touching a range."""
    query = select(LeaveRequest).where(
        col(LeaveRequest.employee_id) == employee_id,
        col(LeaveRequest.status) == LeaveStatus.APPROVED.value,
    )
    if start_date is not None and end_date is not None:
        query = query.where(
            col(LeaveRequest.start_date) <= end_date,
            col(LeaveRequest.end_date) >= start_date,
        )
    result = await session.execute(query.order_by(col(LeaveRequest.start_date)))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Leave balances
# ---------------------------------------------------------------------------


def _used_and_total_columns(leave_type: LeaveType) -> tuple[str, str]:
    if leave_type == LeaveType.ANNUAL:
        return "annual_used", "annual_total"
    if leave_type == LeaveType.SICK:
        return "sick_used", "sick_total"
    msg = f"{leave_type} leave has no tracked balance"
    raise ValueError(msg)


async def get_balance(session: AsyncSession, employee_id: uuid.UUID, year: int) -> LeaveBalance | None:
    result = await session.execute(
        select(LeaveBalance).where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.year) == year,
        )
    )
    return result.scalar_one_or_none()


async def get_balance_for_update(session: AsyncSession, employee_id: uuid.UUID, year: int) -> LeaveBalance | None:
    """Read a balance row under a write lock."""
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.year) == year,
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def insert_balance(session: AsyncSession, balance: LeaveBalance) -> LeaveBalance:
    session.add(balance)
    await session.flush()
    return balance


async def update_balance_used(
    session: AsyncSession,
    balance: LeaveBalance,
    leave_type: LeaveType,
    days: int,
) -> None:
    """Add ``days`` to the used counter of ``leave_type``.

    The UPDATE carries ``used + days <= total`` in its WHERE clause, so the
    allotment can never be exceeded even if the row changed after it was read.
    """
    used_name, total_name = _used_and_total_columns(leave_type)
    used_col = getattr(LeaveBalance, used_name)
    total_col = getattr(LeaveBalance, total_name)
    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == balance.employee_id,
            col(LeaveBalance.year) == balance.year,
            used_col + days <= total_col,
        )
        .values(
            {
                used_name: used_col + days,
                "version": col(LeaveBalance.version) + 1,
                "updated_at": datetime.now(UTC),
            }
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise ConflictError("Insufficient leave balance", code="INSUFFICIENT_BALANCE")
    await session.refresh(balance)
