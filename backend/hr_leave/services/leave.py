# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from hr_leave.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from hr_leave.models.enums import AuditAction, AuditEntityType, LeaveStatus, LeaveType, can_transition
from hr_leave.models.request import LeaveRequest
from hr_leave.schemas.request import (
    EmployeeSummary,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    TeamLeaveRequestListResponse,
    TeamLeaveRequestResponse,
)
from hr_leave.services import store
from hr_leave.services.audit import model_to_audit_dict, write_audit_log
from hr_leave.services.balance import has_sufficient_balance, remaining
from hr_leave.services.directory import get_directory
from hr_leave.services.notifier import approved_message, notify_safely, rejected_message, submitted_message
from hr_leave.services.validation import (
    BALANCE_NOT_FOUND,
    INSUFFICIENT_BALANCE,
    OVERLAPPING_REQUEST,
    LeaveCandidate,
    check_reason,
    find_overlapping,
    validate_leave_submission,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_leave.schemas.auth import AuthContext
    from hr_leave.schemas.request import SubmitLeavePayload
    from hr_leave.services.directory import EmployeeInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type=LeaveType(request.leave_type),
        start_date=request.start_date,
        end_date=request.end_date,
        days_count=request.days_count,
        reason=request.reason,
        status=LeaveStatus(request.status),
        approver_id=request.approver_id,
        approved_at=request.approved_at,
        rejection_reason=request.rejection_reason,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def _build_employee_summary(employee: EmployeeInfo | None) -> EmployeeSummary | None:
    if employee is None:
        return None
    return EmployeeSummary(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        job_title=employee.job_title,
    )


async def _lock_for_decision(
    session: AsyncSession,
    request_id: uuid.UUID,
    approver_id: uuid.UUID,
    target: LeaveStatus,
) -> LeaveRequest:
    """Lock a request row and check that ``approver_id`` may move it to ``target``.

    1. Approvals first lock every open request of the employee, so two
       approvals for one employee never run their overlap checks side by side.
    2. Read the request with a row-level write lock.
    3. Reject any transition not in the transition table.
    4. Require the approver to be the employee's current manager.
    """
    if target == LeaveStatus.APPROVED:
        existing = await store.get_request(session, request_id)
        if existing is not None:
            await store.lock_open_requests(session, existing.employee_id)

    leave_request = await store.get_request_for_update(session, request_id)
    if leave_request is None:
        raise NotFoundError("Leave request not found", code="REQUEST_NOT_FOUND")

    current = LeaveStatus(leave_request.status)
    if not can_transition(current, target):
        raise ConflictError(
            f"Invalid status transition from {current} to {target}",
            code="INVALID_TRANSITION",
        )

    manager_id = await get_directory().get_manager_of(leave_request.employee_id)
    if manager_id is None or manager_id != approver_id:
        raise AuthorizationError("Approver is not the employee's manager")
    return leave_request


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def submit_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitLeavePayload,
    *,
    today: date | None = None,
) -> LeaveRequestResponse:
    """Submit a leave request for the calling employee.

    Flow:
    1. Resolve the employee in the directory
    2. Load approved requests touching the range and this year's balance
    3. Run every submission check, raising one error with all issues
    4. Insert the PENDING request (no balance is reserved)
    5. Write audit log and commit
    6. Notify the employee's current manager, best effort
    """
    today = today or date.today()
    directory = get_directory()

    employee = await directory.get_employee(auth.user_id)
    if employee is None:
        raise NotFoundError("Employee not found", code="EMPLOYEE_NOT_FOUND")

    candidate = LeaveCandidate(
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )

    async with store.transaction(session):
        approved = await store.list_approved_for_employee(
            session, employee.id, start_date=payload.start_date, end_date=payload.end_date
        )
        balance = await store.get_balance(session, employee.id, today.year)

        result = validate_leave_submission(candidate, approved_requests=approved, balance=balance, today=today)
        leave_type, days_count = result.accepted()

        leave_request = await store.insert_request(
            session,
            LeaveRequest(
                employee_id=employee.id,
                leave_type=leave_type.value,
                start_date=payload.start_date,
                end_date=payload.end_date,
                days_count=days_count,
                reason=payload.reason.strip(),
                status=LeaveStatus.PENDING.value,
            ),
        )

        write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.LEAVE_REQUEST,
            entity_key=str(leave_request.id),
            action=AuditAction.SUBMIT,
            after_json=model_to_audit_dict(leave_request),
        )

    logger.info(
        "Leave request %s submitted by %s: %s %s..%s (%d days)",
        leave_request.id,
        employee.id,
        leave_request.leave_type,
        leave_request.start_date,
        leave_request.end_date,
        leave_request.days_count,
    )

    manager_id = await directory.get_manager_of(employee.id)
    subject, body = submitted_message(employee, leave_request)
    await notify_safely(manager_id, subject, body)

    return _build_request_response(leave_request)


async def approve_leave_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    approver_id: uuid.UUID,
    *,
    today: date | None = None,
) -> LeaveRequestResponse:
    """Approve a pending request and debit the balance in one transaction.

    1. Lock the employee's open requests, then this one; it must be PENDING
       and the approver its employee's manager.
    2. Lock the employee's balance row for the current year.
    3. Re-check that no approved request overlaps this one.
    4. Flip status to APPROVED; the UPDATE itself refuses if an overlapping
       approval slipped in.
    5. ANNUAL/SICK: require ``used + days_count <= total`` and add
       ``days_count`` to ``used``.
    6. Audit log, commit, then notify the employee, best effort.
    """
    today = today or date.today()

    async with store.transaction(session):
        leave_request = await _lock_for_decision(session, request_id, approver_id, LeaveStatus.APPROVED)
        before_dict = model_to_audit_dict(leave_request)
        leave_type = LeaveType(leave_request.leave_type)

        balance = await store.get_balance_for_update(session, leave_request.employee_id, today.year)
        if balance is None and leave_type.is_balance_tracked:
            raise NotFoundError(f"Leave balance not found for year {today.year}", code=BALANCE_NOT_FOUND)

        approved = await store.list_approved_for_employee(
            session,
            leave_request.employee_id,
            start_date=leave_request.start_date,
            end_date=leave_request.end_date,
        )
        if find_overlapping(approved, leave_request.start_date, leave_request.end_date) is not None:
            raise ConflictError(
                "Leave request overlaps with an existing approved request",
                code=OVERLAPPING_REQUEST,
            )

        await store.update_request_status(
            session,
            leave_request,
            expected=LeaveStatus.PENDING,
            new_status=LeaveStatus.APPROVED,
            approver_id=approver_id,
            decided_at=datetime.now(UTC),
        )

        if balance is not None and leave_type.is_balance_tracked:
            if not has_sufficient_balance(balance, leave_type, leave_request.days_count):
                raise ConflictError(
                    f"Insufficient leave balance. Requested: {leave_request.days_count} days, "
                    f"Available: {max(0, remaining(balance, leave_type) or 0)} days",
                    code=INSUFFICIENT_BALANCE,
                )
            await store.update_balance_used(session, balance, leave_type, leave_request.days_count)

        write_audit_log(
            session,
            actor_id=approver_id,
            entity_type=AuditEntityType.LEAVE_REQUEST,
            entity_key=str(leave_request.id),
            action=AuditAction.APPROVE,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave_request),
        )

    logger.info("Leave request %s approved by %s", leave_request.id, approver_id)

    subject, body = approved_message(leave_request)
    await notify_safely(leave_request.employee_id, subject, body)

    return _build_request_response(leave_request)


async def reject_leave_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    approver_id: uuid.UUID,
    rejection_reason: str,
) -> LeaveRequestResponse:
    """Reject a pending request. The balance is never read or written."""
    async with store.transaction(session):
        leave_request = await _lock_for_decision(session, request_id, approver_id, LeaveStatus.REJECTED)

        issues = check_reason(rejection_reason, field="rejection_reason", label="Rejection reason")
        if issues:
            raise ValidationError(issues[0].message, errors=issues)

        before_dict = model_to_audit_dict(leave_request)
        await store.update_request_status(
            session,
            leave_request,
            expected=LeaveStatus.PENDING,
            new_status=LeaveStatus.REJECTED,
            approver_id=approver_id,
            decided_at=datetime.now(UTC),
            rejection_reason=rejection_reason.strip(),
        )

        write_audit_log(
            session,
            actor_id=approver_id,
            entity_type=AuditEntityType.LEAVE_REQUEST,
            entity_key=str(leave_request.id),
            action=AuditAction.REJECT,
            before_json=before_dict,
            after_json=model_to_audit_dict(leave_request),
        )

    logger.info("Leave request %s rejected by %s", leave_request.id, approver_id)

    subject, body = rejected_message(leave_request)
    await notify_safely(leave_request.employee_id, subject, body)

    return _build_request_response(leave_request)


async def get_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single request.

    Visible to its owner, the approver who decided it, the owner's current
    manager, and HR admins.
    """
    leave_request = await store.get_request(session, request_id)
    if leave_request is None:
        raise NotFoundError("Leave request not found", code="REQUEST_NOT_FOUND")

    if not auth.is_hr_admin and auth.user_id not in (leave_request.employee_id, leave_request.approver_id):
        manager_id = await get_directory().get_manager_of(leave_request.employee_id)
        if manager_id != auth.user_id:
            raise AuthorizationError("Unauthorized to access this leave request")

    return _build_request_response(leave_request)


async def list_my_requests(session: AsyncSession, employee_id: uuid.UUID) -> LeaveRequestListResponse:
    """List an employee's own requests, newest first."""
    requests = await store.list_by_employee(session, employee_id)
    return LeaveRequestListResponse(
        items=[_build_request_response(r) for r in requests],
        total=len(requests),
    )


async def list_team_requests(session: AsyncSession, manager_id: uuid.UUID) -> TeamLeaveRequestListResponse:
    """List requests of the manager's direct reports with employee display data."""
    directory = get_directory()
    reports = {e.id: e for e in await directory.list_reports(manager_id)}
    requests = await store.list_by_employees(session, list(reports))

    approvers: dict[uuid.UUID, EmployeeInfo | None] = {}
    items: list[TeamLeaveRequestResponse] = []
    for r in requests:
        approver = None
        if r.approver_id is not None:
            if r.approver_id not in approvers:
                approvers[r.approver_id] = await directory.get_employee(r.approver_id)
            approver = approvers[r.approver_id]
        items.append(
            TeamLeaveRequestResponse(
                **_build_request_response(r).model_dump(),
                employee=_build_employee_summary(reports.get(r.employee_id)),
                approver=_build_employee_summary(approver),
            )
        )
    return TeamLeaveRequestListResponse(items=items, total=len(items))
