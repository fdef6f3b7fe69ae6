# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field

from hr_leave.models.enums import LeaveStatus, LeaveType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitLeavePayload(BaseModel):
    """Request body for submitting a new leave request.

    Only the shape is checked here; business rules (date order, reason
    length, leave type, overlap, balance) are reported together by the
    submission validator.
    """

    leave_type: str = Field(max_length=50)
    start_date: date
    end_date: date
    reason: str = ""


class RejectLeavePayload(BaseModel):
    """Request body for rejecting a leave request."""

    rejection_reason: str = ""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EmployeeSummary(BaseModel):
    """Display data for an employee shown alongside a request."""

    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    job_title: str | None = None


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type: LeaveType
    start_date: date
    end_date: date
    days_count: int
    reason: str
    status: LeaveStatus
    approver_id: uuid.UUID | None
    approved_at: datetime | None
    rejection_reason: str | None
    created_at: datetime
    updated_at: datetime


class LeaveRequestListResponse(BaseModel):
    """List of leave requests, newest first."""

    items: list[LeaveRequestResponse]
    total: int


class TeamLeaveRequestResponse(LeaveRequestResponse):
    """A leave request joined with employee and approver display data."""

    employee: EmployeeSummary | None
    approver: EmployeeSummary | None = None


class TeamLeaveRequestListResponse(BaseModel):
    """Requests of a manager's direct reports, newest first."""

    items: list[TeamLeaveRequestResponse]
    total: int
