from __future__ import annotations

import enum


class LeaveType(enum.StrEnum):
    """Kind of leave. Only ANNUAL and SICK draw down a tracked balance."""

    ANNUAL = "ANNUAL"
    SICK = "SICK"
    UNPAID = "UNPAID"
    OTHER = "OTHER"

    @property
    def is_balance_tracked(self) -> bool:
        return self in (LeaveType.ANNUAL, LeaveType.SICK)


class LeaveStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Every persisted status change must appear here.
ALLOWED_TRANSITIONS: dict[LeaveStatus, frozenset[LeaveStatus]] = {
    LeaveStatus.PENDING: frozenset({LeaveStatus.APPROVED, LeaveStatus.REJECTED}),
    LeaveStatus.APPROVED: frozenset(),
    LeaveStatus.REJECTED: frozenset(),
}


def can_transition(current: LeaveStatus, target: LeaveStatus) -> bool:
    """Return True if moving from ``current`` to ``target`` is a legal transition."""
    return target in ALLOWED_TRANSITIONS[current]


class Role(enum.StrEnum):
    """Caller role carried by the dev auth headers."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    HR_ADMIN = "hr_admin"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    LEAVE_REQUEST = "LEAVE_REQUEST"
    LEAVE_BALANCE = "LEAVE_BALANCE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    ALLOCATE = "ALLOCATE"
