from sqlmodel import SQLModel

from hr_leave.models.audit import AuditLog
from hr_leave.models.balance import LeaveBalance
from hr_leave.models.base import TimestampMixin, UUIDBase
from hr_leave.models.enums import (
    ALLOWED_TRANSITIONS,
    AuditAction,
    AuditEntityType,
    LeaveStatus,
    LeaveType,
    Role,
    can_transition,
)
from hr_leave.models.request import LeaveRequest

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "can_transition",
]
