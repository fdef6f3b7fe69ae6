"""Best-effort notifications sent after a leave decision has committed.

Delivery is fire-and-forget from the workflow's point of view: a failed or
raising notifier is logged and never reaches the caller, and nothing is
retried.
"""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

from hr_leave.config import get_settings

if TYPE_CHECKING:
    from hr_leave.models.request import LeaveRequest
    from hr_leave.services.directory import EmployeeInfo

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """A message addressed to an employee."""

    to_employee_id: uuid.UUID
    subject: str
    body: str


@runtime_checkable
class Notifier(Protocol):
    """Delivery channel for employee notifications."""

    async def notify(self, to_employee_id: uuid.UUID, subject: str, body: str) -> bool:
        """Deliver a message. Returns False if delivery failed."""
        ...


class LoggingNotifier:
    """Development notifier that writes every message to the log."""

    async def notify(self, to_employee_id: uuid.UUID, subject: str, body: str) -> bool:
        logger.info("Notification to %s: %s\n%s", to_employee_id, subject, body)
        return True


class InMemoryNotifier:
    """Records notifications instead of sending them. ``fail`` simulates an outage."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[Notification] = []
        self.fail = fail

    async def notify(self, to_employee_id: uuid.UUID, subject: str, body: str) -> bool:
        if self.fail:
            return False
        self.sent.append(Notification(to_employee_id=to_employee_id, subject=subject, body=body))
        return True


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    return _notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the notifier (for testing or production wiring)."""
    global _notifier
    _notifier = notifier


async def notify_safely(to_employee_id: uuid.UUID | None, subject: str, body: str) -> bool:
    """Send a notification, absorbing every failure.

    Returns True only if the notifier reported successful delivery.
    """
    if to_employee_id is None:
        return False
    if not get_settings().notifications_enabled:
        logger.debug("Notifications disabled; dropping %r for %s", subject, to_employee_id)
        return False
    try:
        delivered = await get_notifier().notify(to_employee_id, subject, body)
    except Exception:
        logger.exception("Notification %r to %s raised", subject, to_employee_id)
        return False
    if not delivered:
        logger.warning("Notification %r to %s was not delivered", subject, to_employee_id)
    return delivered


# ---------------------------------------------------------------------------
# Message templates
# ---------------------------------------------------------------------------


def _request_lines(request: LeaveRequest) -> list[str]:
    return [
        f"Leave Type: {request.leave_type}",
        f"Start Date: {request.start_date.isoformat()}",
        f"End Date: {request.end_date.isoformat()}",
        f"Days: {request.days_count}",
    ]


def submitted_message(employee: EmployeeInfo, request: LeaveRequest) -> tuple[str, str]:
    subject = f"Leave Request Submitted - {employee.full_name}"
    body = "\n".join(
        [
            f"{employee.full_name} has submitted a leave request.",
            "",
            *_request_lines(request),
            f"Reason: {request.reason}",
            "",
            "Please review and approve or reject this request.",
        ]
    )
    return subject, body


def approved_message(request: LeaveRequest) -> tuple[str, str]:
    body = "\n".join(["Your leave request has been approved.", "", *_request_lines(request)])
    return "Leave Request Approved", body


def rejected_message(request: LeaveRequest) -> tuple[str, str]:
    body = "\n".join(
        [
            "Your leave request has been rejected.",
            "",
            *_request_lines(request),
            f"Rejection Reason: {request.rejection_reason}",
        ]
    )
    return "Leave Request Rejected", body
