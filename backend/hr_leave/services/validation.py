"""Pass/fail verdict for a proposed leave request.

Every check runs on every call so the caller sees the whole set of problems
at once. Checks that need a valid date range or leave type are skipped when
those inputs are themselves invalid.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from pydantic import BaseModel

from hr_leave.exceptions import ConflictError, ErrorDetail, NotFoundError, ValidationError
from hr_leave.models.enums import LeaveType
from hr_leave.models.request import REASON_MAX_LENGTH
from hr_leave.services.balance import remaining
from hr_leave.services.dates import MAX_LEAVE_SPAN_DAYS, days_between, ranges_overlap

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hr_leave.models.balance import LeaveBalance
    from hr_leave.models.request import LeaveRequest

VALIDATION_ERROR = "VALIDATION_ERROR"
OVERLAPPING_REQUEST = "OVERLAPPING_REQUEST"
INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
BALANCE_NOT_FOUND = "BALANCE_NOT_FOUND"


class LeaveCandidate(BaseModel):
    """A request as proposed by an employee, before anything is persisted."""

    leave_type: str
    start_date: date | None
    end_date: date | None
    reason: str | None


class ValidationResult(BaseModel):
    """Outcome of validating a candidate: every issue found, plus derived values."""

    issues: list[ErrorDetail] = []
    leave_type: LeaveType | None = None
    days_count: int | None = None

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def has(self, code: str) -> bool:
        return any(issue.code == code for issue in self.issues)

    def raise_for_issues(self) -> None:
        """Raise one typed error carrying every issue, or return if there are none.

        Input problems win over a missing balance, which wins over conflicts
        with existing data.
        """
        if self.is_valid:
            return
        message = ", ".join(issue.message for issue in self.issues)
        if self.has(VALIDATION_ERROR):
            raise ValidationError(message, errors=self.issues)
        if self.has(BALANCE_NOT_FOUND):
            raise NotFoundError(message, code=BALANCE_NOT_FOUND, errors=self.issues)
        raise ConflictError(message, code=self.issues[0].code, errors=self.issues)

    def accepted(self) -> tuple[LeaveType, int]:
        """Return the parsed leave type and day count, or raise for the issues found."""
        self.raise_for_issues()
        if self.leave_type is None or self.days_count is None:
            raise ValidationError("Leave type and dates are required")
        return self.leave_type, self.days_count


def parse_leave_type(value: str) -> LeaveType | None:
    try:
        return LeaveType(value.strip().upper())
    except ValueError:
        return None


def _check_dates(candidate: LeaveCandidate, today: date) -> list[ErrorDetail]:
    issues: list[ErrorDetail] = []
    start, end = candidate.start_date, candidate.end_date
    if start is None:
        issues.append(ErrorDetail(code=VALIDATION_ERROR, field="start_date", message="Start date must be a valid date"))
    if end is None:
        issues.append(ErrorDetail(code=VALIDATION_ERROR, field="end_date", message="End date must be a valid date"))
    if start is None or end is None:
        return issues

    if start > end:
        issues.append(
            ErrorDetail(
                code=VALIDATION_ERROR,
                field="end_date",
                message="Start date must be before or equal to end date",
            )
        )
    elif days_between(start, end) > MAX_LEAVE_SPAN_DAYS:
        issues.append(
            ErrorDetail(
                code=VALIDATION_ERROR,
                field="end_date",
                message=f"Leave period cannot exceed {MAX_LEAVE_SPAN_DAYS} days",
            )
        )
    if start < today:
        issues.append(ErrorDetail(code=VALIDATION_ERROR, field="start_date", message="Start date cannot be in the past"))
    return issues


def check_reason(reason: str | None, field: str = "reason", label: str = "Reason") -> list[ErrorDetail]:
    """Reason text must be non-blank and at most ``REASON_MAX_LENGTH`` characters once trimmed."""
    trimmed = (reason or "").strip()
    if not trimmed:
        return [ErrorDetail(code=VALIDATION_ERROR, field=field, message=f"{label} is required")]
    if len(trimmed) > REASON_MAX_LENGTH:
        return [
            ErrorDetail(
                code=VALIDATION_ERROR,
                field=field,
                message=f"{label} must not exceed {REASON_MAX_LENGTH} characters",
            )
        ]
    return []


def find_overlapping(
    approved_requests: Iterable[LeaveRequest],
    start_date: date,
    end_date: date,
) -> LeaveRequest | None:
    """Return the first approved request sharing a day with the range, if any."""
    for existing in approved_requests:
        if ranges_overlap(existing.start_date, existing.end_date, start_date, end_date):
            return existing
    return None


def validate_leave_submission(
    candidate: LeaveCandidate,
    *,
    approved_requests: Iterable[LeaveRequest],
    balance: LeaveBalance | None,
    today: date,
) -> ValidationResult:
    """Run every submission check against a candidate request."""
    result = ValidationResult()

    result.issues.extend(_check_dates(candidate, today))
    result.issues.extend(check_reason(candidate.reason))

    leave_type = parse_leave_type(candidate.leave_type)
    if leave_type is None:
        result.issues.append(
            ErrorDetail(
                code=VALIDATION_ERROR,
                field="leave_type",
                message=f"Invalid leave type; expected one of {', '.join(t.value for t in LeaveType)}",
            )
        )
    result.leave_type = leave_type

    if candidate.start_date is None or candidate.end_date is None or candidate.start_date > candidate.end_date:
        return result

    days_count = days_between(candidate.start_date, candidate.end_date)
    result.days_count = days_count

    if find_overlapping(approved_requests, candidate.start_date, candidate.end_date) is not None:
        result.issues.append(
            ErrorDetail(
                code=OVERLAPPING_REQUEST,
                message="Leave request overlaps with an existing approved request",
            )
        )

    if leave_type is not None and leave_type.is_balance_tracked:
        if balance is None:
            result.issues.append(
                ErrorDetail(
                    code=BALANCE_NOT_FOUND,
                    message="Leave balance not found for the current year",
                )
            )
        else:
            left = remaining(balance, leave_type)
            if left is not None and left < days_count:
                result.issues.append(
                    ErrorDetail(
                        code=INSUFFICIENT_BALANCE,
                        message=(
                            f"Insufficient leave balance. Requested: {days_count} days, "
                            f"Available: {max(0, left)} days"
                        ),
                    )
                )
    return result
