"""Tests for the pure balance arithmetic."""

from __future__ import annotations

import uuid

from hr_leave.models.balance import LeaveBalance
from hr_leave.models.enums import LeaveType
from hr_leave.services.balance import build_balance_summary, has_sufficient_balance, remaining


def _balance(**kwargs: int) -> LeaveBalance:
    values = {"annual_total": 20, "annual_used": 10, "sick_total": 10, "sick_used": 2} | kwargs
    return LeaveBalance(employee_id=uuid.uuid4(), year=2025, **values)


def test_remaining_for_tracked_types() -> None:
    balance = _balance()
    assert remaining(balance, LeaveType.ANNUAL) == 10
    assert remaining(balance, LeaveType.SICK) == 8


def test_remaining_is_unbounded_for_untracked_types() -> None:
    balance = _balance()
    assert remaining(balance, LeaveType.UNPAID) is None
    assert remaining(balance, LeaveType.OTHER) is None


def test_remaining_does_not_mutate_balance() -> None:
    balance = _balance()
    remaining(balance, LeaveType.ANNUAL)
    assert balance.annual_used == 10
    assert balance.annual_total == 20


def test_has_sufficient_balance_boundary() -> None:
    balance = _balance(annual_total=20, annual_used=18)
    assert has_sufficient_balance(balance, LeaveType.ANNUAL, 2)
    assert not has_sufficient_balance(balance, LeaveType.ANNUAL, 3)
    assert has_sufficient_balance(balance, LeaveType.UNPAID, 365)


def test_summary_reports_each_type() -> None:
    summary = build_balance_summary(_balance())
    assert summary.year == 2025
    assert (summary.annual.total, summary.annual.used, summary.annual.remaining) == (20, 10, 10)
    assert (summary.sick.total, summary.sick.used, summary.sick.remaining) == (10, 2, 8)


def test_summary_clamps_remaining_at_zero() -> None:
    summary = build_balance_summary(_balance(sick_total=2, sick_used=5))
    assert summary.sick.remaining == 0
