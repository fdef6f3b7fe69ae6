from __future__ import annotations

import uuid
from datetime import date

import pytest

from hr_leave.models import (
    ALLOWED_TRANSITIONS,
    AuditLog,
    LeaveBalance,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    SQLModel,
    can_transition,
)

EXPECTED_TABLES = {"audit_log", "leave_balance", "leave_request"}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_leave_request_defaults() -> None:
    request = LeaveRequest(
        employee_id=uuid.uuid4(),
        leave_type=LeaveType.ANNUAL.value,
        start_date=date(2025, 8, 1),
        end_date=date(2025, 8, 5),
        days_count=5,
        reason="Holiday",
    )
    assert request.status == LeaveStatus.PENDING
    assert request.approver_id is None
    assert request.approved_at is None
    assert request.rejection_reason is None
    assert request.id is not None


def test_leave_balance_defaults() -> None:
    balance = LeaveBalance(employee_id=uuid.uuid4(), year=2025)
    assert (balance.annual_total, balance.annual_used, balance.sick_total, balance.sick_used) == (0, 0, 0, 0)
    assert balance.version == 1


def test_leave_balance_primary_key() -> None:
    table = SQLModel.metadata.tables["leave_balance"]
    assert [c.name for c in table.primary_key.columns] == ["employee_id", "year"]


def test_audit_log_instantiation() -> None:
    entry = AuditLog(
        actor_id=uuid.uuid4(),
        entity_type="LEAVE_REQUEST",
        entity_key=str(uuid.uuid4()),
        action="SUBMIT",
    )
    assert entry.before_json is None
    assert entry.after_json is None
    assert entry.created_at is not None


@pytest.mark.parametrize("target", [LeaveStatus.APPROVED, LeaveStatus.REJECTED])
def test_pending_can_be_decided(target: LeaveStatus) -> None:
    assert can_transition(LeaveStatus.PENDING, target)


@pytest.mark.parametrize("current", [LeaveStatus.APPROVED, LeaveStatus.REJECTED])
def test_decided_states_are_terminal(current: LeaveStatus) -> None:
    assert ALLOWED_TRANSITIONS[current] == frozenset()
    assert all(not can_transition(current, target) for target in LeaveStatus)


def test_pending_cannot_stay_pending() -> None:
    assert not can_transition(LeaveStatus.PENDING, LeaveStatus.PENDING)


def test_only_annual_and_sick_are_tracked() -> None:
    assert {t for t in LeaveType if t.is_balance_tracked} == {LeaveType.ANNUAL, LeaveType.SICK}
