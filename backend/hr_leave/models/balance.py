# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def _now_utc() -> datetime:
    return datetime.now(UTC)


class LeaveBalance(SQLModel, table=True):
    """Per-employee, per-year allotment and usage of ANNUAL and SICK leave."""

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.PrimaryKeyConstraint("employee_id", "year"),
        sa.CheckConstraint("annual_used >= 0 AND annual_used <= annual_total", name="ck_leave_balance_annual"),
        sa.CheckConstraint("sick_used >= 0 AND sick_used <= sick_total", name="ck_leave_balance_sick"),
    )

    employee_id: uuid.UUID
    year: int
    annual_total: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    annual_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    sick_total: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    sick_used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    updated_at: datetime = Field(  # type: ignore[call-overload]
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
