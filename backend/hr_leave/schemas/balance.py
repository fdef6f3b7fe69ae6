# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class AllocateBalancePayload(BaseModel):
    """Request body for allocating an employee's yearly leave allotment."""

    employee_id: uuid.UUID
    year: int = Field(ge=2000, le=2100)
    annual_total: int = Field(ge=0, le=366)
    sick_total: int = Field(ge=0, le=366)


class LeaveTypeBalance(BaseModel):
    """Allotted, used and remaining days for one leave type."""

    total: int
    used: int
    remaining: int


class BalanceSummaryResponse(BaseModel):
    """Leave balance for an employee and year."""

    employee_id: uuid.UUID
    year: int
    annual: LeaveTypeBalance
    sick: LeaveTypeBalance
    updated_at: datetime | None
