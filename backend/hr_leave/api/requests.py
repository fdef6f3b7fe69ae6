# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from hr_leave.api.deps import AuthDep
from hr_leave.db import SessionDep
from hr_leave.schemas.request import (
    LeaveRequestListResponse,
    LeaveRequestResponse,
    RejectLeavePayload,
    SubmitLeavePayload,
    TeamLeaveRequestListResponse,
)
from hr_leave.services import leave as leave_service

requests_router = APIRouter(prefix="/leave/requests", tags=["leave requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    payload: SubmitLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Submit a new leave request for the calling employee."""
    return await leave_service.submit_leave_request(session, auth, payload)


@requests_router.get("/me", response_model=LeaveRequestListResponse)
async def list_my_requests(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestListResponse:
    """List the caller's own leave requests, newest first."""
    return await leave_service.list_my_requests(session, auth.user_id)


@requests_router.get("/team", response_model=TeamLeaveRequestListResponse)
async def list_team_requests(
    session: SessionDep,
    auth: AuthDep,
) -> TeamLeaveRequestListResponse:
    """List leave requests of the caller's direct reports."""
    return await leave_service.list_team_requests(session, auth.user_id)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Get a single leave request."""
    return await leave_service.get_leave_request(session, auth, request_id)


@requests_router.post("/{request_id}/approve", response_model=LeaveRequestResponse)
async def approve_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Approve a pending leave request (employee's manager only)."""
    return await leave_service.approve_leave_request(session, request_id, auth.user_id)


@requests_router.post("/{request_id}/reject", response_model=LeaveRequestResponse)
async def reject_request(
    request_id: uuid.UUID,
    payload: RejectLeavePayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Reject a pending leave request (employee's manager only)."""
    return await leave_service.reject_leave_request(session, request_id, auth.user_id, payload.rejection_reason)
