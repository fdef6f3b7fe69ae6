"""HTTP tests for leave requests, balances and the employee directory."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

import pytest

from conftest import ADMIN_ID, EMPLOYEE_ID, MANAGER_ID, OTHER_MANAGER_ID, OUTSIDER_ID, TEAMMATE_ID, headers_for

if TYPE_CHECKING:
    from httpx import AsyncClient

    from hr_leave.services.notifier import InMemoryNotifier

EMPLOYEE_HEADERS = headers_for(EMPLOYEE_ID)
MANAGER_HEADERS = headers_for(MANAGER_ID, "manager")
ADMIN_HEADERS = headers_for(ADMIN_ID, "hr_admin")


def _days_ahead(n: int) -> str:
    return (date.today() + timedelta(days=n)).isoformat()


async def _allocate(
    client: AsyncClient,
    employee_id: uuid.UUID = EMPLOYEE_ID,
    annual_total: int = 20,
    sick_total: int = 10,
) -> dict[str, Any]:
    resp = await client.post(
        "/leave/balances",
        json={
            "employee_id": str(employee_id),
            "year": date.today().year,
            "annual_total": annual_total,
            "sick_total": sick_total,
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


async def _submit(
    client: AsyncClient,
    *,
    start: int = 10,
    end: int = 14,
    leave_type: str = "ANNUAL",
    reason: str = "Family holiday",
    headers: dict[str, str] | None = None,
) -> dict[str, Any]:
    resp = await client.post(
        "/leave/requests",
        json={
            "leave_type": leave_type,
            "start_date": _days_ahead(start),
            "end_date": _days_ahead(end),
            "reason": reason,
        },
        headers=headers or EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 201, resp.text
    result: dict[str, Any] = resp.json()
    return result


# ---------------------------------------------------------------------------
# Submit
# ---------------------------------------------------------------------------


async def test_submit_request(async_client: AsyncClient, notifier: InMemoryNotifier) -> None:
    await _allocate(async_client)

    data = await _submit(async_client, leave_type="annual")

    assert data["status"] == "PENDING"
    assert data["leave_type"] == "ANNUAL"
    assert data["days_count"] == 5
    assert data["employee_id"] == str(EMPLOYEE_ID)
    assert data["approver_id"] is None
    assert [n.to_employee_id for n in notifier.sent] == [MANAGER_ID]


async def test_submit_reports_all_errors(async_client: AsyncClient) -> None:
    await _allocate(async_client)

    resp = await async_client.post(
        "/leave/requests",
        json={
            "leave_type": "SABBATICAL",
            "start_date": _days_ahead(-3),
            "end_date": _days_ahead(-1),
            "reason": "   ",
        },
        headers=EMPLOYEE_HEADERS,
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert {e["field"] for e in body["errors"]} == {"start_date", "reason", "leave_type"}


async def test_submit_malformed_date(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave/requests",
        json={"leave_type": "ANNUAL", "start_date": "2025-02-30", "end_date": _days_ahead(1), "reason": "x"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"][0]["field"] == "start_date"


async def test_submit_insufficient_balance(async_client: AsyncClient) -> None:
    await _allocate(async_client, annual_total=3)

    resp = await async_client.post(
        "/leave/requests",
        json={"leave_type": "ANNUAL", "start_date": _days_ahead(10), "end_date": _days_ahead(14), "reason": "Trip"},
        headers=EMPLOYEE_HEADERS,
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "INSUFFICIENT_BALANCE"


async def test_submit_without_balance(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave/requests",
        json={"leave_type": "SICK", "start_date": _days_ahead(1), "end_date": _days_ahead(1), "reason": "Flu"},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 404
    assert resp.json()["code"] == "BALANCE_NOT_FOUND"


async def test_submit_requires_user_header(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave/requests",
        json={"leave_type": "ANNUAL", "start_date": _days_ahead(1), "end_date": _days_ahead(1), "reason": "x"},
    )
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Approve / reject
# ---------------------------------------------------------------------------


async def test_approve_flow_debits_balance(async_client: AsyncClient, notifier: InMemoryNotifier) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client)
    notifier.sent.clear()

    resp = await async_client.post(f"/leave/requests/{submitted['id']}/approve", headers=MANAGER_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "APPROVED"
    assert data["approver_id"] == str(MANAGER_ID)
    assert data["approved_at"] is not None
    assert [n.subject for n in notifier.sent] == ["Leave Request Approved"]

    balance = await async_client.get("/leave/balances/me", headers=EMPLOYEE_HEADERS)
    assert balance.status_code == 200
    assert balance.json()["annual"] == {"total": 20, "used": 5, "remaining": 15}


async def test_approve_twice_conflicts(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client)
    url = f"/leave/requests/{submitted['id']}/approve"

    first = await async_client.post(url, headers=MANAGER_HEADERS)
    second = await async_client.post(url, headers=MANAGER_HEADERS)

    assert first.status_code == 200
    assert second.status_code == 409
    assert second.json()["code"] == "INVALID_TRANSITION"

    balance = await async_client.get("/leave/balances/me", headers=EMPLOYEE_HEADERS)
    assert balance.json()["annual"]["used"] == 5


async def test_approve_by_other_manager_forbidden(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client)

    resp = await async_client.post(
        f"/leave/requests/{submitted['id']}/approve",
        headers=headers_for(OTHER_MANAGER_ID, "manager"),
    )

    assert resp.status_code == 403
    assert resp.json()["code"] == "UNAUTHORIZED"


async def test_approve_unknown_request(async_client: AsyncClient) -> None:
    resp = await async_client.post(f"/leave/requests/{uuid.uuid4()}/approve", headers=MANAGER_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["code"] == "REQUEST_NOT_FOUND"


async def test_reject_flow(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client, leave_type="SICK", start=3, end=5)

    resp = await async_client.post(
        f"/leave/requests/{submitted['id']}/reject",
        json={"rejection_reason": "Release week"},
        headers=MANAGER_HEADERS,
    )

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "REJECTED"
    assert data["rejection_reason"] == "Release week"

    balance = await async_client.get("/leave/balances/me", headers=EMPLOYEE_HEADERS)
    assert balance.json()["sick"] == {"total": 10, "used": 0, "remaining": 10}


async def test_reject_without_reason(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client)

    resp = await async_client.post(
        f"/leave/requests/{submitted['id']}/reject",
        json={},
        headers=MANAGER_HEADERS,
    )

    assert resp.status_code == 422
    assert resp.json()["errors"][0]["field"] == "rejection_reason"


async def test_overlap_detected_on_second_approval(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    first = await _submit(async_client, start=10, end=12)
    second = await _submit(async_client, start=12, end=13)

    ok = await async_client.post(f"/leave/requests/{first['id']}/approve", headers=MANAGER_HEADERS)
    clash = await async_client.post(f"/leave/requests/{second['id']}/approve", headers=MANAGER_HEADERS)

    assert ok.status_code == 200
    assert clash.status_code == 409
    assert clash.json()["code"] == "OVERLAPPING_REQUEST"

    again = await async_client.post(
        "/leave/requests",
        json={"leave_type": "UNPAID", "start_date": _days_ahead(11), "end_date": _days_ahead(11), "reason": "x"},
        headers=EMPLOYEE_HEADERS,
    )
    assert again.status_code == 409
    assert again.json()["code"] == "OVERLAPPING_REQUEST"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def test_list_my_requests(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    await _submit(async_client, start=10, end=10)
    await _submit(async_client, start=20, end=20)

    resp = await async_client.get("/leave/requests/me", headers=EMPLOYEE_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert all(item["employee_id"] == str(EMPLOYEE_ID) for item in data["items"])

    other = await async_client.get("/leave/requests/me", headers=headers_for(TEAMMATE_ID))
    assert other.json()["total"] == 0


async def test_list_team_requests(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    await _allocate(async_client, TEAMMATE_ID)
    await _allocate(async_client, OUTSIDER_ID)
    await _submit(async_client)
    await _submit(async_client, headers=headers_for(TEAMMATE_ID))
    await _submit(async_client, headers=headers_for(OUTSIDER_ID))

    resp = await async_client.get("/leave/requests/team", headers=MANAGER_HEADERS)

    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    names = {item["employee"]["first_name"] for item in data["items"]}
    assert names == {"Alice", "Bob"}


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        (EMPLOYEE_HEADERS, 200),
        (MANAGER_HEADERS, 200),
        (ADMIN_HEADERS, 200),
        (headers_for(TEAMMATE_ID), 403),
    ],
)
async def test_get_request_visibility(async_client: AsyncClient, headers: dict[str, str], expected: int) -> None:
    await _allocate(async_client)
    submitted = await _submit(async_client)

    resp = await async_client.get(f"/leave/requests/{submitted['id']}", headers=headers)

    assert resp.status_code == expected


# ---------------------------------------------------------------------------
# Balances
# ---------------------------------------------------------------------------


async def test_allocate_balance(async_client: AsyncClient) -> None:
    data = await _allocate(async_client, annual_total=25, sick_total=8)

    assert data["employee_id"] == str(EMPLOYEE_ID)
    assert data["annual"] == {"total": 25, "used": 0, "remaining": 25}
    assert data["sick"] == {"total": 8, "used": 0, "remaining": 8}


async def test_allocate_balance_twice_conflicts(async_client: AsyncClient) -> None:
    await _allocate(async_client)

    resp = await async_client.post(
        "/leave/balances",
        json={"employee_id": str(EMPLOYEE_ID), "year": date.today().year, "annual_total": 30, "sick_total": 10},
        headers=ADMIN_HEADERS,
    )

    assert resp.status_code == 409
    assert resp.json()["code"] == "BALANCE_EXISTS"


async def test_allocate_balance_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave/balances",
        json={"employee_id": str(EMPLOYEE_ID), "year": date.today().year, "annual_total": 30, "sick_total": 10},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 403


async def test_allocate_balance_rejects_negative_totals(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/leave/balances",
        json={"employee_id": str(EMPLOYEE_ID), "year": date.today().year, "annual_total": -1, "sick_total": 10},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 422


async def test_my_balance_not_found(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave/balances/me", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["code"] == "BALANCE_NOT_FOUND"


async def test_my_balance_for_other_year(async_client: AsyncClient) -> None:
    await _allocate(async_client)
    resp = await async_client.get(
        "/leave/balances/me",
        params={"year": date.today().year - 1},
        headers=EMPLOYEE_HEADERS,
    )
    assert resp.status_code == 404


@pytest.mark.parametrize(
    ("headers", "expected"),
    [
        (EMPLOYEE_HEADERS, 200),
        (MANAGER_HEADERS, 200),
        (ADMIN_HEADERS, 200),
        (headers_for(TEAMMATE_ID), 403),
        (headers_for(OTHER_MANAGER_ID, "manager"), 403),
    ],
)
async def test_employee_balance_visibility(async_client: AsyncClient, headers: dict[str, str], expected: int) -> None:
    await _allocate(async_client)

    resp = await async_client.get(f"/employees/{EMPLOYEE_ID}/leave-balance", headers=headers)

    assert resp.status_code == expected


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


async def test_upsert_and_get_employee(async_client: AsyncClient) -> None:
    new_id = uuid.uuid4()
    resp = await async_client.put(
        f"/employees/{new_id}",
        json={
            "first_name": "Dana",
            "last_name": "Kim",
            "email": "dana@example.com",
            "job_title": "Designer",
            "manager_id": str(MANAGER_ID),
        },
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200

    fetched = await async_client.get(f"/employees/{new_id}", headers=EMPLOYEE_HEADERS)
    assert fetched.status_code == 200
    assert fetched.json()["manager_id"] == str(MANAGER_ID)

    team = await async_client.get("/leave/requests/team", headers=MANAGER_HEADERS)
    assert team.status_code == 200


async def test_upsert_employee_requires_admin(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        f"/employees/{uuid.uuid4()}",
        json={"first_name": "Dana", "last_name": "Kim", "email": "dana@example.com"},
        headers=MANAGER_HEADERS,
    )
    assert resp.status_code == 403


async def test_get_unknown_employee(async_client: AsyncClient) -> None:
    resp = await async_client.get(f"/employees/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404
    assert resp.json()["code"] == "EMPLOYEE_NOT_FOUND"
