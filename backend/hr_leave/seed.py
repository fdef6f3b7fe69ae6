"""Seed script for development data.

Run with:  python -m hr_leave.seed
The API must be running; the employee directory is the in-memory stub, so
re-run the script after every API restart.
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"

ADMIN_ID = "00000000-0000-0000-0000-000000000001"
MANAGER_ID = "00000000-0000-0000-0000-000000000002"
ALICE_ID = "00000000-0000-0000-0000-000000000003"
BOB_ID = "00000000-0000-0000-0000-000000000004"

ADMIN_HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_ID,
    "X-Role": "hr_admin",
}

EMPLOYEES = [
    {
        "id": ADMIN_ID,
        "first_name": "Hannah",
        "last_name": "Reyes",
        "email": "hannah.reyes@example.com",
        "job_title": "HR Administrator",
        "manager_id": None,
    },
    {
        "id": MANAGER_ID,
        "first_name": "Marcus",
        "last_name": "Lee",
        "email": "marcus.lee@example.com",
        "job_title": "Engineering Manager",
        "manager_id": None,
    },
    {
        "id": ALICE_ID,
        "first_name": "Alice",
        "last_name": "Johnson",
        "email": "alice.johnson@example.com",
        "job_title": "Software Engineer",
        "manager_id": MANAGER_ID,
    },
    {
        "id": BOB_ID,
        "first_name": "Bob",
        "last_name": "Smith",
        "email": "bob.smith@example.com",
        "job_title": "QA Engineer",
        "manager_id": MANAGER_ID,
    },
]

# (employee_id, annual_total, sick_total)
ALLOCATIONS = [
    (MANAGER_ID, 25, 10),
    (ALICE_ID, 20, 10),
    (BOB_ID, 20, 10),
]


def _headers_for(user_id: str, role: str = "employee") -> dict[str, str]:
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": role}


async def _safe_post(
    client: httpx.AsyncClient,
    url: str,
    payload: dict,
    label: str,
    headers: dict[str, str],
) -> dict | None:
    """POST and report the outcome. Returns the JSON body on success."""
    resp = await client.post(url, json=payload, headers=headers)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        result: dict = resp.json()
        return result
    if resp.status_code == 409:
        print(f"  [SKIP] {label} ({resp.json().get('code')})")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text}")
    return None


async def seed_employees(client: httpx.AsyncClient) -> None:
    print("\nSeeding directory...")
    for employee in EMPLOYEES:
        body = {k: v for k, v in employee.items() if k != "id"}
        resp = await client.put(f"{BASE_URL}/employees/{employee['id']}", json=body, headers=ADMIN_HEADERS)
        status = "OK" if resp.status_code == 200 else f"ERROR {resp.status_code}"
        print(f"  [{status}] {employee['first_name']} {employee['last_name']}")


async def seed_allocations(client: httpx.AsyncClient, year: int) -> None:
    print(f"\nSeeding {year} allocations...")
    for employee_id, annual_total, sick_total in ALLOCATIONS:
        await _safe_post(
            client,
            f"{BASE_URL}/leave/balances",
            {"employee_id": employee_id, "year": year, "annual_total": annual_total, "sick_total": sick_total},
            f"Allocation {employee_id}: annual={annual_total} sick={sick_total}",
            ADMIN_HEADERS,
        )


async def seed_requests(client: httpx.AsyncClient, today: date) -> None:
    print("\nSeeding leave requests...")
    url = f"{BASE_URL}/leave/requests"

    # Alice: 3 days annual leave next week, approved by her manager.
    start = today + timedelta(days=7)
    alice = await _safe_post(
        client,
        url,
        {
            "leave_type": "ANNUAL",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=2)).isoformat(),
            "reason": "Family trip",
        },
        "Request: Alice 3-day annual leave",
        _headers_for(ALICE_ID),
    )
    if alice:
        await _safe_post(
            client,
            f"{url}/{alice['id']}/approve",
            {},
            "Approved Alice's annual leave",
            _headers_for(MANAGER_ID, "manager"),
        )

    # Bob: 1 day sick leave tomorrow, stays PENDING.
    tomorrow = today + timedelta(days=1)
    await _safe_post(
        client,
        url,
        {
            "leave_type": "SICK",
            "start_date": tomorrow.isoformat(),
            "end_date": tomorrow.isoformat(),
            "reason": "Doctor appointment",
        },
        "Request: Bob 1-day sick leave (PENDING)",
        _headers_for(BOB_ID),
    )


async def main() -> None:
    print("=" * 60)
    print("  HR Leave - Development Seed Script")
    print("=" * 60)

    today = date.today()
    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_employees(client)
        await seed_allocations(client, today.year)
        await seed_requests(client, today)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
