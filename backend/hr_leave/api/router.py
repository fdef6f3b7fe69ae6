from fastapi import APIRouter

from hr_leave.api.balances import balances_router, employee_balance_router
from hr_leave.api.employees import employees_router
from hr_leave.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(balances_router)
api_router.include_router(employee_balance_router)
api_router.include_router(employees_router)
