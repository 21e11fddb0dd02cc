from fastapi import APIRouter

from leavedesk.api.balances import balances_router, employee_balance_router
from leavedesk.api.departments import departments_router
from leavedesk.api.employees import employees_router
from leavedesk.api.holidays import holidays_router
from leavedesk.api.imports import imports_router
from leavedesk.api.leave_types import leave_types_router
from leavedesk.api.requests import requests_router
from leavedesk.api.titles import titles_router

api_router = APIRouter()
api_router.include_router(titles_router)
api_router.include_router(departments_router)
api_router.include_router(employees_router)
api_router.include_router(employee_balance_router)
api_router.include_router(leave_types_router)
api_router.include_router(balances_router)
api_router.include_router(holidays_router)
api_router.include_router(requests_router)
api_router.include_router(imports_router)
