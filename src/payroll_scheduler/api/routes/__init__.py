"""API routes."""

from payroll_scheduler.api.routes.employees import router as employees_router
from payroll_scheduler.api.routes.health import router as health_router
from payroll_scheduler.api.routes.holidays import router as holidays_router
from payroll_scheduler.api.routes.pay_history import router as pay_history_router
from payroll_scheduler.api.routes.pay_runs import router as pay_runs_router
from payroll_scheduler.api.routes.payroll import router as payroll_router

__all__ = [
    "employees_router",
    "health_router",
    "holidays_router",
    "pay_history_router",
    "pay_runs_router",
    "payroll_router",
]
