"""Payroll scheduler services."""

from payroll_scheduler.services.dispatcher import (
    ScheduleDispatcher,
    ScheduleRequest,
    UpstreamError,
    resolve_dispatch_instant,
)
from payroll_scheduler.services.employee_service import EmployeeNotifier, EmployeeService
from payroll_scheduler.services.orchestrator import PayrollOrchestrator, ScheduleOrUpdateCommand
from payroll_scheduler.services.pay_run_service import PayRunService, PayRunSubmission
from payroll_scheduler.services.state_machine import (
    InvalidTransitionError,
    PayHistoryStateMachine,
    PayHistoryStatus,
)

__all__ = [
    "EmployeeNotifier",
    "EmployeeService",
    "InvalidTransitionError",
    "PayHistoryStateMachine",
    "PayHistoryStatus",
    "PayRunService",
    "PayRunSubmission",
    "PayrollOrchestrator",
    "ScheduleDispatcher",
    "ScheduleOrUpdateCommand",
    "ScheduleRequest",
    "UpstreamError",
    "resolve_dispatch_instant",
]
