"""Pay calculation: holidays, per-row pay and run totals."""

from payroll_scheduler.calculators.aggregator import EmployeeNotFoundError, PayRunAggregator
from payroll_scheduler.calculators.holidays import HolidayCalendar, HolidayDate, get_calendar
from payroll_scheduler.calculators.pay_engine import PayEngine, split_holiday_hours
from payroll_scheduler.calculators.types import (
    EmployeePayProfile,
    PayBreakdown,
    PayConfigurationError,
    PayGroup,
    PayRunLineItem,
    PayRunResult,
    PayRunTotals,
    PayType,
)

__all__ = [
    "EmployeeNotFoundError",
    "EmployeePayProfile",
    "HolidayCalendar",
    "HolidayDate",
    "PayBreakdown",
    "PayConfigurationError",
    "PayEngine",
    "PayGroup",
    "PayRunAggregator",
    "PayRunLineItem",
    "PayRunResult",
    "PayRunTotals",
    "PayType",
    "get_calendar",
    "split_holiday_hours",
]
