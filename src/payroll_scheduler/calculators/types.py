"""Type definitions for the pay calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from payroll_scheduler.errors import ValidationFailedError

ZERO = Decimal("0")


class PayType(str, Enum):
    """How an employee's base pay is determined."""

    HOURLY = "HOURLY"
    SALARY = "SALARY"


class PayGroup(str, Enum):
    """Pay cadence used to prorate an annual salary."""

    BI_WEEKLY = "BI_WEEKLY"
    MONTHLY = "MONTHLY"


PAY_PERIODS_PER_YEAR: dict[PayGroup, int] = {
    PayGroup.BI_WEEKLY: 26,
    PayGroup.MONTHLY: 12,
}


class PayConfigurationError(ValidationFailedError):
    """Raised when an employee's pay setup cannot produce a pay amount."""

    code = "PAY_CONFIGURATION_ERROR"


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce numbers and numeric strings to Decimal, treating None as default."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class EmployeePayProfile:
    """Pay configuration for one employee.

    Exactly one of ``hourly_rate`` / ``salary`` is set, chosen by ``pay_type``.
    """

    employee_id: str
    pay_type: PayType
    pay_group: PayGroup = PayGroup.BI_WEEKLY
    hourly_rate: Decimal | None = None
    salary: Decimal | None = None
    vacation_pay_percent: Decimal = Decimal("4")

    def __post_init__(self) -> None:
        issues: list[dict[str, str]] = []
        if self.pay_type == PayType.HOURLY:
            if self.hourly_rate is None:
                issues.append({"field": "hourly_rate", "message": "hourly_rate required for HOURLY"})
            if self.salary is not None:
                issues.append({"field": "salary", "message": "salary must be empty for HOURLY"})
        elif self.pay_type == PayType.SALARY:
            if self.salary is None:
                issues.append({"field": "salary", "message": "salary required for SALARY"})
            if self.hourly_rate is not None:
                issues.append({"field": "hourly_rate", "message": "hourly_rate must be empty for SALARY"})
        if issues:
            raise PayConfigurationError(
                f"Invalid pay profile for employee {self.employee_id}", issues
            )


@dataclass
class PayRunLineItem:
    """One employee's input row within a payroll run.

    Hour fields default to zero; holiday and overtime hours are ignored for
    salaried employees.
    """

    employee_id: str
    included: bool = True
    hours_worked: Decimal = ZERO
    overtime_hours: Decimal = ZERO
    holiday_hours: Decimal = ZERO
    include_vacation: bool = True

    def __post_init__(self) -> None:
        employee_id = str(self.employee_id).strip()
        # "007" and "7" name the same stored employee
        self.employee_id = str(int(employee_id)) if employee_id.isdecimal() else employee_id
        self.hours_worked = to_decimal(self.hours_worked)
        self.overtime_hours = to_decimal(self.overtime_hours)
        self.holiday_hours = to_decimal(self.holiday_hours)


@dataclass(frozen=True)
class PayBreakdown:
    """Unrounded pay components for one line item."""

    regular_pay: Decimal = ZERO
    holiday_pay: Decimal = ZERO
    overtime_pay: Decimal = ZERO
    base_pay: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    gross_pay: Decimal = ZERO
    normal_hours: Decimal = ZERO

    def to_dict(self) -> dict[str, str]:
        return {
            "regular_pay": str(self.regular_pay),
            "holiday_pay": str(self.holiday_pay),
            "overtime_pay": str(self.overtime_pay),
            "base_pay": str(self.base_pay),
            "vacation_pay": str(self.vacation_pay),
            "gross_pay": str(self.gross_pay),
        }


@dataclass(frozen=True)
class RowResult:
    """Computed result for one line item in a run."""

    item: PayRunLineItem
    pay_type: PayType
    breakdown: PayBreakdown

    @property
    def employee_id(self) -> str:
        return self.item.employee_id

    @property
    def included(self) -> bool:
        return self.item.included


@dataclass(frozen=True)
class PayRunTotals:
    """Run-level sums over included rows."""

    base_pay: Decimal = ZERO
    vacation_pay: Decimal = ZERO
    gross_pay: Decimal = ZERO
    included_count: int = 0
    excluded_count: int = 0


@dataclass
class PayRunResult:
    """Per-row results plus totals for a batch."""

    rows: list[RowResult] = field(default_factory=list)
    totals: PayRunTotals = field(default_factory=PayRunTotals)

    @property
    def included_rows(self) -> list[RowResult]:
        return [r for r in self.rows if r.included]
