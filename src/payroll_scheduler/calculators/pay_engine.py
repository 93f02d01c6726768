"""Gross pay computation for a single line item."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from payroll_scheduler.calculators.holidays import HolidayCalendar, HolidayDate
from payroll_scheduler.calculators.types import (
    PAY_PERIODS_PER_YEAR,
    ZERO,
    EmployeePayProfile,
    PayBreakdown,
    PayConfigurationError,
    PayRunLineItem,
    PayType,
    to_decimal,
)

HOLIDAY_PREMIUM = Decimal("1.5")
OVERTIME_PREMIUM = Decimal("1.5")
HUNDRED = Decimal("100")


class PayEngine:
    """Pure pay calculations.

    Hourly:
        normal_hours = max(hours_worked - holiday_hours, 0)
        base = rate * normal_hours
             + rate * HOLIDAY_PREMIUM * holiday_hours
             + rate * OVERTIME_PREMIUM * overtime_hours

    Salary:
        base = salary / periods_per_year(pay_group)

    Vacation pay is ``base * vacation_pay_percent / 100`` when requested and
    gross is ``base + vacation``. Nothing is rounded here; use
    ``round_to_cents`` at the persistence/display boundary.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(PayEngine.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    @staticmethod
    def compute(profile: EmployeePayProfile, item: PayRunLineItem) -> PayBreakdown:
        """Compute base, vacation and gross pay for one line item."""
        if profile.pay_type == PayType.HOURLY:
            breakdown = PayEngine._hourly(profile, item)
        elif profile.pay_type == PayType.SALARY:
            breakdown = PayEngine._salary(profile)
        else:
            raise PayConfigurationError.for_field(
                "pay_type", f"Unsupported pay type: {profile.pay_type}"
            )

        vacation = ZERO
        if item.include_vacation:
            vacation = breakdown.base_pay * (
                to_decimal(profile.vacation_pay_percent) / HUNDRED
            )

        return PayBreakdown(
            regular_pay=breakdown.regular_pay,
            holiday_pay=breakdown.holiday_pay,
            overtime_pay=breakdown.overtime_pay,
            base_pay=breakdown.base_pay,
            vacation_pay=vacation,
            gross_pay=breakdown.base_pay + vacation,
            normal_hours=breakdown.normal_hours,
        )

    @staticmethod
    def _hourly(profile: EmployeePayProfile, item: PayRunLineItem) -> PayBreakdown:
        if profile.hourly_rate is None:
            # Never fall back to a zero rate
            raise PayConfigurationError.for_field(
                "hourly_rate", f"Employee {profile.employee_id} has no hourly rate"
            )
        rate = to_decimal(profile.hourly_rate)
        normal_hours = max(item.hours_worked - item.holiday_hours, ZERO)

        regular = rate * normal_hours
        holiday = rate * HOLIDAY_PREMIUM * item.holiday_hours
        overtime = rate * OVERTIME_PREMIUM * item.overtime_hours
        return PayBreakdown(
            regular_pay=regular,
            holiday_pay=holiday,
            overtime_pay=overtime,
            base_pay=regular + holiday + overtime,
            normal_hours=normal_hours,
        )

    @staticmethod
    def _salary(profile: EmployeePayProfile) -> PayBreakdown:
        if profile.salary is None:
            raise PayConfigurationError.for_field(
                "salary", f"Employee {profile.employee_id} has no salary"
            )
        periods = PAY_PERIODS_PER_YEAR[profile.pay_group]
        base = to_decimal(profile.salary) / Decimal(periods)
        return PayBreakdown(regular_pay=base, base_pay=base)


def split_holiday_hours(
    daily_hours: Mapping[date, Decimal | float | int | None],
    calendar: HolidayCalendar,
) -> tuple[Decimal, Decimal, list[HolidayDate]]:
    """Split per-day hours into total and holiday hours.

    Returns ``(total_hours, holiday_hours, holidays_worked)`` where
    ``holidays_worked`` lists holidays with a non-zero entry, in date order.
    """
    total = ZERO
    holiday_total = ZERO
    worked: list[HolidayDate] = []
    for day in sorted(daily_hours):
        hours = to_decimal(daily_hours[day])
        total += hours
        holiday = calendar.holiday_on_date(day)
        if holiday is not None and hours > 0:
            holiday_total += hours
            worked.append(holiday)
    return total, holiday_total, worked
