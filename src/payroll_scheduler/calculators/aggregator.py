"""Payroll run aggregation across line items."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from payroll_scheduler.calculators.pay_engine import PayEngine
from payroll_scheduler.calculators.types import (
    ZERO,
    EmployeePayProfile,
    PayBreakdown,
    PayRunLineItem,
    PayRunResult,
    PayRunTotals,
    RowResult,
)
from payroll_scheduler.errors import NotFoundError


class EmployeeNotFoundError(NotFoundError):
    """Raised when a line item references an unknown employee."""

    code = "UNKNOWN_EMPLOYEE"

    def __init__(self, employee_id: str):
        self.employee_id = str(employee_id)
        super().__init__(
            f"Unknown employee: {self.employee_id}",
            {"employee_id": self.employee_id},
        )


class PayRunAggregator:
    """Applies the pay engine to each included row and sums the results.

    Excluded rows are kept in the output with a zero breakdown so callers can
    still display them. Totals use exact Decimal addition, so they do not
    depend on row order.
    """

    @staticmethod
    def aggregate(
        profiles: Mapping[str, EmployeePayProfile],
        items: Iterable[PayRunLineItem],
    ) -> PayRunResult:
        rows: list[RowResult] = []
        for item in items:
            profile = profiles.get(item.employee_id)
            if profile is None:
                raise EmployeeNotFoundError(item.employee_id)

            if item.included:
                breakdown = PayEngine.compute(profile, item)
            else:
                breakdown = PayBreakdown()
            rows.append(RowResult(item=item, pay_type=profile.pay_type, breakdown=breakdown))

        return PayRunResult(rows=rows, totals=PayRunAggregator.totals(rows))

    @staticmethod
    def totals(rows: Iterable[RowResult]) -> PayRunTotals:
        """Sum base/vacation/gross over included rows."""
        base = vacation = gross = ZERO
        included = excluded = 0
        for row in rows:
            if not row.included:
                excluded += 1
                continue
            included += 1
            base += row.breakdown.base_pay
            vacation += row.breakdown.vacation_pay
            gross += row.breakdown.gross_pay
        return PayRunTotals(
            base_pay=base,
            vacation_pay=vacation,
            gross_pay=gross,
            included_count=included,
            excluded_count=excluded,
        )
