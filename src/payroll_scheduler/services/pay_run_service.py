"""Pay run service - computes and persists pay history for a payroll run."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_scheduler.calculators.aggregator import EmployeeNotFoundError, PayRunAggregator
from payroll_scheduler.calculators.pay_engine import PayEngine
from payroll_scheduler.calculators.types import (
    PayRunLineItem,
    PayRunResult,
    PayRunTotals,
    PayType,
)
from payroll_scheduler.errors import ValidationFailedError
from payroll_scheduler.models import DEDUCTION_FIELDS, PayHistory
from payroll_scheduler.services.employee_service import EmployeeService, parse_ids
from payroll_scheduler.services.state_machine import PayHistoryStateMachine, PayHistoryStatus

logger = logging.getLogger(__name__)


@dataclass
class PayRunSubmission:
    """A payroll run as entered: period, pay date and one item per employee."""

    period_start: date
    period_end: date
    pay_date: date
    items: list[PayRunLineItem] = field(default_factory=list)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of persisting a payroll run."""

    count: int
    record_ids: list[str]
    totals: PayRunTotals
    employee_ids: list[str]


class PayRunService:
    """Service for payroll runs and their pay history.

    Operations:
    - preview_pay_run: compute per-row pay and totals without writing
    - submit_pay_run: compute and persist one PENDING record per included row
    - update_status: bulk status transition
    - export_pending: PENDING records with their employees
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.employees = EmployeeService(session)

    async def preview_pay_run(self, items: list[PayRunLineItem]) -> PayRunResult:
        profiles = await self.employees.get_pay_profiles(i.employee_id for i in items)
        return PayRunAggregator.aggregate(profiles, items)

    async def submit_pay_run(self, submission: PayRunSubmission) -> SubmitResult:
        """Compute and stage pay history rows for a run.

        Every employee is resolved and every row computed before anything is
        added to the session, and all rows go out in one flush. The caller
        owns the transaction: commit persists the whole run, rollback (on any
        error) persists none of it.

        Raises:
            EmployeeNotFoundError: an item references an unknown employee.
            PayConfigurationError: an employee's pay setup is incomplete.
        """
        if submission.period_start > submission.period_end:
            raise ValidationFailedError.for_field(
                "period_end", "period_end must not be before period_start"
            )

        ids = [item.employee_id for item in submission.items]
        employees = await self.employees.get_employees(ids)
        for employee_id in ids:
            if employee_id not in employees:
                raise EmployeeNotFoundError(employee_id)

        profiles = {key: emp.pay_profile() for key, emp in employees.items()}
        result = PayRunAggregator.aggregate(profiles, submission.items)

        records: list[PayHistory] = []
        for row in result.included_rows:
            gross = PayEngine.round_to_cents(row.breakdown.gross_pay)
            deductions = {name: Decimal("0") for name in DEDUCTION_FIELDS}
            record = PayHistory(
                employee_id=employees[row.employee_id].id,
                pay_date=submission.pay_date,
                period_start=submission.period_start,
                period_end=submission.period_end,
                hours_worked=(
                    row.item.hours_worked if row.pay_type == PayType.HOURLY else None
                ),
                gross_pay=gross,
                net_pay=gross - sum(deductions.values(), Decimal("0")),
                status=PayHistoryStateMachine.INITIAL_STATUS.value,
                review_valid=True,
                review_errors=[],
                review_warnings=[],
                **deductions,
            )
            records.append(record)

        self.session.add_all(records)
        await self.session.flush()

        logger.info(
            "Staged %d pay history record(s) for pay date %s (gross %s)",
            len(records),
            submission.pay_date,
            PayEngine.round_to_cents(result.totals.gross_pay),
        )
        return SubmitResult(
            count=len(records),
            record_ids=[str(r.id) for r in records],
            totals=result.totals,
            employee_ids=[row.employee_id for row in result.included_rows],
        )

    async def update_status(
        self, ids: Iterable[str | int], status: str | PayHistoryStatus
    ) -> int:
        """Move records to ``status`` and return how many actually changed.

        Unknown ids, and records whose current status cannot move to the
        target, are skipped without error. The latter are logged by id.
        """
        target = PayHistoryStateMachine.parse_status(status)
        id_list = parse_ids(ids)
        if not id_list:
            return 0

        blocked = await self.blocked_ids(id_list, target)
        if blocked:
            logger.warning(
                "Skipped %d pay history record(s) that cannot move to %s: %s",
                len(blocked),
                target.value,
                ", ".join(blocked),
            )
        sources = PayHistoryStateMachine.allowed_sources(target)
        if not sources:
            return 0

        result = await self.session.execute(
            update(PayHistory)
            .where(
                PayHistory.id.in_(id_list),
                PayHistory.status.in_([s.value for s in sources]),
            )
            .values(status=target.value)
            .execution_options(synchronize_session=False)
        )
        updated = result.rowcount or 0
        logger.info("Moved %d of %d pay history record(s) to %s", updated, len(id_list), target.value)
        return updated

    async def blocked_ids(
        self, ids: Iterable[str | int], status: str | PayHistoryStatus
    ) -> list[str]:
        """Ids of existing records whose current status cannot move to ``status``."""
        target = PayHistoryStateMachine.parse_status(status)
        id_list = parse_ids(ids)
        if not id_list:
            return []
        sources = [s.value for s in PayHistoryStateMachine.allowed_sources(target)]
        result = await self.session.execute(
            select(PayHistory.id)
            .where(PayHistory.id.in_(id_list), PayHistory.status.not_in(sources))
            .order_by(PayHistory.id)
        )
        return [str(row_id) for row_id in result.scalars().all()]

    async def export_pending(self, ids: Iterable[str | int] | None = None) -> list[PayHistory]:
        """PENDING records with their employee, optionally narrowed to ``ids``."""
        query = (
            select(PayHistory)
            .where(PayHistory.status == PayHistoryStatus.PENDING.value)
            .options(selectinload(PayHistory.employee))
            .order_by(PayHistory.id)
        )
        if ids is not None:
            query = query.where(PayHistory.id.in_(parse_ids(ids)))
        result = await self.session.execute(query)
        return list(result.scalars().all())
