"""Tests for PayRunService against an in-memory database."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from payroll_scheduler.calculators.aggregator import EmployeeNotFoundError
from payroll_scheduler.calculators.types import PayRunLineItem
from payroll_scheduler.errors import ValidationFailedError
from payroll_scheduler.models import PayHistory
from payroll_scheduler.services.pay_run_service import PayRunService, PayRunSubmission


def submission(*items: PayRunLineItem) -> PayRunSubmission:
    return PayRunSubmission(
        period_start=date(2025, 6, 23),
        period_end=date(2025, 7, 4),
        pay_date=date(2025, 7, 11),
        items=list(items),
    )


async def count_history(session) -> int:
    return (await session.execute(select(func.count()).select_from(PayHistory))).scalar_one()


class TestSubmitPayRun:
    """submit_pay_run."""

    async def test_persists_one_pending_record_per_included_item(
        self, session, hourly_employee, salaried_employee
    ):
        service = PayRunService(session)
        result = await service.submit_pay_run(
            submission(
                PayRunLineItem(
                    str(hourly_employee.id),
                    hours_worked=Decimal("40"),
                    holiday_hours=Decimal("8"),
                ),
                PayRunLineItem(str(salaried_employee.id), included=False),
            )
        )

        assert result.count == 1
        assert result.employee_ids == [str(hourly_employee.id)]
        assert result.totals.included_count == 1
        assert result.totals.excluded_count == 1

        records = (await session.execute(select(PayHistory))).scalars().all()
        assert len(records) == 1
        record = records[0]
        assert result.record_ids == [str(record.id)]
        assert record.status == "PENDING"
        assert record.hours_worked == Decimal("40")
        # 880 base + 4% vacation
        assert record.gross_pay == Decimal("915.20")
        assert record.net_pay == record.gross_pay
        assert record.total_deductions == Decimal("0")
        assert record.review_valid is True
        assert record.review_errors == []

    async def test_salaried_record_has_no_hours(self, session, salaried_employee):
        service = PayRunService(session)
        await service.submit_pay_run(
            submission(PayRunLineItem(str(salaried_employee.id), hours_worked=Decimal("80")))
        )
        record = (await session.execute(select(PayHistory))).scalar_one()
        assert record.hours_worked is None
        assert record.gross_pay == Decimal("2080.00")

    async def test_unknown_employee_writes_nothing(self, session, hourly_employee):
        service = PayRunService(session)
        items = [
            PayRunLineItem(str(hourly_employee.id), hours_worked=Decimal(h))
            for h in ("10", "20", "30", "40")
        ]
        items.insert(2, PayRunLineItem("424242", hours_worked=Decimal("8")))

        with pytest.raises(EmployeeNotFoundError):
            await service.submit_pay_run(submission(*items))

        assert await count_history(session) == 0

    async def test_period_order_validated(self, session, hourly_employee):
        service = PayRunService(session)
        bad = PayRunSubmission(
            period_start=date(2025, 7, 4),
            period_end=date(2025, 6, 23),
            pay_date=date(2025, 7, 11),
            items=[PayRunLineItem(str(hourly_employee.id))],
        )
        with pytest.raises(ValidationFailedError):
            await service.submit_pay_run(bad)

    async def test_preview_writes_nothing(self, session, hourly_employee):
        service = PayRunService(session)
        result = await service.preview_pay_run(
            [PayRunLineItem(str(hourly_employee.id), hours_worked=Decimal("40"), overtime_hours=Decimal("5"))]
        )
        assert result.totals.gross_pay == Decimal("988")
        assert await count_history(session) == 0


class TestUpdateStatus:
    """update_status."""

    async def submit_two(self, session, employee) -> list[str]:
        result = await PayRunService(session).submit_pay_run(
            submission(
                PayRunLineItem(str(employee.id), hours_worked=Decimal("10")),
                PayRunLineItem(str(employee.id), hours_worked=Decimal("20")),
            )
        )
        return result.record_ids

    async def test_moves_pending_to_processed(self, session, hourly_employee):
        ids = await self.submit_two(session, hourly_employee)
        service = PayRunService(session)

        assert await service.update_status(ids, "PROCESSED") == 2
        statuses = (await session.execute(select(PayHistory.status))).scalars().all()
        assert set(statuses) == {"PROCESSED"}

    async def test_unknown_id_returns_zero(self, session, hourly_employee):
        await self.submit_two(session, hourly_employee)
        service = PayRunService(session)
        assert await service.update_status(["999999"], "PROCESSED") == 0

    async def test_non_numeric_ids_skipped(self, session, hourly_employee):
        ids = await self.submit_two(session, hourly_employee)
        service = PayRunService(session)
        assert await service.update_status(["abc", ids[0]], "PROCESSED") == 1

    async def test_disallowed_transition_skipped(self, session, hourly_employee):
        ids = await self.submit_two(session, hourly_employee)
        service = PayRunService(session)

        # PENDING cannot jump to PAID
        assert await service.update_status(ids, "PAID") == 0
        assert await service.update_status(ids[:1], "PROCESSED") == 1
        assert await service.update_status(ids, "SENT") == 1

        rows = await session.execute(select(PayHistory.id, PayHistory.status))
        by_id = {str(row_id): status for row_id, status in rows}
        assert by_id == {ids[0]: "PAID", ids[1]: "PENDING"}

    async def test_blocked_records_are_reported(self, session, hourly_employee, caplog):
        ids = await self.submit_two(session, hourly_employee)
        service = PayRunService(session)
        await service.update_status(ids[:1], "PROCESSED")

        assert await service.blocked_ids(ids + ["999999"], "PAID") == [ids[1]]
        with caplog.at_level("WARNING"):
            assert await service.update_status(ids, "PAID") == 1
        assert f"cannot move to PAID: {ids[1]}" in caplog.text

    async def test_invalid_status_rejected(self, session, hourly_employee):
        ids = await self.submit_two(session, hourly_employee)
        with pytest.raises(ValidationFailedError):
            await PayRunService(session).update_status(ids, "VOID")


async def test_export_pending_includes_employee(session, hourly_employee):
    service = PayRunService(session)
    result = await service.submit_pay_run(
        submission(
            PayRunLineItem(str(hourly_employee.id), hours_worked=Decimal("10")),
            PayRunLineItem(str(hourly_employee.id), hours_worked=Decimal("20")),
        )
    )
    await service.update_status(result.record_ids[:1], "PROCESSED")

    records = await service.export_pending()
    assert [str(r.id) for r in records] == result.record_ids[1:]
    assert records[0].employee.email == "ada@example.com"

    assert await service.export_pending(ids=["0"]) == []
