"""Tests for employee validation, persistence and notification."""

import json
from decimal import Decimal

import httpx
import pytest

from payroll_scheduler.calculators.types import PayType
from payroll_scheduler.services.employee_service import (
    EmployeeNotifier,
    EmployeeService,
    EmployeeValidationError,
    parse_ids,
    validate_employee,
)


def employee_data(**overrides) -> dict:
    data = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": "grace@example.com",
        "sin": "046454286",
        "pay_type": "HOURLY",
        "hourly_rate": "25.50",
        "payment_method": "CHEQUE",
    }
    data.update(overrides)
    return data


def issue_fields(exc: EmployeeValidationError) -> set[str]:
    return {i["field"] for i in exc.issues}


class TestValidateEmployee:
    """Field-level validation."""

    def test_valid_hourly(self):
        clean = validate_employee(employee_data())
        assert clean["hourly_rate"] == Decimal("25.50")
        assert clean["salary"] is None
        assert clean["vacation_pay_percent"] == Decimal("4")
        assert clean["pay_group"] == "BI_WEEKLY"

    def test_hourly_requires_rate_and_no_salary(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(hourly_rate=None, salary="50000"))
        assert issue_fields(exc_info.value) == {"hourly_rate", "salary"}

    def test_salary_requires_salary(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(pay_type="SALARY"))
        assert issue_fields(exc_info.value) == {"salary", "hourly_rate"}

    def test_rate_must_be_positive(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(hourly_rate="0"))
        assert issue_fields(exc_info.value) == {"hourly_rate"}

    def test_sin_must_be_nine_digits(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(sin="12345"))
        assert issue_fields(exc_info.value) == {"sin"}

    def test_direct_deposit_requires_bank_fields(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(payment_method="DIRECT_DEPOSIT", bank_name="RBC"))
        assert issue_fields(exc_info.value) == {
            "bank_account",
            "transit_number",
            "institution_number",
        }

    def test_direct_deposit_complete(self):
        clean = validate_employee(
            employee_data(
                payment_method="direct_deposit",
                bank_name="RBC",
                bank_account="1234567",
                transit_number="12345",
                institution_number="003",
            )
        )
        assert clean["payment_method"] == "DIRECT_DEPOSIT"

    def test_collects_every_issue(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee({"pay_type": "WEEKLY"})
        assert {"first_name", "last_name", "email", "sin", "pay_type"} <= issue_fields(
            exc_info.value
        )

    def test_vacation_range(self):
        with pytest.raises(EmployeeValidationError) as exc_info:
            validate_employee(employee_data(vacation_pay_percent="150"))
        assert issue_fields(exc_info.value) == {"vacation_pay_percent"}


class TestEmployeeService:
    """Persistence."""

    async def test_create_and_list(self, session):
        service = EmployeeService(session)
        first = await service.create_employee(employee_data())
        second = await service.create_employee(
            employee_data(
                first_name="Alan",
                email="alan@example.com",
                pay_type="SALARY",
                hourly_rate=None,
                salary="72000",
            )
        )

        employees = await service.list_employees()
        assert [e.id for e in employees] == [second.id, first.id]

    async def test_pay_profiles_keyed_by_string_id(self, session, hourly_employee):
        profiles = await EmployeeService(session).get_pay_profiles(
            [str(hourly_employee.id), "999999", "not-an-id"]
        )
        assert list(profiles) == [str(hourly_employee.id)]
        assert profiles[str(hourly_employee.id)].pay_type == PayType.HOURLY


class TestEmployeeNotifier:
    """Best-effort creation webhook."""

    async def test_sends_without_sensitive_fields(self, session):
        sent: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return httpx.Response(204)

        notifier = EmployeeNotifier(
            "https://hooks.test/employee", "hook-secret", transport=httpx.MockTransport(handler)
        )
        service = EmployeeService(session, notifier)
        employee = await service.create_employee(employee_data())
        await service.notify_created(employee)

        assert len(sent) == 1
        assert sent[0].headers["x-webhook-secret"] == "hook-secret"
        body = json.loads(sent[0].content)
        assert body["event"] == "employee.created"
        assert body["employeeId"] == str(employee.id)
        assert "sin" not in body

    async def test_failure_is_logged_not_raised(self, session, caplog):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down")

        notifier = EmployeeNotifier(
            "https://hooks.test/employee", transport=httpx.MockTransport(handler)
        )
        employee = await EmployeeService(session).create_employee(employee_data())

        assert await notifier.employee_created(employee) is False
        assert "employee.created webhook failed" in caplog.text

    async def test_no_url_is_noop(self, session, hourly_employee):
        assert await EmployeeNotifier(None).employee_created(hourly_employee) is False


def test_parse_ids():
    assert parse_ids(["1", 2, " 3 ", "x", ""]) == [1, 2, 3]


def test_parse_ids_skips_values_outside_bigint():
    assert parse_ids([str(2**63), str(2**63 - 1), str(-(2**63) - 1)]) == [2**63 - 1]
