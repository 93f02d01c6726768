"""Employee service - creation, listing and pay profile lookup."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_scheduler.calculators.types import EmployeePayProfile, PayGroup, PayType
from payroll_scheduler.errors import ValidationFailedError
from payroll_scheduler.models import Employee

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("CHEQUE", "DIRECT_DEPOSIT")
EMPLOYMENT_TYPES = ("FULL_TIME", "PART_TIME", "CONTRACTOR")
BANK_FIELDS = ("bank_name", "bank_account", "transit_number", "institution_number")
_SIN = re.compile(r"^\d{9}$")


class EmployeeValidationError(ValidationFailedError):
    """Raised when employee input fails field-level validation."""

    code = "EMPLOYEE_INVALID"


def _decimal_or_none(value: Any, field: str, issues: list[dict[str, str]]) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        issues.append({"field": field, "message": f"{field} must be a number"})
        return None
    if not result.is_finite():
        issues.append({"field": field, "message": f"{field} must be a number"})
        return None
    return result


def validate_employee(data: dict[str, Any]) -> dict[str, Any]:
    """Validate and normalize employee input.

    Returns the cleaned data. Raises EmployeeValidationError listing every
    problem found, one entry per field.
    """
    issues: list[dict[str, str]] = []
    clean = dict(data)

    for name in ("first_name", "last_name", "email"):
        value = str(clean.get(name) or "").strip()
        if not value:
            issues.append({"field": name, "message": f"{name} is required"})
        clean[name] = value

    sin = str(clean.get("sin") or "").strip()
    if not _SIN.match(sin):
        issues.append({"field": "sin", "message": "SIN must be 9 digits"})
    clean["sin"] = sin

    pay_type = str(clean.get("pay_type") or "").upper()
    if pay_type not in (PayType.HOURLY.value, PayType.SALARY.value):
        issues.append({"field": "pay_type", "message": "pay_type must be HOURLY or SALARY"})
    clean["pay_type"] = pay_type

    pay_group = str(clean.get("pay_group") or PayGroup.BI_WEEKLY.value).upper()
    if pay_group not in (PayGroup.BI_WEEKLY.value, PayGroup.MONTHLY.value):
        issues.append({"field": "pay_group", "message": "pay_group must be BI_WEEKLY or MONTHLY"})
    clean["pay_group"] = pay_group

    employment_type = str(clean.get("employment_type") or "FULL_TIME").upper()
    if employment_type not in EMPLOYMENT_TYPES:
        issues.append({
            "field": "employment_type",
            "message": f"employment_type must be one of {', '.join(EMPLOYMENT_TYPES)}",
        })
    clean["employment_type"] = employment_type

    hourly_rate = _decimal_or_none(clean.get("hourly_rate"), "hourly_rate", issues)
    salary = _decimal_or_none(clean.get("salary"), "salary", issues)
    vacation = _decimal_or_none(clean.get("vacation_pay_percent"), "vacation_pay_percent", issues)

    if pay_type == PayType.HOURLY.value:
        if hourly_rate is None:
            issues.append({"field": "hourly_rate", "message": "hourly_rate required for HOURLY"})
        if salary is not None:
            issues.append({"field": "salary", "message": "salary must be empty for HOURLY"})
    elif pay_type == PayType.SALARY.value:
        if salary is None:
            issues.append({"field": "salary", "message": "salary required for SALARY"})
        if hourly_rate is not None:
            issues.append({"field": "hourly_rate", "message": "hourly_rate must be empty for SALARY"})

    for name, value in (("hourly_rate", hourly_rate), ("salary", salary)):
        if value is not None and value <= 0:
            issues.append({"field": name, "message": f"{name} must be greater than 0"})
    if vacation is not None and not Decimal("0") <= vacation <= Decimal("100"):
        issues.append({
            "field": "vacation_pay_percent",
            "message": "vacation_pay_percent must be between 0 and 100",
        })

    clean["hourly_rate"] = hourly_rate
    clean["salary"] = salary
    clean["vacation_pay_percent"] = vacation if vacation is not None else Decimal("4")

    payment_method = str(clean.get("payment_method") or "CHEQUE").upper()
    if payment_method not in PAYMENT_METHODS:
        issues.append({
            "field": "payment_method",
            "message": "payment_method must be CHEQUE or DIRECT_DEPOSIT",
        })
    clean["payment_method"] = payment_method
    for name in BANK_FIELDS:
        clean[name] = str(clean.get(name) or "").strip() or None
        if payment_method == "DIRECT_DEPOSIT" and not clean[name]:
            issues.append({"field": name, "message": f"{name} required for DIRECT_DEPOSIT"})

    if issues:
        raise EmployeeValidationError("Validation failed", issues)
    return clean


class EmployeeNotifier:
    """Fire-and-forget ``employee.created`` webhook.

    Failures are logged and dropped; employee creation never depends on them.
    """

    def __init__(
        self,
        url: str | None,
        secret: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float = 5.0,
    ):
        self.url = url
        self.secret = secret
        self._transport = transport
        self.timeout_seconds = timeout_seconds

    async def employee_created(self, employee: Employee) -> bool:
        if not self.url:
            return False
        # No SIN or bank details leave the system here
        payload = {
            "event": "employee.created",
            "employeeId": str(employee.id),
            "email": employee.email,
            "payType": employee.pay_type,
            "payGroup": employee.pay_group,
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout_seconds
            ) as client:
                response = await client.post(
                    self.url,
                    json=payload,
                    headers={"x-webhook-secret": self.secret or ""},
                )
            if not response.is_success:
                logger.warning(
                    "employee.created webhook returned %s for employee %s",
                    response.status_code,
                    employee.id,
                )
                return False
        except httpx.HTTPError as e:
            logger.warning("employee.created webhook failed for employee %s: %s", employee.id, e)
            return False
        return True


class EmployeeService:
    """Service for employee records."""

    def __init__(self, session: AsyncSession, notifier: EmployeeNotifier | None = None):
        self.session = session
        self.notifier = notifier

    async def create_employee(self, data: dict[str, Any]) -> Employee:
        """Validate and persist a new employee."""
        clean = validate_employee(data)
        employee = Employee(
            first_name=clean["first_name"],
            last_name=clean["last_name"],
            email=clean["email"],
            sin=clean["sin"],
            employment_type=clean["employment_type"],
            hire_date=clean.get("hire_date"),
            pay_group=clean["pay_group"],
            pay_type=clean["pay_type"],
            hourly_rate=clean["hourly_rate"],
            salary=clean["salary"],
            vacation_pay_percent=clean["vacation_pay_percent"],
            payment_method=clean["payment_method"],
            bank_name=clean["bank_name"],
            bank_account=clean["bank_account"],
            transit_number=clean["transit_number"],
            institution_number=clean["institution_number"],
        )
        self.session.add(employee)
        await self.session.flush()
        logger.info("Created employee %s (%s)", employee.id, employee.pay_type)
        return employee

    async def notify_created(self, employee: Employee) -> None:
        """Send the best-effort creation webhook, if configured."""
        if self.notifier is not None:
            await self.notifier.employee_created(employee)

    async def list_employees(self) -> list[Employee]:
        """All employees, newest first."""
        result = await self.session.execute(
            select(Employee).order_by(Employee.created_at.desc(), Employee.id.desc())
        )
        return list(result.scalars().all())

    async def get_employees(self, ids: Iterable[str | int]) -> dict[str, Employee]:
        """Load employees by id, keyed by string id. Unknown ids are absent."""
        numeric = {int(i) for i in parse_ids(ids)}
        if not numeric:
            return {}
        result = await self.session.execute(select(Employee).where(Employee.id.in_(numeric)))
        return {str(e.id): e for e in result.scalars().all()}

    async def get_pay_profiles(self, ids: Iterable[str | int]) -> dict[str, EmployeePayProfile]:
        employees = await self.get_employees(ids)
        return {key: emp.pay_profile() for key, emp in employees.items()}


_ID_MIN, _ID_MAX = -(2**63), 2**63 - 1


def parse_ids(ids: Iterable[str | int]) -> list[int]:
    """Parse stringified integer ids, skipping values that cannot be ids.

    Values outside the BIGINT range cannot match a stored row.
    """
    parsed: list[int] = []
    for raw in ids:
        try:
            value = int(str(raw).strip())
        except ValueError:
            continue
        if _ID_MIN <= value <= _ID_MAX:
            parsed.append(value)
    return parsed
