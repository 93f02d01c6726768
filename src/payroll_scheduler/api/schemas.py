"""Pydantic schemas for API request/response models.

Identifiers are always serialized as strings; they are 64-bit integers and
can exceed the safe-integer range of JSON clients.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from payroll_scheduler.calculators.pay_engine import PayEngine
from payroll_scheduler.calculators.types import PayRunLineItem, PayRunTotals
from payroll_scheduler.services.dispatcher import ScheduleRequest
from payroll_scheduler.services.pay_run_service import PayRunSubmission

def _id_to_str(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


StrId = Annotated[str, BeforeValidator(_id_to_str)]

# ============================================================================
# Employee schemas
# ============================================================================

class EmployeeCreate(BaseModel):
    """Schema for creating an employee. Cross-field rules run in the service."""

    first_name: str
    last_name: str
    email: str
    sin: str
    employment_type: str = "FULL_TIME"
    hire_date: date | None = None
    pay_group: str = "BI_WEEKLY"
    pay_type: str
    hourly_rate: Decimal | None = None
    salary: Decimal | None = None
    vacation_pay_percent: Decimal = Decimal("4")
    payment_method: str = "CHEQUE"
    bank_name: str | None = None
    bank_account: str | None = None
    transit_number: str | None = None
    institution_number: str | None = None

class EmployeeCreated(BaseModel):
    ok: bool = True
    id: StrId

class EmployeeSummary(BaseModel):
    """Employee fields safe for list views (no SIN, no bank details)."""

    model_config = ConfigDict(from_attributes=True)

    id: StrId
    first_name: str
    last_name: str
    email: str
    employment_type: str
    pay_type: str
    pay_group: str
    hourly_rate: Decimal | None = None
    salary: Decimal | None = None
    vacation_pay_percent: Decimal
    created_at: datetime | None = None

# ============================================================================
# Pay run schemas
# ============================================================================

class PayRunItem(BaseModel):
    """One employee's hours for a run. ``hours_worked`` is null for salaried staff."""

    employee_id: StrId
    hours_worked: Decimal | None = Field(default=None, ge=0)
    overtime: Decimal = Field(default=Decimal("0"), ge=0)
    holiday_hours: Decimal = Field(default=Decimal("0"), ge=0)
    include_vacation: bool = True
    included: bool = True

    @model_validator(mode="after")
    def holiday_within_hours(self) -> "PayRunItem":
        if self.hours_worked is not None and self.holiday_hours > self.hours_worked:
            raise ValueError("holiday_hours must not exceed hours_worked")
        return self

    def to_line_item(self) -> PayRunLineItem:
        return PayRunLineItem(
            employee_id=self.employee_id,
            included=self.included,
            hours_worked=self.hours_worked,
            overtime_hours=self.overtime,
            holiday_hours=self.holiday_hours,
            include_vacation=self.include_vacation,
        )

class PayRunSubmit(BaseModel):
    """Schema for submitting a payroll run."""

    period_start: date
    period_end: date
    pay_date: date
    items: list[PayRunItem] = Field(min_length=1)

    def to_submission(self) -> PayRunSubmission:
        return PayRunSubmission(
            period_start=self.period_start,
            period_end=self.period_end,
            pay_date=self.pay_date,
            items=[item.to_line_item() for item in self.items],
        )

class TotalsResponse(BaseModel):
    base_pay: Decimal
    vacation_pay: Decimal
    gross_pay: Decimal
    included_count: int
    excluded_count: int

    @classmethod
    def from_totals(cls, totals: PayRunTotals) -> "TotalsResponse":
        return cls(
            base_pay=PayEngine.round_to_cents(totals.base_pay),
            vacation_pay=PayEngine.round_to_cents(totals.vacation_pay),
            gross_pay=PayEngine.round_to_cents(totals.gross_pay),
            included_count=totals.included_count,
            excluded_count=totals.excluded_count,
        )

class PayRunSubmitResponse(BaseModel):
    ok: bool = True
    count: int
    ids: list[str]
    totals: TotalsResponse

class PreviewRow(BaseModel):
    employee_id: StrId
    included: bool
    pay_type: str
    base_pay: Decimal
    vacation_pay: Decimal
    gross_pay: Decimal

class PreviewRequest(BaseModel):
    items: list[PayRunItem] = Field(min_length=1)

class PreviewResponse(BaseModel):
    rows: list[PreviewRow]
    totals: TotalsResponse

# ============================================================================
# Status / schedule schemas
# ============================================================================

class StatusUpdateRequest(BaseModel):
    ids: list[StrId] = Field(min_length=1)
    status: str

class StatusUpdateResponse(BaseModel):
    ok: bool = True
    updated: int

class ScheduleIn(BaseModel):
    """Schedule payload for the workflow dispatcher."""

    employee_ids: list[StrId] = Field(min_length=1)
    pay_date: date
    period_start: date | None = None
    period_end: date | None = None
    send_at: str | None = None
    timezone: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    def to_request(self) -> ScheduleRequest:
        return ScheduleRequest(
            employee_ids=list(self.employee_ids),
            pay_date=self.pay_date,
            period_start=self.period_start,
            period_end=self.period_end,
            send_at=self.send_at,
            timezone=self.timezone,
            meta=dict(self.meta),
        )

_SCHEDULE_FIELDS = (
    "employee_ids",
    "pay_date",
    "period_start",
    "period_end",
    "send_at",
    "timezone",
    "meta",
)

class ScheduleOrUpdateRequest(BaseModel):
    """Either ``schedule`` (dispatch) or ``ids`` + ``status`` (update).

    The flat form, with ``employee_ids`` and ``pay_date`` at the top level, is
    lifted into ``schedule``.
    """

    schedule: ScheduleIn | None = None
    ids: list[StrId] = Field(default_factory=list)
    status: str | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_flat_schedule(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and data.get("schedule") is None
            and data.get("employee_ids")
            and data.get("pay_date")
        ):
            data = dict(data)
            data["schedule"] = {k: data.pop(k) for k in _SCHEDULE_FIELDS if k in data}
        return data

class RunSchedule(BaseModel):
    """Schedule options for a run; ids and pay date default to the run's."""

    employee_ids: list[StrId] = Field(default_factory=list)
    send_at: str | None = None
    timezone: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

class RunPayrollRequest(PayRunSubmit):
    schedule: RunSchedule | None = None

    def to_schedule(self) -> ScheduleRequest | None:
        if self.schedule is None:
            return None
        return ScheduleRequest(
            employee_ids=list(self.schedule.employee_ids),
            pay_date=self.pay_date,
            period_start=self.period_start,
            period_end=self.period_end,
            send_at=self.schedule.send_at,
            timezone=self.schedule.timezone,
            meta=dict(self.schedule.meta),
        )

class DispatchResponse(BaseModel):
    ok: bool = True
    stage: str = "schedule"
    send_at: str
    employee_ids: list[str]
    upstream: Any = None

class RunPayrollResponse(BaseModel):
    ok: bool = True
    count: int
    ids: list[str]
    totals: TotalsResponse
    dispatch: DispatchResponse | None = None
    dispatch_error: dict[str, Any] | None = None

# ============================================================================
# Export schemas
# ============================================================================

class PayHistoryExport(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: StrId
    employee_id: StrId
    pay_date: date
    period_start: date | None = None
    period_end: date | None = None
    hours_worked: Decimal | None = None
    gross_pay: Decimal
    ded_cpp: Decimal
    ded_ei: Decimal
    ded_income_tax: Decimal
    ded_eht: Decimal
    ded_wsib: Decimal
    net_pay: Decimal
    status: str
    review_valid: bool
    review_errors: list[Any] = Field(default_factory=list)
    review_warnings: list[Any] = Field(default_factory=list)
    created_at: datetime | None = None
    employee: EmployeeSummary

# ============================================================================
# Holiday schemas
# ============================================================================

class HolidayResponse(BaseModel):
    id: str
    name: str
    date: date

# ============================================================================
# Error schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None

class ValidationErrorResponse(BaseModel):
    """Schema for validation error response."""

    detail: str
    code: str | None = None
    issues: list[dict[str, Any]]
