"""Pay run API endpoints."""

from fastapi import APIRouter, status

from payroll_scheduler.api.dependencies import DbSession, Dispatcher
from payroll_scheduler.api.schemas import (
    DispatchResponse,
    ErrorResponse,
    PreviewRequest,
    PreviewResponse,
    PreviewRow,
    RunPayrollRequest,
    RunPayrollResponse,
    TotalsResponse,
    ValidationErrorResponse,
)
from payroll_scheduler.calculators.pay_engine import PayEngine
from payroll_scheduler.errors import PayrollError
from payroll_scheduler.services.dispatcher import UpstreamError
from payroll_scheduler.services.orchestrator import PayrollOrchestrator
from payroll_scheduler.services.pay_run_service import PayRunService

router = APIRouter(prefix="/pay-runs", tags=["pay-runs"])


def _dispatch_error_body(error: PayrollError) -> dict:
    body = {"code": error.code, "detail": error.message}
    if isinstance(error, UpstreamError):
        body["status"] = error.status_code
        body["upstream"] = error.body
    return body


@router.post(
    "/preview",
    response_model=PreviewResponse,
    responses={400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def preview_pay_run(db: DbSession, payload: PreviewRequest) -> PreviewResponse:
    """Compute pay for each row without writing anything."""
    result = await PayRunService(db).preview_pay_run(
        [item.to_line_item() for item in payload.items]
    )
    rows = [
        PreviewRow(
            employee_id=row.employee_id,
            included=row.included,
            pay_type=row.pay_type.value,
            base_pay=PayEngine.round_to_cents(row.breakdown.base_pay),
            vacation_pay=PayEngine.round_to_cents(row.breakdown.vacation_pay),
            gross_pay=PayEngine.round_to_cents(row.breakdown.gross_pay),
        )
        for row in result.rows
    ]
    return PreviewResponse(rows=rows, totals=TotalsResponse.from_totals(result.totals))


@router.post(
    "/run",
    response_model=RunPayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def run_payroll(
    db: DbSession,
    dispatcher: Dispatcher,
    payload: RunPayrollRequest,
) -> RunPayrollResponse:
    """Persist a run, then schedule its paystubs.

    The run stays committed when scheduling fails; the failure is reported
    in ``dispatch_error`` and can be retried via ``/payroll/update-status``.
    """
    orchestrator = PayrollOrchestrator(db, dispatcher)
    outcome = await orchestrator.submit_and_schedule(
        payload.to_submission(), payload.to_schedule()
    )
    return RunPayrollResponse(
        count=outcome.submitted.count,
        ids=outcome.submitted.record_ids,
        totals=TotalsResponse.from_totals(outcome.submitted.totals),
        dispatch=(
            DispatchResponse(**outcome.dispatch.to_dict())
            if outcome.dispatch is not None
            else None
        ),
        dispatch_error=(
            _dispatch_error_body(outcome.dispatch_error)
            if outcome.dispatch_error is not None
            else None
        ),
    )
