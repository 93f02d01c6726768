"""Pay history API endpoints."""

from fastapi import APIRouter, status

from payroll_scheduler.api.dependencies import DbSession, UpdateToken
from payroll_scheduler.api.schemas import (
    ErrorResponse,
    PayRunSubmit,
    PayRunSubmitResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    TotalsResponse,
    ValidationErrorResponse,
)
from payroll_scheduler.services.pay_run_service import PayRunService

router = APIRouter(prefix="/pay-history", tags=["pay-history"])


@router.post(
    "",
    response_model=PayRunSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse}, 404: {"model": ErrorResponse}},
)
async def submit_pay_run(db: DbSession, payload: PayRunSubmit) -> PayRunSubmitResponse:
    """Persist one PENDING record per included item, all or nothing."""
    result = await PayRunService(db).submit_pay_run(payload.to_submission())
    await db.commit()
    return PayRunSubmitResponse(
        count=result.count,
        ids=result.record_ids,
        totals=TotalsResponse.from_totals(result.totals),
    )


@router.patch(
    "",
    response_model=StatusUpdateResponse,
    dependencies=[UpdateToken],
    responses={400: {"model": ValidationErrorResponse}, 401: {"model": ErrorResponse}},
)
async def update_pay_history_status(
    db: DbSession, payload: StatusUpdateRequest
) -> StatusUpdateResponse:
    """Move records to a new status; returns how many changed."""
    updated = await PayRunService(db).update_status(payload.ids, payload.status)
    await db.commit()
    return StatusUpdateResponse(updated=updated)
