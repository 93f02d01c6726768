"""Payroll workflow endpoints: schedule/update and export."""

from typing import Annotated, Any

from fastapi import APIRouter, Query

from payroll_scheduler.api.dependencies import DbSession, Dispatcher, UpdateToken
from payroll_scheduler.api.schemas import (
    ErrorResponse,
    PayHistoryExport,
    ScheduleOrUpdateRequest,
    ValidationErrorResponse,
)
from payroll_scheduler.services.orchestrator import (
    PayrollOrchestrator,
    ScheduleOrUpdateCommand,
    StatusUpdateResult,
)
from payroll_scheduler.services.pay_run_service import PayRunService

router = APIRouter(prefix="/payroll", tags=["payroll"])


@router.post(
    "/update-status",
    dependencies=[UpdateToken],
    responses={
        400: {"model": ValidationErrorResponse},
        401: {"model": ErrorResponse},
        502: {"description": "Workflow endpoint failed"},
        503: {"model": ErrorResponse},
    },
)
async def schedule_or_update(
    db: DbSession,
    dispatcher: Dispatcher,
    payload: ScheduleOrUpdateRequest,
) -> dict[str, Any]:
    """Schedule paystub delivery, or move pay history records to a status.

    With ``schedule`` the request is forwarded to the workflow endpoint;
    otherwise ``ids`` and ``status`` are required.
    """
    command = ScheduleOrUpdateCommand(
        schedule=payload.schedule.to_request() if payload.schedule else None,
        ids=list(payload.ids),
        status=payload.status,
    )
    result = await PayrollOrchestrator(db, dispatcher).schedule_or_update(command)
    if isinstance(result, StatusUpdateResult):
        await db.commit()
    return result.to_dict()


@router.get("/export", response_model=list[PayHistoryExport])
async def export_pending(
    db: DbSession,
    ids: Annotated[list[str] | None, Query()] = None,
) -> list[PayHistoryExport]:
    """PENDING pay history with employee details, for the payout workflow."""
    records = await PayRunService(db).export_pending(ids)
    return [PayHistoryExport.model_validate(r) for r in records]
