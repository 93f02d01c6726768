"""Payroll orchestrator - composes persistence and schedule dispatch."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from payroll_scheduler.errors import ConfigurationError, ValidationFailedError
from payroll_scheduler.services.dispatcher import (
    DispatchResult,
    ScheduleDispatcher,
    ScheduleRequest,
    UpstreamError,
)
from payroll_scheduler.services.pay_run_service import (
    PayRunService,
    PayRunSubmission,
    SubmitResult,
)

logger = logging.getLogger(__name__)


@dataclass
class ScheduleOrUpdateCommand:
    """Either a schedule to dispatch or ids + status to update."""

    schedule: ScheduleRequest | None = None
    ids: list[str | int] = field(default_factory=list)
    status: str | None = None


@dataclass(frozen=True)
class StatusUpdateResult:
    updated: int

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "stage": "update", "updated": self.updated}


@dataclass
class RunOutcome:
    """Result of submitting a run and then scheduling its paystubs.

    The run is committed even when ``dispatch_error`` is set.
    """

    submitted: SubmitResult
    dispatch: DispatchResult | None = None
    dispatch_error: UpstreamError | ConfigurationError | None = None

    @property
    def dispatched(self) -> bool:
        return self.dispatch is not None


class PayrollOrchestrator:
    """Runs the payroll pipeline as independent steps.

    Persisting a run and notifying the workflow are separate operations: the
    run commits first, then the dispatch is attempted. A dispatch failure is
    reported, not rolled back into the run, and can be retried on its own
    through ``schedule_or_update``.
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: ScheduleDispatcher | None,
        commit: Callable[[], Awaitable[None]] | None = None,
    ):
        self.session = session
        self.dispatcher = dispatcher
        self.pay_runs = PayRunService(session)
        self._commit = commit or session.commit

    def require_dispatcher(self) -> ScheduleDispatcher:
        if self.dispatcher is None:
            raise ConfigurationError(
                "Schedule dispatch is not configured (set WORKFLOW_WEBHOOK_URL)"
            )
        return self.dispatcher

    async def schedule_or_update(
        self, command: ScheduleOrUpdateCommand
    ) -> DispatchResult | StatusUpdateResult:
        """Dispatch when a schedule is given, otherwise update statuses."""
        if command.schedule is not None:
            return await self.require_dispatcher().dispatch(command.schedule)

        if not command.ids or not command.status:
            raise ValidationFailedError(
                "Either schedule or ids and status are required",
                [{"field": "schedule", "message": "schedule or ids+status required"}],
            )
        updated = await self.pay_runs.update_status(command.ids, command.status)
        return StatusUpdateResult(updated=updated)

    async def submit_and_schedule(
        self,
        submission: PayRunSubmission,
        schedule: ScheduleRequest | None = None,
    ) -> RunOutcome:
        """Persist a run, commit it, then dispatch its schedule if given.

        When the schedule has no employee ids, the run's included employees
        are used. An unusable send time or timezone is rejected before the
        run is written.
        """
        if schedule is not None and self.dispatcher is not None:
            self.dispatcher.send_instant(schedule)

        submitted = await self.pay_runs.submit_pay_run(submission)
        await self._commit()
        outcome = RunOutcome(submitted=submitted)

        if schedule is None:
            return outcome
        if not schedule.employee_ids:
            schedule.employee_ids = list(submitted.employee_ids)

        try:
            outcome.dispatch = await self.require_dispatcher().dispatch(schedule)
        except (UpstreamError, ConfigurationError) as e:
            logger.warning(
                "Pay run with %d record(s) committed but dispatch failed: %s",
                submitted.count,
                e,
            )
            outcome.dispatch_error = e
        return outcome
