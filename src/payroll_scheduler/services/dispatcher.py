"""Schedule dispatcher for paystub notifications.

Turns a batch "run payroll" request into one POST to the external workflow
endpoint, which sends paystubs at the resolved instant.

Send time resolution:
- no ``send_at``: default send time (09:00) local on the pay date
- bare date: default send time local on that date
- full date-time: that instant (naive values are wall-clock in the zone)

Local wall-clock times are converted with the zone's real offset rules on
that date, so DST is handled.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from payroll_scheduler.config import DEFAULT_SEND_TIME, DispatchConfig
from payroll_scheduler.errors import PayrollError, ValidationFailedError

logger = logging.getLogger(__name__)

_BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ScheduleValidationError(ValidationFailedError):
    """Raised for an unusable send time, date or timezone."""

    code = "SCHEDULE_INVALID"


class UpstreamError(PayrollError):
    """The workflow endpoint failed, timed out or was unreachable.

    ``status_code`` is None when no HTTP response was received.
    """

    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message, {"status": status_code, "body": body})


def load_zone(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ScheduleValidationError.for_field(
            "timezone", f"Unknown timezone '{tz}'"
        ) from None


def local_to_utc(day: date, at: time, tz: str) -> datetime:
    """Convert a wall-clock date and time in ``tz`` to an aware UTC datetime."""
    local = datetime.combine(day, at, tzinfo=load_zone(tz))
    return local.astimezone(timezone.utc)


def _parse_date(value: date | str, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ScheduleValidationError.for_field(
            field_name, f"{field_name} must be a YYYY-MM-DD date (got '{value}')"
        ) from None


def resolve_dispatch_instant(
    pay_date: date | str,
    send_at: datetime | date | str | None,
    tz: str,
    default_time: time = DEFAULT_SEND_TIME,
) -> datetime:
    """Resolve the absolute UTC instant at which paystubs should be sent."""
    if send_at is None or (isinstance(send_at, str) and not send_at.strip()):
        return local_to_utc(_parse_date(pay_date, "pay_date"), default_time, tz)

    if isinstance(send_at, datetime):
        instant = send_at
    elif isinstance(send_at, date):
        return local_to_utc(send_at, default_time, tz)
    else:
        raw = send_at.strip()
        if _BARE_DATE.match(raw):
            return local_to_utc(_parse_date(raw, "send_at"), default_time, tz)
        try:
            instant = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            raise ScheduleValidationError.for_field(
                "send_at", f"send_at must be a date or ISO date-time (got '{send_at}')"
            ) from None

    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=load_zone(tz))
    return instant.astimezone(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    """ISO-8601 with a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class ScheduleRequest:
    """A request to schedule paystub delivery for a batch of employees."""

    employee_ids: list[str | int]
    pay_date: date | str
    period_start: date | str | None = None
    period_end: date | str | None = None
    send_at: datetime | date | str | None = None
    timezone: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedDispatch:
    """Canonical form of a schedule request, ready to send."""

    employee_ids: list[str]
    send_at_utc: datetime
    received_at: datetime
    source: str
    timezone: str


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of a successful dispatch."""

    resolved: ResolvedDispatch
    status_code: int
    upstream: Any

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "stage": "schedule",
            "send_at": isoformat_utc(self.resolved.send_at_utc),
            "employee_ids": self.resolved.employee_ids,
            "upstream": self.upstream,
        }


def _to_text(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _parse_body(response: httpx.Response) -> Any:
    text = response.text
    if not text:
        return {}
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}


class ScheduleDispatcher:
    """Sends scheduling requests to the external workflow endpoint.

    One POST per request, bounded by the configured timeout and never
    retried; the workflow service owns delivery retries.
    """

    def __init__(
        self,
        config: DispatchConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def send_instant(self, request: ScheduleRequest) -> datetime:
        """UTC send instant for a request; raises ScheduleValidationError."""
        return resolve_dispatch_instant(
            request.pay_date,
            request.send_at,
            request.timezone or self.config.default_timezone,
            self.config.default_send_time,
        )

    def resolve(self, request: ScheduleRequest) -> ResolvedDispatch:
        if not request.employee_ids:
            raise ScheduleValidationError.for_field(
                "employee_ids", "employee_ids must not be empty"
            )
        tz = request.timezone or self.config.default_timezone
        send_at_utc = self.send_instant(request)
        return ResolvedDispatch(
            # Ids can exceed the JSON safe-integer range
            employee_ids=[str(x) for x in request.employee_ids],
            send_at_utc=send_at_utc,
            received_at=self._clock(),
            source=self.config.source,
            timezone=tz,
        )

    def build_payload(
        self, request: ScheduleRequest, resolved: ResolvedDispatch
    ) -> dict[str, Any]:
        """Payload consumed by the workflow; key names are its contract."""
        return {
            "employeeIds": resolved.employee_ids,
            "payDate": _to_text(request.pay_date),
            "periodStart": _to_text(request.period_start),
            "periodEnd": _to_text(request.period_end),
            "sendAt": _to_text(request.send_at),
            "timezone": resolved.timezone,
            "meta": request.meta,
            "sendAtIso": isoformat_utc(resolved.send_at_utc),
            "receivedAt": isoformat_utc(resolved.received_at),
            "source": resolved.source,
        }

    async def dispatch(self, request: ScheduleRequest) -> DispatchResult:
        """Resolve and POST a schedule request.

        Raises:
            ScheduleValidationError: bad date, send time or timezone.
            UpstreamError: non-2xx response, timeout or connection failure.
        """
        resolved = self.resolve(request)
        payload = self.build_payload(request, resolved)
        logger.info(
            "Dispatching schedule for %d employee(s) at %s",
            len(resolved.employee_ids),
            payload["sendAtIso"],
        )

        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=self.config.timeout_seconds,
            ) as client:
                response = await client.post(
                    self.config.webhook_url,
                    json=payload,
                    headers=self.config.headers(),
                )
        except httpx.TimeoutException as e:
            logger.warning("Workflow endpoint timed out after %ss", self.config.timeout_seconds)
            raise UpstreamError("Workflow endpoint timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Workflow endpoint unreachable: %s", e)
            raise UpstreamError(f"Workflow endpoint unreachable: {e}") from e

        body = _parse_body(response)
        logger.info("Workflow endpoint responded %s", response.status_code)
        if not response.is_success:
            raise UpstreamError(
                f"Workflow endpoint returned {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return DispatchResult(resolved=resolved, status_code=response.status_code, upstream=body)
