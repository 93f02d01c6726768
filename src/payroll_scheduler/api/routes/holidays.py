"""Statutory holiday endpoints."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Path, Query

from payroll_scheduler.api.schemas import ErrorResponse, HolidayResponse
from payroll_scheduler.calculators.holidays import DEFAULT_JURISDICTION, get_calendar
from payroll_scheduler.errors import ValidationFailedError

router = APIRouter(prefix="/holidays", tags=["holidays"])

Jurisdiction = Annotated[str, Query(min_length=2, max_length=8)]


@router.get(
    "/{year}",
    response_model=list[HolidayResponse],
    responses={404: {"model": ErrorResponse}},
)
async def holidays_for_year(
    year: Annotated[int, Path(ge=1583, le=9999)],
    jurisdiction: Jurisdiction = DEFAULT_JURISDICTION,
) -> list[HolidayResponse]:
    """All statutory holidays in a year, in date order."""
    calendar = get_calendar(jurisdiction)
    return [HolidayResponse(**h.to_dict()) for h in calendar.holidays_for_year(year)]


@router.get(
    "",
    response_model=list[HolidayResponse],
    responses={404: {"model": ErrorResponse}},
)
async def holidays_in_range(
    start: date,
    end: date,
    jurisdiction: Jurisdiction = DEFAULT_JURISDICTION,
) -> list[HolidayResponse]:
    """Holidays between ``start`` and ``end`` inclusive."""
    if (end - start).days > 366 * 10:
        raise ValidationFailedError.for_field("end", "Range must not exceed ten years")
    calendar = get_calendar(jurisdiction)
    return [HolidayResponse(**h.to_dict()) for h in calendar.holidays_in_range(start, end)]
