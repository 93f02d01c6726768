"""Statutory holiday calendar.

A calendar is built from declarative rules so other jurisdictions can be
added as a new rule tuple. Ontario is the default rule set:

- New Year's Day (Jan 1), Canada Day (Jul 1, no weekend shift),
  Christmas (Dec 25), Boxing Day (Dec 26)
- Family Day: 3rd Monday of February
- Good Friday: 2 days before Easter Sunday
- Victoria Day: Monday strictly before May 25
- Labour Day: 1st Monday of September
- Thanksgiving: 2nd Monday of October
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol

from payroll_scheduler.errors import NotFoundError

MONDAY = 1
FRIDAY = 5


class UnknownJurisdictionError(NotFoundError):
    """Raised when no holiday rule set exists for a jurisdiction."""

    code = "UNKNOWN_JURISDICTION"


@dataclass(frozen=True, order=True)
class HolidayDate:
    """A holiday falling on a specific calendar date."""

    date: date
    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "date": self.date.isoformat()}


class HolidayRule(Protocol):
    """Computes the date of one holiday in a given year."""

    id: str
    name: str

    def date_in(self, year: int) -> date:
        ...


def easter_sunday(year: int) -> date:
    """Easter Sunday in the Gregorian calendar (Anonymous Gregorian / Meeus)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> date:
    """The ``nth`` occurrence of ISO ``weekday`` (Monday=1) in a month."""
    first = date(year, month, 1)
    offset = (weekday - first.isoweekday()) % 7
    return first + timedelta(days=offset + (nth - 1) * 7)


@dataclass(frozen=True)
class FixedDate:
    id: str
    name: str
    month: int
    day: int

    def date_in(self, year: int) -> date:
        return date(year, self.month, self.day)


@dataclass(frozen=True)
class NthWeekday:
    id: str
    name: str
    month: int
    weekday: int
    nth: int

    def date_in(self, year: int) -> date:
        return nth_weekday_of_month(year, self.month, self.weekday, self.nth)


@dataclass(frozen=True)
class WeekdayBefore:
    """The last ``weekday`` strictly before an anchor date."""

    id: str
    name: str
    month: int
    day: int
    weekday: int

    def date_in(self, year: int) -> date:
        anchor = date(year, self.month, self.day)
        back = (anchor.isoweekday() - self.weekday) % 7 or 7
        return anchor - timedelta(days=back)


@dataclass(frozen=True)
class EasterOffset:
    id: str
    name: str
    days: int

    def date_in(self, year: int) -> date:
        return easter_sunday(year) + timedelta(days=self.days)


ONTARIO_RULES: tuple[HolidayRule, ...] = (
    FixedDate("new_year", "New Year's Day", 1, 1),
    NthWeekday("family_day", "Family Day", 2, MONDAY, 3),
    EasterOffset("good_friday", "Good Friday", -2),
    WeekdayBefore("victoria_day", "Victoria Day", 5, 25, MONDAY),
    FixedDate("canada_day", "Canada Day", 7, 1),
    NthWeekday("labour_day", "Labour Day", 9, MONDAY, 1),
    NthWeekday("thanksgiving", "Thanksgiving", 10, MONDAY, 2),
    FixedDate("christmas", "Christmas Day", 12, 25),
    FixedDate("boxing_day", "Boxing Day", 12, 26),
)


class HolidayCalendar:
    """Answers holiday queries for one jurisdiction's rule set."""

    def __init__(self, rules: tuple[HolidayRule, ...], jurisdiction: str = ""):
        self.rules = tuple(rules)
        self.jurisdiction = jurisdiction

    def holidays_for_year(self, year: int) -> list[HolidayDate]:
        """All holidays in ``year``, ordered by date."""
        return sorted(
            HolidayDate(date=rule.date_in(year), id=rule.id, name=rule.name)
            for rule in self.rules
        )

    def holidays_in_range(self, start: date, end: date) -> list[HolidayDate]:
        """Holidays between ``start`` and ``end``, both inclusive."""
        result: list[HolidayDate] = []
        for year in range(start.year, end.year + 1):
            result.extend(
                h for h in self.holidays_for_year(year) if start <= h.date <= end
            )
        return result

    def holiday_on_date(self, day: date) -> HolidayDate | None:
        for holiday in self.holidays_for_year(day.year):
            if holiday.date == day:
                return holiday
        return None

    def holiday_on_ymd(self, value: str | None) -> HolidayDate | None:
        """Look up a ``YYYY-MM-DD`` string; blank or malformed input gives None."""
        if not value:
            return None
        try:
            day = date.fromisoformat(value.strip())
        except ValueError:
            return None
        return self.holiday_on_date(day)


_RULE_SETS: dict[str, tuple[HolidayRule, ...]] = {
    "ON": ONTARIO_RULES,
}

DEFAULT_JURISDICTION = "ON"


def get_calendar(jurisdiction: str = DEFAULT_JURISDICTION) -> HolidayCalendar:
    """Return the holiday calendar for a jurisdiction code."""
    code = jurisdiction.upper()
    rules = _RULE_SETS.get(code)
    if rules is None:
        raise UnknownJurisdictionError(
            f"No holiday rules for jurisdiction '{jurisdiction}'",
            {"jurisdiction": jurisdiction, "supported": sorted(_RULE_SETS)},
        )
    return HolidayCalendar(rules, jurisdiction=code)
