"""Tests for the statutory holiday calendar."""

from datetime import date

import pytest

from payroll_scheduler.calculators.holidays import (
    ONTARIO_RULES,
    EasterOffset,
    FixedDate,
    HolidayCalendar,
    NthWeekday,
    UnknownJurisdictionError,
    WeekdayBefore,
    easter_sunday,
    get_calendar,
    nth_weekday_of_month,
)


@pytest.fixture
def calendar() -> HolidayCalendar:
    return get_calendar("ON")


class TestEaster:
    """Easter Sunday computation."""

    @pytest.mark.parametrize(
        "year,expected",
        [
            (2019, date(2019, 4, 21)),
            (2024, date(2024, 3, 31)),
            (2025, date(2025, 4, 20)),
            (2038, date(2038, 4, 25)),
        ],
    )
    def test_known_dates(self, year, expected):
        assert easter_sunday(year) == expected

    def test_always_a_sunday(self):
        for year in range(1900, 2100):
            assert easter_sunday(year).isoweekday() == 7


class TestOntarioCalendar:
    """Ontario rule set."""

    def test_nine_holidays_every_year(self, calendar):
        for year in range(1990, 2060):
            holidays = calendar.holidays_for_year(year)
            assert len(holidays) == 9
            assert len({h.date for h in holidays}) == 9

    def test_holidays_sorted_by_date(self, calendar):
        holidays = calendar.holidays_for_year(2025)
        assert [h.date for h in holidays] == sorted(h.date for h in holidays)

    def test_weekday_rules_hold(self, calendar):
        for year in range(2000, 2050):
            by_id = {h.id: h.date for h in calendar.holidays_for_year(year)}
            assert by_id["family_day"].isoweekday() == 1
            assert 15 <= by_id["family_day"].day <= 21
            assert by_id["good_friday"].isoweekday() == 5
            assert by_id["victoria_day"].isoweekday() == 1
            assert date(year, 5, 18) <= by_id["victoria_day"] <= date(year, 5, 24)
            assert by_id["labour_day"].isoweekday() == 1
            assert by_id["labour_day"].day <= 7
            assert by_id["thanksgiving"].isoweekday() == 1
            assert 8 <= by_id["thanksgiving"].day <= 14

    def test_good_friday(self, calendar):
        by_id_2024 = {h.id: h.date for h in calendar.holidays_for_year(2024)}
        by_id_2025 = {h.id: h.date for h in calendar.holidays_for_year(2025)}
        assert by_id_2024["good_friday"] == date(2024, 3, 29)
        assert by_id_2025["good_friday"] == date(2025, 4, 18)

    def test_victoria_day_is_monday_strictly_before_may_25(self, calendar):
        by_id = {h.id: h.date for h in calendar.holidays_for_year(2024)}
        assert by_id["victoria_day"] == date(2024, 5, 20)
        # May 25 2026 is a Monday, so Victoria Day is the week before
        by_id = {h.id: h.date for h in calendar.holidays_for_year(2026)}
        assert by_id["victoria_day"] == date(2026, 5, 18)

    def test_canada_day_not_shifted_for_weekend(self, calendar):
        # July 1 2023 was a Saturday
        by_id = {h.id: h.date for h in calendar.holidays_for_year(2023)}
        assert by_id["canada_day"] == date(2023, 7, 1)

    def test_holidays_in_range_is_inclusive(self, calendar):
        holidays = calendar.holidays_in_range(date(2025, 1, 1), date(2025, 2, 17))
        assert [h.id for h in holidays] == ["new_year", "family_day"]

    def test_holidays_in_range_spans_years(self, calendar):
        holidays = calendar.holidays_in_range(date(2024, 12, 20), date(2025, 1, 5))
        assert [h.date for h in holidays] == [
            date(2024, 12, 25),
            date(2024, 12, 26),
            date(2025, 1, 1),
        ]

    def test_holidays_in_range_empty_when_start_after_end(self, calendar):
        assert calendar.holidays_in_range(date(2025, 12, 31), date(2025, 1, 1)) == []

    def test_holiday_on_date(self, calendar):
        holiday = calendar.holiday_on_date(date(2025, 12, 25))
        assert holiday is not None
        assert holiday.name == "Christmas Day"
        assert calendar.holiday_on_date(date(2025, 12, 24)) is None

    def test_holiday_on_ymd_tolerates_bad_input(self, calendar):
        assert calendar.holiday_on_ymd("2025-07-01").id == "canada_day"
        assert calendar.holiday_on_ymd("") is None
        assert calendar.holiday_on_ymd(None) is None
        assert calendar.holiday_on_ymd("not-a-date") is None

    def test_to_dict(self, calendar):
        holiday = calendar.holiday_on_date(date(2025, 1, 1))
        assert holiday.to_dict() == {
            "id": "new_year",
            "name": "New Year's Day",
            "date": "2025-01-01",
        }


class TestRules:
    """Individual rule types."""

    def test_nth_weekday_of_month(self):
        # 3rd Monday of February 2025
        assert nth_weekday_of_month(2025, 2, 1, 3) == date(2025, 2, 17)

    def test_custom_calendar(self):
        calendar = HolidayCalendar(
            (
                FixedDate("day_one", "Day One", 3, 1),
                NthWeekday("first_fri", "First Friday", 6, 5, 1),
                WeekdayBefore("before", "Monday Before", 6, 10, 1),
                EasterOffset("easter_monday", "Easter Monday", 1),
            ),
            jurisdiction="XX",
        )
        assert [h.date for h in calendar.holidays_for_year(2025)] == [
            date(2025, 3, 1),
            date(2025, 4, 21),
            date(2025, 6, 6),
            date(2025, 6, 9),
        ]

    def test_ontario_rules_ids(self):
        assert [r.id for r in ONTARIO_RULES] == [
            "new_year",
            "family_day",
            "good_friday",
            "victoria_day",
            "canada_day",
            "labour_day",
            "thanksgiving",
            "christmas",
            "boxing_day",
        ]


def test_unknown_jurisdiction():
    with pytest.raises(UnknownJurisdictionError):
        get_calendar("ZZ")


def test_jurisdiction_is_case_insensitive():
    assert get_calendar("on").jurisdiction == "ON"
