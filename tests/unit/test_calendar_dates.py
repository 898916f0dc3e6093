"""Calendar helpers: inclusive day spans, month lengths and period labels."""

from datetime import date, datetime, timedelta, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from workforce_kernel.domain.dates import (
    days_between,
    days_in_month,
    month_name,
    month_number,
    period_label,
    to_date,
)
from workforce_kernel.exceptions import InvalidDateRangeError, ValidationFailedError


class TestToDate:
    def test_iso_string(self):
        assert to_date("2024-06-10") == date(2024, 6, 10)

    def test_iso_datetime_string_keeps_date_part(self):
        assert to_date("2024-06-10T23:30:00Z") == date(2024, 6, 10)

    def test_datetime_is_truncated(self):
        assert to_date(datetime(2024, 6, 10, 22, 0, tzinfo=timezone.utc)) == date(2024, 6, 10)

    def test_date_passes_through(self):
        d = date(2024, 2, 29)
        assert to_date(d) is d

    @pytest.mark.parametrize("bad", ["", "10/06/2024", "2024-13-01", None, 20240610])
    def test_invalid_input_raises_validation_error(self, bad):
        with pytest.raises(ValidationFailedError):
            to_date(bad, "start_date")


class TestDaysBetween:
    def test_inclusive_span(self):
        assert days_between("2024-06-10", "2024-06-12") == 3

    def test_same_day_counts_as_one(self):
        assert days_between("2024-06-10", "2024-06-10") == 1

    def test_spans_month_and_leap_day(self):
        assert days_between(date(2024, 2, 28), date(2024, 3, 1)) == 3

    def test_spans_daylight_saving_change(self):
        # Calendar arithmetic: a DST shift in the host zone cannot shave a day.
        assert days_between("2024-03-30", "2024-04-01") == 3
        assert days_between("2024-10-26", "2024-10-28") == 3

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            days_between("2024-06-12", "2024-06-10")
        assert exc_info.value.code == "INVALID_DATE_RANGE"

    @given(st.dates(max_value=date(9000, 1, 1)), st.integers(min_value=0, max_value=2000))
    def test_span_is_offset_plus_one(self, start, offset):
        assert days_between(start, start + timedelta(days=offset)) == offset + 1

    @given(
        st.dates(max_value=date(9000, 1, 1)),
        st.integers(min_value=0, max_value=400),
        st.integers(min_value=1, max_value=400),
    )
    def test_adjacent_spans_add_up(self, start, first, second):
        middle = start + timedelta(days=first)
        end = middle + timedelta(days=second)
        assert days_between(start, end) == days_between(start, middle) + days_between(
            middle + timedelta(days=1), end
        )


class TestMonths:
    @pytest.mark.parametrize(
        "value,expected",
        [("2024-02-10", 29), ("2023-02-10", 28), ("2024-06-01", 30), ("2024-12-31", 31)],
    )
    def test_days_in_month(self, value, expected):
        assert days_in_month(value) == expected

    @pytest.mark.parametrize("name,number", [("June", 6), ("june", 6), ("Jun", 6), (" December ", 12)])
    def test_month_number(self, name, number):
        assert month_number(name) == number

    @pytest.mark.parametrize("name", ["Juno", "", "13", None])
    def test_unknown_month_is_none(self, name):
        assert month_number(name) is None

    def test_month_name(self):
        assert month_name(9) == "September"

    def test_period_label(self):
        assert period_label("2024-06-15") == "June 2024"
