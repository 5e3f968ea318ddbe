'''
testing recurrence expansion and the occurrence mapping
'''
import pytest
from datetime import date, time

from src.tutor_center_backend.core.recurrence import (
    expand_class,
    format_recurrence,
    group_occurrences_by_date,
    month_bounds,
    parse_date,
    parse_day,
    parse_time,
)
from src.tutor_center_backend.models.classes import RecurrenceSlot
from tests.constants import MARCH_2024_MONDAYS
from tests.database.factories import ClassDefinitionFactory


class TestParsing:

    @pytest.mark.parametrize("day, expected", [
        ("Mon", 0), ("Monday", 0), ("monday", 0), ("Sun", 6), ("Saturday", 5), ("Mo", None), ("", None),
    ])
    def test_parse_day(self, day, expected):
        assert parse_day(day) == expected

    def test_parse_time(self):
        assert parse_time("09:30") == time(9, 30)
        assert parse_time("9am") is None

    def test_parse_date_ignores_time_part(self):
        assert parse_date("2024-03-04T00:00:00Z") == date(2024, 3, 4)
        assert parse_date("not a date") is None

    def test_month_bounds_leap_year(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


class TestExpandClass:

    def test_mondays_in_march(self):
        definition = ClassDefinitionFactory(recurrence=[RecurrenceSlot(day="Mon", time="09:00")])

        occurrences = list(expand_class(definition))

        assert [o.date for o in occurrences] == MARCH_2024_MONDAYS
        assert all(o.time == time(9, 0) for o in occurrences)
        assert all(o.class_id == definition.id for o in occurrences)

    def test_full_and_short_day_names_match_the_same_dates(self):
        short = ClassDefinitionFactory(recurrence=[RecurrenceSlot(day="Mon", time="09:00")])
        full = ClassDefinitionFactory(recurrence=[RecurrenceSlot(day="Monday", time="09:00")])

        assert [o.date for o in expand_class(short)] == [o.date for o in expand_class(full)]

    def test_two_slots_on_one_day(self):
        definition = ClassDefinitionFactory(
            start_date="2024-03-04", end_date="2024-03-04",
            recurrence=[RecurrenceSlot(day="Mon", time="14:00"), RecurrenceSlot(day="Mon", time="09:00")],
        )
        assert len(list(expand_class(definition))) == 2

    def test_empty_recurrence_yields_nothing(self):
        assert list(expand_class(ClassDefinitionFactory(recurrence=[]))) == []

    def test_non_list_recurrence_yields_nothing(self):
        assert list(expand_class(ClassDefinitionFactory(recurrence=None))) == []

    def test_start_after_end_yields_nothing(self):
        definition = ClassDefinitionFactory(start_date="2024-03-31", end_date="2024-03-01")
        assert list(expand_class(definition)) == []

    def test_unreadable_dates_yield_nothing(self):
        assert list(expand_class(ClassDefinitionFactory(start_date="soon"))) == []

    def test_unknown_day_is_skipped(self):
        definition = ClassDefinitionFactory(recurrence=[
            RecurrenceSlot(day="Funday", time="09:00"),
            RecurrenceSlot(day="Mon", time="09:00"),
        ])
        assert len(list(expand_class(definition))) == 4

    def test_window_clips_the_range(self):
        definition = ClassDefinitionFactory()
        occurrences = list(expand_class(definition, date(2024, 3, 10), date(2024, 3, 20)))
        assert [o.date for o in occurrences] == [date(2024, 3, 11), date(2024, 3, 18)]

    def test_expansion_is_restartable(self):
        definition = ClassDefinitionFactory()
        first = list(expand_class(definition))
        second = list(expand_class(definition))
        assert first == second
        assert len(first) == 4


class TestGrouping:

    def test_groups_by_date_sorted_by_time(self):
        late = ClassDefinitionFactory(name="Late", recurrence=[RecurrenceSlot(day="Mon", time="16:00")])
        early = ClassDefinitionFactory(name="Early", recurrence=[RecurrenceSlot(day="Mon", time="08:30")])

        by_date = group_occurrences_by_date([late, early], date(2024, 3, 1), date(2024, 3, 31))

        assert sorted(by_date) == MARCH_2024_MONDAYS
        assert [o.name for o in by_date[date(2024, 3, 4)]] == ["Early", "Late"]

    def test_days_without_classes_are_absent(self):
        by_date = group_occurrences_by_date([ClassDefinitionFactory()], date(2024, 3, 1), date(2024, 3, 31))
        assert date(2024, 3, 5) not in by_date

    def test_format_recurrence(self):
        slots = [RecurrenceSlot(day="Mon", time="09:00"), RecurrenceSlot(day="Wed", time="10:30")]
        assert format_recurrence(slots) == "Mon 09:00, Wed 10:30"
        assert format_recurrence(None) == ""
