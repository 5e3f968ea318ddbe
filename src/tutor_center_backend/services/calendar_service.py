'''
Calendar view service
'''
from collections import defaultdict
from datetime import date, timedelta
from typing import Annotated, Optional

from fastapi import Depends

from ..core.clock import to_local_date, to_local_datetime, today
from ..core.recurrence import group_occurrences_by_date, month_bounds
from ..database.engine import get_store
from ..database.store import TutoringStore
from ..models.calendar import CalendarCheckInRow, CalendarDay, CalendarMonth
from ..models.check_ins import CheckIn
from ..models.classes import ClassDefinition, Occurrence
from ..models.students import Student
from .live_view import LiveView


class CalendarService(LiveView):
    """
    Month calendar over class occurrences and check-ins.

    The occurrence mapping covers [range_start, range_end] and is rebuilt from
    scratch whenever the class set or the range changes. Check-ins are bucketed
    by their calendar date in the configured zone.
    """
    def __init__(self, store: Annotated[TutoringStore, Depends(get_store)]):
        super().__init__(store)
        self.classes: list[ClassDefinition] = []
        self.check_ins: list[CheckIn] = []
        self.students: list[Student] = []
        self.selected_date: date = today()
        self.range_start, self.range_end = month_bounds(self.selected_date.year, self.selected_date.month)
        self.occurrences_by_date: dict[date, list[Occurrence]] = {}
        self.check_ins_by_date: dict[date, list[CheckIn]] = {}

    def _subscription_requests(self):
        return [
            lambda: self.store.subscribe_classes(self._on_classes),
            lambda: self.store.subscribe_check_ins(self._on_check_ins),
            lambda: self.store.subscribe_students(self._on_students),
        ]

    # --- Live Data ---

    def _on_classes(self, classes: list[ClassDefinition]):
        self.classes = classes
        self._rebuild_occurrences()

    def _on_check_ins(self, check_ins: list[CheckIn]):
        self.check_ins = check_ins
        by_date = defaultdict(list)
        for check_in in check_ins:
            by_date[to_local_date(check_in.timestamp)].append(check_in)
        self.check_ins_by_date = dict(by_date)

    def _on_students(self, students: list[Student]):
        self.students = students

    def _rebuild_occurrences(self):
        self.occurrences_by_date = group_occurrences_by_date(self.classes, self.range_start, self.range_end)

    # --- Navigation ---

    def set_range(self, start: date, end: date):
        self.range_start, self.range_end = start, end
        self._rebuild_occurrences()

    def show_month(self, year: int, month: int):
        self.set_range(*month_bounds(year, month))

    def select_day(self, day: date):
        self.selected_date = day

    # --- Derived Views ---

    def has_class(self, day: date) -> bool:
        return bool(self.occurrences_by_date.get(day))

    def has_check_in(self, day: date) -> bool:
        return bool(self.check_ins_by_date.get(day))

    def days(self) -> list[CalendarDay]:
        result = []
        day = self.range_start
        while day <= self.range_end:
            result.append(CalendarDay(date=day, has_class=self.has_class(day), has_check_in=self.has_check_in(day)))
            day += timedelta(days=1)
        return result

    def occurrences_on(self, day: date) -> list[Occurrence]:
        if not (self.range_start <= day <= self.range_end):
            return group_occurrences_by_date(self.classes, day, day).get(day, [])
        return list(self.occurrences_by_date.get(day, []))

    def check_ins_on(self, day: date) -> list[CalendarCheckInRow]:
        names = {student.id: student.name for student in self.students}
        rows = []
        for check_in in self.check_ins_by_date.get(day, []):
            rows.append(CalendarCheckInRow(
                id=check_in.id,
                student=names.get(check_in.student_id) or check_in.student_id,
                time=to_local_datetime(check_in.timestamp).time().replace(microsecond=0),
                subject=check_in.classroom_id or "N/A",
            ))
        rows.sort(key=lambda row: row.time)
        return rows

    def month_view(self, year: Optional[int] = None, month: Optional[int] = None, selected: Optional[date] = None) -> CalendarMonth:
        if selected is not None:
            self.select_day(selected)
        year = year or self.selected_date.year
        month = month or self.selected_date.month
        if (self.range_start, self.range_end) != month_bounds(year, month):
            self.show_month(year, month)
        return CalendarMonth(
            year=year,
            month=month,
            days=self.days(),
            selected_date=self.selected_date,
            occurrences=self.occurrences_on(self.selected_date),
            check_ins=self.check_ins_on(self.selected_date),
        )
