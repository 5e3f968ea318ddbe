'''
Calendar API Models
'''
import datetime

from pydantic import BaseModel

from .classes import Occurrence


class CalendarDay(BaseModel):
    """The two independent markers drawn on a calendar tile."""
    date: datetime.date
    has_class: bool
    has_check_in: bool

class CalendarCheckInRow(BaseModel):
    id: str
    student: str
    time: datetime.time
    subject: str

class CalendarMonth(BaseModel):
    year: int
    month: int
    days: list[CalendarDay]
    selected_date: datetime.date
    occurrences: list[Occurrence]
    check_ins: list[CalendarCheckInRow]
