'''
Class Definition API Models
'''
import datetime
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RecurrenceSlot(BaseModel):
    """A weekly {day, time} slot. day is 'Mon' or 'Monday', time is 'HH:MM'."""
    day: str
    time: str


# --- Domain Record ---

class ClassDefinition(BaseModel):
    """
    A recurring weekly class over an inclusive date range.
    recurrence/students are None when the stored document holds something other than a list.
    """
    id: str
    classroom: str = ""
    name: str = ""
    teacher: str = ""
    recurrence: Optional[list[RecurrenceSlot]] = None
    start_date: str = ""
    end_date: str = ""
    students: Optional[list[str]] = None

    model_config = ConfigDict(from_attributes=True)


# --- API Input Models ---

class ClassCreate(BaseModel):
    classroom: str
    name: str
    teacher: str
    # items that are not {day, time} slots are kept as sent and skipped when read back
    recurrence: list[Annotated[Union[RecurrenceSlot, Any], Field(union_mode="left_to_right")]]
    start_date: str
    end_date: str
    students: list[str] = Field(default_factory=list)


# --- API Output Models ---

class Occurrence(BaseModel):
    """
    One concrete, dated instance of a class.
    """
    class_id: str
    name: str
    classroom: str
    teacher: str
    date: datetime.date
    time: datetime.time
    students: list[str] = Field(default_factory=list)

class ClassListRow(BaseModel):
    """A class as listed by the scheduler, with ids resolved for display."""
    id: str
    classroom: str
    name: str
    teacher: str
    schedule: str = Field(..., description="e.g. 'Mon 09:00, Wed 10:30'")
    start_date: str
    end_date: str
    student_names: str
