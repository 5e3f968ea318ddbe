'''
Check-in API Models
'''
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionBucket(str, Enum):
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    NIGHT = "Night"
    LATE_NIGHT = "LateNight"


# --- Domain Record ---

class CheckIn(BaseModel):
    """
    One completed lesson. `timestamp` is epoch milliseconds.
    """
    id: str
    student_id: str
    lesson_type: str = ""
    lesson_cost: Decimal = Decimal("0")
    timestamp: int
    classroom_id: str = ""
    active: bool = True

    model_config = ConfigDict(from_attributes=True)


# --- API Input Models ---

class CheckInCreate(BaseModel):
    """
    Validates a new check-in. timestamp/classroom_id are filled in by the store when omitted.
    """
    student_id: str
    lesson_type: str
    lesson_cost: Decimal = Field(..., ge=0)
    timestamp: Optional[int] = None
    classroom_id: Optional[str] = None
    active: bool = True

class CheckInUpdate(BaseModel):
    student_id: Optional[str] = None
    lesson_type: Optional[str] = None
    lesson_cost: Optional[Decimal] = None
    timestamp: Optional[int] = None
    classroom_id: Optional[str] = None
    active: Optional[bool] = None

class CheckInForm(BaseModel):
    """
    The manual check-in form as the roster view holds it between attempts.
    """
    student_id: str = ""
    lesson_type: str = ""
    lesson_cost: Optional[Decimal] = None
    classroom_id: Optional[str] = None


# --- API Output Models ---

class CheckInRow(CheckIn):
    """
    A check-in joined to its student, as shown in the primary table.
    """
    student_name: str
    session: SessionBucket
    occurred_at: datetime
