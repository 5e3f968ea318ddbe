'''
Student API Models
'''
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Domain Record ---

class Student(BaseModel):
    """
    A roster entry as the application sees it.
    name/email may be missing on malformed documents; views filter those out.
    """
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    signed_up_lessons: int = 0
    cost_per_lesson: Decimal = Decimal("0")
    # the stored counter; the roster view derives its own from check-ins
    completed_lessons: int = 0
    last_invoice_month: str = ""
    next_month_request: int = 0
    rollover_lessons: int = 0
    active: bool = True

    model_config = ConfigDict(from_attributes=True)


# --- API Input Models (for POST/PATCH) ---

class StudentCreate(BaseModel):
    """
    Validates the request body for adding a student to the roster.
    """
    name: str
    email: str
    signed_up_lessons: int = Field(0, ge=0)
    cost_per_lesson: Decimal = Field(Decimal("0"), ge=0)
    completed_lessons: int = 0
    last_invoice_month: str = ""
    next_month_request: int = 0
    rollover_lessons: int = 0

class StudentUpdate(BaseModel):
    """
    Partial update. Only the fields that were actually sent are written.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    signed_up_lessons: Optional[int] = Field(None, ge=0)
    cost_per_lesson: Optional[Decimal] = Field(None, ge=0)
    completed_lessons: Optional[int] = None
    last_invoice_month: Optional[str] = None
    next_month_request: Optional[int] = None
    rollover_lessons: Optional[int] = None
    active: Optional[bool] = None


# --- API Output Models (for GET) ---

class StudentWithStats(Student):
    """
    A student plus the figures derived from the current check-in set.
    """
    completed_lessons: int
    total_amount_owed: Decimal

class DashboardStats(BaseModel):
    total_students: int
    check_ins_this_month: int
    total_revenue: Decimal
