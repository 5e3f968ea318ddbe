'''
Invoice Models
'''
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceLine(BaseModel):
    lesson_type: str
    date: str
    price: str

class Invoice(BaseModel):
    """
    Everything printed on a student invoice, already formatted.
    """
    file_name: str
    student_name: str
    class_label: str
    teacher_label: str
    next_month_lessons: Optional[int] = None
    projected_tuition: Optional[str] = None
    lines: list[InvoiceLine] = Field(default_factory=list)
    total_amount: Decimal
    total: str
