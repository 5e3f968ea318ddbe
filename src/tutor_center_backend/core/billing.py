'''
Roster and billing aggregation.

Everything here is a pure function of the current student and check-in sets,
so the roster view can call it again on every change of either one.
'''
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..models.check_ins import CheckIn, CheckInRow, SessionBucket
from ..models.students import DashboardStats, Student, StudentWithStats
from .clock import to_local_datetime


def compute_student_stats(students: Iterable[Student], check_ins: Iterable[CheckIn]) -> list[StudentWithStats]:
    """
    completed_lessons counts every check-in of the student, soft-deleted ones included.
    total_amount_owed = completed_lessons * cost_per_lesson.
    """
    counts = Counter(check_in.student_id for check_in in check_ins)
    with_stats = []
    for student in students:
        completed = counts.get(student.id, 0)
        with_stats.append(StudentWithStats(
            **student.model_dump(exclude={'completed_lessons'}),
            completed_lessons=completed,
            total_amount_owed=completed * student.cost_per_lesson,
        ))
    return with_stats


def is_listable(student: Student) -> bool:
    """Malformed records without a name or email stay in storage but are never listed."""
    return bool(student.name) and bool(student.email)


def filter_students(students: Iterable[StudentWithStats], search_term: str = "") -> list[StudentWithStats]:
    term = (search_term or "").lower()
    return [
        student for student in students
        if is_listable(student)
        and (term in student.name.lower() or term in student.email.lower())
    ]


def active_check_ins(check_ins: Iterable[CheckIn]) -> list[CheckIn]:
    return [check_in for check_in in check_ins if check_in.active is not False]


def deleted_check_ins(check_ins: Iterable[CheckIn]) -> list[CheckIn]:
    return [check_in for check_in in check_ins if check_in.active is False]


def check_ins_for_student(check_ins: Iterable[CheckIn], student_id: str) -> list[CheckIn]:
    return [check_in for check_in in check_ins if check_in.student_id == student_id]


def session_bucket(hour: int) -> SessionBucket:
    if 6 <= hour < 12:
        return SessionBucket.MORNING
    if 12 <= hour < 18:
        return SessionBucket.AFTERNOON
    if 18 <= hour < 24:
        return SessionBucket.NIGHT
    return SessionBucket.LATE_NIGHT


def student_names(students: Iterable[Student]) -> dict[str, Optional[str]]:
    return {student.id: student.name for student in students}


def join_check_ins_with_students(check_ins: Iterable[CheckIn], students: Iterable[Student]) -> list[CheckInRow]:
    """
    Attaches the student name, local time and session bucket to each check-in.
    Check-ins whose student is unknown (or nameless) are left out of the result only.
    """
    names = student_names(students)
    rows = []
    for check_in in check_ins:
        name = names.get(check_in.student_id)
        if not name:
            continue
        occurred_at = to_local_datetime(check_in.timestamp)
        rows.append(CheckInRow(
            **check_in.model_dump(),
            student_name=name,
            session=session_bucket(occurred_at.hour),
            occurred_at=occurred_at,
        ))
    return rows


def count_check_ins_in_month(check_ins: Iterable[CheckIn], year: int, month: int) -> int:
    count = 0
    for check_in in check_ins:
        moment = to_local_datetime(check_in.timestamp)
        if moment.year == year and moment.month == month:
            count += 1
    return count


def total_revenue(students: Iterable[StudentWithStats]) -> Decimal:
    return sum((student.total_amount_owed for student in students), Decimal("0"))


def dashboard_stats(
    students: list[Student],
    check_ins: list[CheckIn],
    students_with_stats: list[StudentWithStats],
    reference_day: date
) -> DashboardStats:
    return DashboardStats(
        total_students=len(students),
        check_ins_this_month=count_check_ins_in_month(check_ins, reference_day.year, reference_day.month),
        total_revenue=total_revenue(students_with_stats),
    )
