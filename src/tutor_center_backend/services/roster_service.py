'''
Roster & Billing view service
'''
from datetime import date
from typing import Annotated, Optional

from fastapi import Depends

from ..common.exceptions import CheckInNotFoundError, FormValidationError, PersistenceError, StudentNotFoundError
from ..common.logger import log
from ..core import billing
from ..core.clock import today
from ..core.invoice import build_invoice
from ..database.engine import get_store
from ..database.store import TutoringStore
from ..models.check_ins import CheckIn, CheckInCreate, CheckInForm, CheckInRow, CheckInUpdate
from ..models.invoice import Invoice
from ..models.students import DashboardStats, Student, StudentCreate, StudentUpdate, StudentWithStats
from .live_view import LiveView


def _blank_student_form() -> StudentCreate:
    return StudentCreate(name="", email="")


class RosterService(LiveView):
    """
    Keeps the live student and check-in sets, recomputes the billing figures on
    every change of either, and issues roster writes.

    Failed writes leave a short message in `error` and keep the form that was
    being submitted, so the same action can simply be retried.
    """
    def __init__(self, store: Annotated[TutoringStore, Depends(get_store)]):
        super().__init__(store)
        self.students: list[Student] = []
        self.check_ins: list[CheckIn] = []
        self.students_with_stats: list[StudentWithStats] = []
        self.search_term = ""
        self.loading = True
        self.error: Optional[str] = None

        # form state
        self.new_student: StudentCreate = _blank_student_form()
        self.editing_student: Optional[Student] = None
        self.new_check_in: CheckInForm = CheckInForm()

    def _subscription_requests(self):
        return [
            lambda: self.store.subscribe_students(self._on_students),
            lambda: self.store.subscribe_check_ins(self._on_check_ins),
        ]

    # --- 1. Live Data ---

    def _on_students(self, students: list[Student]):
        self.students = students
        self.loading = False
        self._recompute()

    def _on_check_ins(self, check_ins: list[CheckIn]):
        self.check_ins = check_ins
        self._recompute()

    def _recompute(self):
        # either input may arrive first; always start from both current sets
        self.students_with_stats = billing.compute_student_stats(self.students, self.check_ins)

    # --- 2. Derived Views ---

    @property
    def filtered_students(self) -> list[StudentWithStats]:
        return billing.filter_students(self.students_with_stats, self.search_term)

    def search(self, term: str) -> list[StudentWithStats]:
        self.search_term = term or ""
        return self.filtered_students

    @property
    def check_in_rows(self) -> list[CheckInRow]:
        """The primary table: active check-ins that belong to a known student."""
        return billing.join_check_ins_with_students(billing.active_check_ins(self.check_ins), self.students)

    @property
    def recently_deleted(self) -> list[CheckIn]:
        return billing.deleted_check_ins(self.check_ins)

    def get_student(self, student_id: str) -> StudentWithStats:
        for student in self.students_with_stats:
            if student.id == student_id:
                return student
        raise StudentNotFoundError(f"Student {student_id} not found.")

    def check_ins_of(self, student_id: str) -> list[CheckIn]:
        self.get_student(student_id)
        return billing.check_ins_for_student(self.check_ins, student_id)

    def dashboard(self, reference_day: Optional[date] = None) -> DashboardStats:
        return billing.dashboard_stats(
            self.students,
            self.check_ins,
            self.students_with_stats,
            reference_day or today()
        )

    def invoice(self, student_id: str, next_month_lessons: Optional[int] = None) -> Invoice:
        student = self.get_student(student_id)
        log.info(f"Building invoice for student {student_id}.")
        return build_invoice(student, self.check_ins, next_month_lessons)

    # --- 3. Student Writes ---

    async def add_student(self, student: Optional[StudentCreate] = None) -> str:
        if student is not None:
            self.new_student = student
        if not self.new_student.name or not self.new_student.email:
            self.error = "Name and email are required"
            raise FormValidationError(self.error)
        try:
            student_id = await self.store.add_student(self.new_student)
        except PersistenceError as e:
            self.error = "Failed to add student"
            log.error(f"Error adding student: {e}")
            raise
        self.new_student = _blank_student_form()
        self.error = None
        return student_id

    def start_edit(self, student_id: str) -> Student:
        self.editing_student = self.get_student(student_id).model_copy()
        return self.editing_student

    async def save_student(self):
        """Writes the edit form's name, email, lesson count and rate back to the store."""
        if self.editing_student is None:
            return
        fields = StudentUpdate(
            name=self.editing_student.name,
            email=self.editing_student.email,
            signed_up_lessons=self.editing_student.signed_up_lessons,
            cost_per_lesson=self.editing_student.cost_per_lesson,
        )
        await self.update_student(self.editing_student.id, fields)
        self.editing_student = None

    async def update_student(self, student_id: str, fields: StudentUpdate):
        self.get_student(student_id)
        try:
            await self.store.update_student(student_id, fields)
        except PersistenceError as e:
            self.error = "Failed to update student"
            log.error(f"Error updating student {student_id}: {e}")
            raise
        self.error = None

    # --- 4. Check-in Writes ---

    async def add_check_in(self, form: Optional[CheckInForm] = None) -> str:
        """
        Records a manual check-in from the form. A student, a lesson type and a
        cost are required; the timestamp is taken when the store writes it.
        """
        if form is not None:
            self.new_check_in = form
        form = self.new_check_in
        if not form.student_id or not form.lesson_type.strip() or form.lesson_cost is None:
            self.error = "Student, lesson type and cost are required"
            raise FormValidationError(self.error)
        if form.lesson_cost < 0:
            self.error = "Lesson cost cannot be negative"
            raise FormValidationError(self.error)
        try:
            check_in_id = await self.store.add_check_in(CheckInCreate(
                student_id=form.student_id,
                lesson_type=form.lesson_type,
                lesson_cost=form.lesson_cost,
                classroom_id=form.classroom_id,
            ))
        except PersistenceError as e:
            self.error = "Failed to add check-in"
            log.error(f"Error adding check-in: {e}")
            raise
        self.new_check_in = CheckInForm()
        self.error = None
        return check_in_id

    def get_check_in(self, check_in_id: str) -> CheckIn:
        for check_in in self.check_ins:
            if check_in.id == check_in_id:
                return check_in
        raise CheckInNotFoundError(f"Check-in {check_in_id} not found.")

    async def _set_check_in_active(self, check_in_id: str, active: bool, failure_message: str):
        self.get_check_in(check_in_id)
        try:
            await self.store.update_check_in(check_in_id, CheckInUpdate(active=active))
        except PersistenceError as e:
            self.error = failure_message
            log.error(f"Error toggling check-in {check_in_id} to active={active}: {e}")
            raise
        self.error = None

    async def delete_check_in(self, check_in_id: str):
        """Soft delete: the document stays, only its active flag flips."""
        await self._set_check_in_active(check_in_id, False, "Failed to delete check-in")

    async def undo_delete_check_in(self, check_in_id: str):
        await self._set_check_in_active(check_in_id, True, "Failed to restore check-in")
