'''
Class Scheduler view service
'''
from typing import Annotated, Optional

from fastapi import Depends

from ..common.exceptions import ClassValidationError, FormValidationError, PersistenceError
from ..common.logger import log
from ..core.recurrence import format_recurrence, parse_date
from ..database.engine import get_store
from ..database.store import TutoringStore
from ..models.classes import ClassDefinition, ClassListRow, RecurrenceSlot
from ..models.directory import Classroom, Teacher
from ..models.students import Student
from .class_service import ClassService, validate_class_payload
from .live_view import LiveView

DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
# half-hour rows from 08:00 to 20:00
TIMES = [f"{hour:02d}:{minute:02d}" for hour in range(8, 21) for minute in (0, 30) if not (hour == 20 and minute == 30)]

SUCCESS_MESSAGE = "Class created successfully!"
FAILURE_MESSAGE = "Error creating class"


class SchedulerService(LiveView):
    """
    Holds the class creation form (a weekly slot grid plus the class details)
    and the live lists it needs: classes, students, teachers, classrooms.
    """
    def __init__(self, store: Annotated[TutoringStore, Depends(get_store)]):
        super().__init__(store)
        self.class_service = ClassService(store)
        self.classes: list[ClassDefinition] = []
        self.students: list[Student] = []
        self.teachers: list[Teacher] = []
        self.classrooms: list[Classroom] = []
        self.message: Optional[str] = None
        self.submitting = False
        self.reset_form()

    def _subscription_requests(self):
        return [
            lambda: self.store.subscribe_classes(self._on_classes),
            lambda: self.store.subscribe_students(self._on_students),
            lambda: self.store.subscribe_teachers(self._on_teachers),
            lambda: self.store.subscribe_classrooms(self._on_classrooms),
        ]

    def _on_classes(self, classes):
        self.classes = classes

    def _on_students(self, students):
        self.students = students

    def _on_teachers(self, teachers):
        self.teachers = teachers

    def _on_classrooms(self, classrooms):
        self.classrooms = classrooms

    # --- Form State ---

    def reset_form(self):
        self.classroom = ""
        self.subject = ""
        self.teacher = ""
        self.start_date = ""
        self.end_date = ""
        self.selected_slots: list[RecurrenceSlot] = []
        self.selected_students: list[str] = []

    def is_slot_selected(self, day: str, time: str) -> bool:
        return any(slot.day == day and slot.time == time for slot in self.selected_slots)

    def toggle_slot(self, day: str, time: str):
        if self.is_slot_selected(day, time):
            self.selected_slots = [s for s in self.selected_slots if not (s.day == day and s.time == time)]
        else:
            self.selected_slots = [*self.selected_slots, RecurrenceSlot(day=day, time=time)]

    def toggle_student(self, student_id: str):
        if student_id in self.selected_students:
            self.selected_students = [s for s in self.selected_students if s != student_id]
        else:
            self.selected_students = [*self.selected_students, student_id]

    def slot_grid(self) -> list[list[bool]]:
        """Rows follow TIMES, columns follow DAYS."""
        return [[self.is_slot_selected(day, time) for day in DAYS] for time in TIMES]

    def _payload(self) -> dict:
        return {
            "classroom": self.classroom,
            "name": self.subject,
            "teacher": self.teacher,
            "recurrence": [slot.model_dump() for slot in self.selected_slots],
            "startDate": self.start_date,
            "endDate": self.end_date,
            "students": list(self.selected_students),
        }

    def _validate_form(self):
        class_data = validate_class_payload(self._payload())
        if not class_data.recurrence:
            raise FormValidationError("Pick at least one weekly slot")
        start = parse_date(class_data.start_date)
        end = parse_date(class_data.end_date)
        if start is None or end is None:
            raise FormValidationError("Dates must be YYYY-MM-DD")
        if start > end:
            raise FormValidationError("Start date must not be after end date")
        return class_data

    async def submit(self) -> str:
        """
        Creates the class. On success the form is cleared; on any failure the
        form keeps its values and `message` says so.
        """
        self.submitting = True
        self.message = None
        try:
            class_data = self._validate_form()
            class_id = await self.class_service.create_class(class_data)
        except (ClassValidationError, FormValidationError, PersistenceError) as e:
            log.warning(f"Class submission failed: {e}")
            self.message = FAILURE_MESSAGE
            raise
        finally:
            self.submitting = False
        self.message = SUCCESS_MESSAGE
        self.reset_form()
        return class_id

    # --- Listing ---

    def _student_names(self, ids: Optional[list[str]]) -> str:
        if not isinstance(ids, list):
            return ""
        names = {student.id: student.name for student in self.students}
        return ", ".join(names[i] for i in ids if names.get(i))

    @property
    def class_rows(self) -> list[ClassListRow]:
        return [
            ClassListRow(
                id=definition.id,
                classroom=definition.classroom,
                name=definition.name,
                teacher=definition.teacher,
                schedule=format_recurrence(definition.recurrence),
                start_date=definition.start_date,
                end_date=definition.end_date,
                student_names=self._student_names(definition.students),
            )
            for definition in self.classes
        ]
