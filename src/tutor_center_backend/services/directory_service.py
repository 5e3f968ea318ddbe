'''
Teacher and classroom directory service
'''
from typing import Annotated

from fastapi import Depends

from ..common.exceptions import TeacherNotFoundError
from ..common.logger import log
from ..core.invoice import render_teacher_invoice_pdf, teacher_invoice_filename
from ..database import models as db_models
from ..database.engine import get_store
from ..database.store import TutoringStore
from ..models.directory import Classroom, ClassroomCreate, Teacher, TeacherCreate


class DirectoryService:
    """
    Reads and adds the teachers and classrooms offered by the class scheduler.
    """
    def __init__(self, store: Annotated[TutoringStore, Depends(get_store)]):
        self.store = store

    async def list_teachers(self) -> list[Teacher]:
        return await self.store.fetch_all(db_models.TEACHERS)

    async def get_teacher(self, teacher_id: str) -> Teacher:
        for teacher in await self.list_teachers():
            if teacher.id == teacher_id:
                return teacher
        log.warning(f"Tried to fetch non-existent teacher: {teacher_id}")
        raise TeacherNotFoundError(f"Teacher {teacher_id} not found.")

    async def add_teacher(self, teacher: TeacherCreate) -> Teacher:
        teacher_id = await self.store.add_teacher(teacher)
        return Teacher(id=teacher_id, name=teacher.name)

    async def list_classrooms(self) -> list[Classroom]:
        return await self.store.fetch_all(db_models.CLASSROOMS)

    async def add_classroom(self, classroom: ClassroomCreate) -> Classroom:
        classroom_doc_id = await self.store.add_classroom(classroom)
        return Classroom(id=classroom_doc_id, classroom_id=classroom.classroom_id)

    async def teacher_invoice(self, teacher_id: str) -> tuple[str, bytes]:
        """Returns (file name, PDF bytes) for a teacher's invoice."""
        teacher = await self.get_teacher(teacher_id)
        return teacher_invoice_filename(teacher.name), render_teacher_invoice_pdf(teacher.name)
