'''
Data access layer.

TutoringStore is the only thing that talks to the documents table. It
1- translates between the domain vocabulary and the stored field names,
2- exposes live subscriptions per collection (full snapshot on every change),
3- exposes the add/update writes, raising PersistenceError when a write is rejected.
'''
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..common.exceptions import PersistenceError
from ..common.logger import log
from ..core.clock import now_ms
from ..models.check_ins import CheckIn, CheckInCreate, CheckInUpdate
from ..models.classes import ClassCreate, ClassDefinition, RecurrenceSlot
from ..models.directory import Classroom, ClassroomCreate, Teacher, TeacherCreate
from ..models.students import Student, StudentCreate, StudentUpdate
from . import models as db_models
from .change_feed import ChangeFeed, Subscription


CENT = Decimal("0.01")


# --- Field Name Translation (domain -> stored) ---

STUDENT_FIELDS = {
    'name': 'name',
    'email': 'email',
    'signed_up_lessons': 'lessonsSignedUp',
    'cost_per_lesson': 'lessonRateHKD',
    'completed_lessons': 'lessonsCompleted',
    'last_invoice_month': 'lastInvoiceMonth',
    'next_month_request': 'nextMonthRequest',
    'rollover_lessons': 'rolloverLessons',
    'active': 'active',
}

CHECK_IN_FIELDS = {
    'student_id': 'studentId',
    'lesson_type': 'lessonType',
    'lesson_cost': 'lessonCost',
    'timestamp': 'timestamp',
    'classroom_id': 'classroomId',
    'active': 'active',
}

CLASS_FIELDS = {
    'classroom': 'Classroom',
    'name': 'Name',
    'teacher': 'Teacher',
    'recurrence': 'recurrence',
    'start_date': 'startDate',
    'end_date': 'endDate',
    'students': 'students',
}

CLASSROOM_FIELDS = {
    'classroom_id': 'classroomID',
}


def _to_number(value: Any) -> Any:
    """Decimals are stored as plain JSON numbers, rounded to whole cents."""
    if isinstance(value, Decimal):
        value = value.quantize(CENT, rounding=ROUND_HALF_UP)
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def _to_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        log.warning(f"Non-numeric amount '{value}' read as 0.")
        return Decimal("0")


def _to_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def translate_fields(fields: dict, mapping: dict[str, str]) -> dict:
    """Renames domain keys to stored keys. Unknown keys are rejected."""
    unknown = set(fields) - set(mapping)
    if unknown:
        raise PersistenceError(f"Unknown fields: {sorted(unknown)}")
    return {mapping[key]: _to_number(value) for key, value in fields.items()}


# --- Document -> Domain ---

def student_from_document(doc_id: str, data: dict) -> Student:
    return Student(
        id=doc_id,
        name=_optional_str(data.get('name')),
        email=_optional_str(data.get('email')),
        # older documents still carry the dashboard's own field names
        signed_up_lessons=_to_int(_first_present(data, 'lessonsSignedUp', 'signedUpLessons')),
        cost_per_lesson=_to_decimal(_first_present(data, 'lessonRateHKD', 'costPerLesson')),
        completed_lessons=_to_int(_first_present(data, 'lessonsCompleted', 'completedLessons')),
        last_invoice_month=_optional_str(data.get('lastInvoiceMonth')) or "",
        next_month_request=_to_int(data.get('nextMonthRequest')),
        rollover_lessons=_to_int(data.get('rolloverLessons')),
        active=data.get('active') is not False,
    )


def check_in_from_document(doc_id: str, data: dict) -> CheckIn:
    timestamp = data.get('timestamp')
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        log.warning(f"Check-in {doc_id} has no numeric timestamp, using now.")
        timestamp = now_ms()
    student_id = data.get('studentId')
    return CheckIn(
        id=doc_id,
        student_id=str(student_id) if student_id is not None else "",
        lesson_type=_optional_str(data.get('lessonType')) or "",
        lesson_cost=_to_decimal(data.get('lessonCost')),
        timestamp=int(timestamp),
        classroom_id=_optional_str(data.get('classroomId')) or "",
        active=data.get('active') is not False,
    )


def _slots_from_document(raw: Any) -> Optional[list[RecurrenceSlot]]:
    if not isinstance(raw, list):
        return None
    slots = []
    for item in raw:
        if isinstance(item, dict) and isinstance(item.get('day'), str) and isinstance(item.get('time'), str):
            slots.append(RecurrenceSlot(day=item['day'], time=item['time']))
        else:
            log.warning(f"Skipping malformed recurrence slot: {item!r}")
    return slots


def class_from_document(doc_id: str, data: dict) -> ClassDefinition:
    students = data.get('students')
    return ClassDefinition(
        id=doc_id,
        classroom=_optional_str(data.get('Classroom')) or "",
        name=_optional_str(data.get('Name')) or "",
        teacher=_optional_str(data.get('Teacher')) or "",
        recurrence=_slots_from_document(data.get('recurrence')),
        start_date=_optional_str(data.get('startDate')) or "",
        end_date=_optional_str(data.get('endDate')) or "",
        students=[str(s) for s in students] if isinstance(students, list) else None,
    )


def teacher_from_document(doc_id: str, data: dict) -> Teacher:
    return Teacher(id=doc_id, name=_optional_str(data.get('name')) or "")


def classroom_from_document(doc_id: str, data: dict) -> Classroom:
    return Classroom(id=doc_id, classroom_id=_optional_str(data.get('classroomID')) or "")


READERS: dict[str, Callable[[str, dict], Any]] = {
    db_models.STUDENTS: student_from_document,
    db_models.CHECK_INS: check_in_from_document,
    db_models.CLASSES: class_from_document,
    db_models.TEACHERS: teacher_from_document,
    db_models.CLASSROOMS: classroom_from_document,
}


# --- Domain -> Document ---

def student_to_document(student: StudentCreate) -> dict:
    return translate_fields(student.model_dump(), STUDENT_FIELDS)


def check_in_to_document(check_in: CheckInCreate) -> dict:
    fields = check_in.model_dump()
    if fields['timestamp'] is None:
        fields['timestamp'] = now_ms()
    if fields['classroom_id'] is None:
        fields['classroom_id'] = ""
    return translate_fields(fields, CHECK_IN_FIELDS)


def class_to_document(class_data: ClassCreate) -> dict:
    return translate_fields(class_data.model_dump(), CLASS_FIELDS)


class TutoringStore:
    """
    The sole conduit to the persistent store.
    """
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], feed: Optional[ChangeFeed] = None):
        self.session_factory = session_factory
        self.feed = feed or ChangeFeed()

    # --- 1. Reads ---

    async def _read_collection(self, collection: str) -> list:
        async with self.session_factory() as session:
            stmt = select(db_models.Documents).filter(
                db_models.Documents.collection == collection
            ).order_by(db_models.Documents.created_at, db_models.Documents.id)
            result = await session.execute(stmt)
            documents = result.scalars().all()
        reader = READERS[collection]
        return [reader(doc.id, doc.data or {}) for doc in documents]

    async def fetch_all(self, collection: str) -> list:
        """One-off read of a whole collection, without subscribing."""
        try:
            return await self._read_collection(collection)
        except SQLAlchemyError as e:
            log.error(f"Failed to read collection '{collection}': {e}", exc_info=True)
            raise PersistenceError(f"Failed to read {collection}.") from e

    # --- 2. Subscriptions ---

    async def _subscribe(self, collection: str, on_change: Callable[[list], None]) -> Subscription:
        """
        Registers the listener and delivers the current snapshot to it.
        A failing read is logged only; the listener then waits for the next change.
        If the first delivery raises or the caller is cancelled, the listener is released again.
        """
        subscription = self.feed.register(collection, on_change)
        try:
            try:
                snapshot = await self._read_collection(collection)
            except SQLAlchemyError as e:
                log.error(f"Error in {collection} subscription: {e}", exc_info=True)
            else:
                on_change(snapshot)
        except BaseException:
            log.warning(f"Subscription to {collection} not established, releasing listener.")
            subscription()
            raise
        return subscription

    async def _publish(self, collection: str):
        if not self.feed.has_listeners(collection):
            return
        try:
            snapshot = await self._read_collection(collection)
        except SQLAlchemyError as e:
            log.error(f"Error in {collection} subscription: {e}", exc_info=True)
            return
        self.feed.publish(collection, snapshot)

    async def subscribe_students(self, on_change: Callable[[list[Student]], None]) -> Subscription:
        return await self._subscribe(db_models.STUDENTS, on_change)

    async def subscribe_check_ins(self, on_change: Callable[[list[CheckIn]], None]) -> Subscription:
        return await self._subscribe(db_models.CHECK_INS, on_change)

    async def subscribe_classes(self, on_change: Callable[[list[ClassDefinition]], None]) -> Subscription:
        return await self._subscribe(db_models.CLASSES, on_change)

    async def subscribe_teachers(self, on_change: Callable[[list[Teacher]], None]) -> Subscription:
        return await self._subscribe(db_models.TEACHERS, on_change)

    async def subscribe_classrooms(self, on_change: Callable[[list[Classroom]], None]) -> Subscription:
        return await self._subscribe(db_models.CLASSROOMS, on_change)

    # --- 3. Writes ---

    async def _insert(self, collection: str, data: dict) -> str:
        doc_id = db_models.new_document_id()
        try:
            async with self.session_factory() as session:
                session.add(db_models.Documents(id=doc_id, collection=collection, data=data))
                await session.commit()
        except SQLAlchemyError as e:
            log.error(f"Write to '{collection}' rejected: {e}", exc_info=True)
            raise PersistenceError(f"Failed to add document to {collection}.") from e
        log.info(f"Added document {doc_id} to '{collection}'.")
        await self._publish(collection)
        return doc_id

    async def _merge(self, collection: str, doc_id: str, fields: dict):
        try:
            async with self.session_factory() as session:
                document = await session.get(db_models.Documents, doc_id)
                if document is None or document.collection != collection:
                    log.warning(f"Tried to update non-existent document {doc_id} in '{collection}'.")
                    raise PersistenceError(f"No document {doc_id} in {collection}.")
                # reassign so the JSON column is flagged dirty
                document.data = {**(document.data or {}), **fields}
                await session.commit()
        except SQLAlchemyError as e:
            log.error(f"Update of {doc_id} in '{collection}' rejected: {e}", exc_info=True)
            raise PersistenceError(f"Failed to update document {doc_id} in {collection}.") from e
        log.info(f"Updated document {doc_id} in '{collection}' with fields {sorted(fields)}.")
        await self._publish(collection)

    async def add_student(self, student: StudentCreate) -> str:
        return await self._insert(db_models.STUDENTS, student_to_document(student))

    async def update_student(self, student_id: str, fields: StudentUpdate):
        mapped = translate_fields(fields.model_dump(exclude_none=True), STUDENT_FIELDS)
        await self._merge(db_models.STUDENTS, student_id, mapped)

    async def add_check_in(self, check_in: CheckInCreate) -> str:
        return await self._insert(db_models.CHECK_INS, check_in_to_document(check_in))

    async def update_check_in(self, check_in_id: str, fields: CheckInUpdate):
        mapped = translate_fields(fields.model_dump(exclude_none=True), CHECK_IN_FIELDS)
        await self._merge(db_models.CHECK_INS, check_in_id, mapped)

    async def add_class(self, class_data: ClassCreate) -> str:
        return await self._insert(db_models.CLASSES, class_to_document(class_data))

    async def add_teacher(self, teacher: TeacherCreate) -> str:
        return await self._insert(db_models.TEACHERS, {'name': teacher.name})

    async def add_classroom(self, classroom: ClassroomCreate) -> str:
        return await self._insert(db_models.CLASSROOMS, translate_fields(classroom.model_dump(), CLASSROOM_FIELDS))

    async def add_raw_document(self, collection: str, data: dict) -> str:
        """
        Writes a document exactly as given, stored field names included.
        Used for imports of documents written by other clients.
        """
        return await self._insert(collection, data)
