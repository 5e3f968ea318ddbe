'''
Class creation service: the validate-and-forward step in front of the store.
'''
from typing import Annotated, Any

from fastapi import Depends
from pydantic import ValidationError

from ..common.exceptions import ClassValidationError
from ..common.logger import log
from ..database.engine import get_store
from ..database.store import TutoringStore
from ..models.classes import ClassCreate

REQUIRED_FIELDS = ("classroom", "name", "teacher", "startDate", "endDate")
LIST_FIELDS = ("recurrence", "students")
MISSING_FIELDS_MESSAGE = "Missing required fields"


def validate_class_payload(data: Any) -> ClassCreate:
    """
    Checks a raw creation payload the way the endpoint receives it (camelCase
    keys). Any missing or empty required field, or a recurrence/students value
    that is not a list, rejects the whole payload. Anything else is forwarded
    as sent, with scalar values and student ids turned into strings.
    """
    if not isinstance(data, dict):
        raise ClassValidationError(MISSING_FIELDS_MESSAGE)
    if any(not data.get(field) for field in REQUIRED_FIELDS):
        raise ClassValidationError(MISSING_FIELDS_MESSAGE)
    if any(not isinstance(data.get(field), list) for field in LIST_FIELDS):
        raise ClassValidationError(MISSING_FIELDS_MESSAGE)
    try:
        return ClassCreate(
            classroom=str(data["classroom"]),
            name=str(data["name"]),
            teacher=str(data["teacher"]),
            recurrence=data["recurrence"],
            start_date=str(data["startDate"]),
            end_date=str(data["endDate"]),
            students=[str(student) for student in data["students"]],
        )
    except ValidationError as e:
        log.warning(f"Class payload failed validation: {e}")
        raise ClassValidationError(MISSING_FIELDS_MESSAGE) from e


class ClassService:
    """
    Creates class definitions. No availability or conflict checks are made.
    """
    def __init__(self, store: Annotated[TutoringStore, Depends(get_store)]):
        self.store = store

    async def create_class_from_payload(self, data: Any) -> str:
        class_data = validate_class_payload(data)
        return await self.create_class(class_data)

    async def create_class(self, class_data: ClassCreate) -> str:
        log.info(f"Creating class '{class_data.name}' in {class_data.classroom} with {len(class_data.recurrence)} weekly slots.")
        return await self.store.add_class(class_data)
