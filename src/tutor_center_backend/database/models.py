from typing import Optional

from sqlalchemy import DateTime, Index, JSON, PrimaryKeyConstraint, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
import datetime
import uuid


class Base(DeclarativeBase):
    pass


# Collection names as stored
STUDENTS = 'students'
CHECK_INS = 'checkins'
CLASSES = 'classes'
TEACHERS = 'teachers'
CLASSROOMS = 'classrooms'

COLLECTIONS = (STUDENTS, CHECK_INS, CLASSES, TEACHERS, CLASSROOMS)


def new_document_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Documents(Base):
    """
    One schemaless document inside a named collection.
    Field names inside `data` are the stored names, not the domain names.
    """
    __tablename__ = 'documents'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='documents_pkey'),
        Index('idx_documents_collection', 'collection'),
    )

    id: Mapped[str] = mapped_column(String(64), default=new_document_id)
    collection: Mapped[str] = mapped_column(String(64))
    data: Mapped[dict] = mapped_column(JSON, default=dict)
    # microsecond resolution keeps snapshot order equal to insertion order
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utc_now)
    updated_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True), onupdate=utc_now)
