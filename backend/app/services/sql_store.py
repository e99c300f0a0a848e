"""
Durable student store on top of SQLAlchemy.

Each operation opens its own session and commits once, so every create,
update and delete is a single database transaction. The unique index on
`usn` backs up the explicit duplicate check when two requests race.
"""

from contextlib import contextmanager
from datetime import timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.database import make_session_factory
from app.errors import BackendError, ConflictError, NotFoundError
from app.logging_config import get_logger, log_with_context
from app.models.student import Student
from app.schemas import StudentFilter, StudentRecord
from app.services.normalize import name_matches, normalize_student_data
from app.services.student_store import (
    DUPLICATE_USN_MESSAGE, NOT_FOUND_MESSAGE, StudentId, StudentStore
)

logger = get_logger("store")


def to_record(student: Student) -> StudentRecord:
    """Convert an ORM row into a StudentRecord, resolving the legacy column."""
    created_at = student.created_at
    # SQLite hands back naive datetimes; every timestamp is written in UTC
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return StudentRecord(
        id=student.id,
        name=student.name,
        usn=student.usn,
        sem=student.semester or "",
        created_at=created_at,
    )


class SQLStudentStore(StudentStore):
    """Store backed by the `students` table."""

    durable = True

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    @contextmanager
    def _session(self):
        """Yield a session; translate driver failures into store errors."""
        session: Session = self._session_factory()
        try:
            yield session
        except IntegrityError as exc:
            session.rollback()
            raise ConflictError(DUPLICATE_USN_MESSAGE) from exc
        except SQLAlchemyError as exc:
            session.rollback()
            log_with_context(logger, "ERROR", f"Database operation failed: {exc}")
            raise BackendError(str(exc)) from exc
        finally:
            session.close()

    @staticmethod
    def _usn_taken(session: Session, usn: str, exclude_id: Optional[str] = None) -> bool:
        query = session.query(Student.id).filter(Student.usn == usn)
        if exclude_id is not None:
            query = query.filter(Student.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def _require(session: Session, student_id: StudentId) -> Student:
        student = session.get(Student, str(student_id))
        if student is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return student

    def create(self, data: Mapping[str, Any]) -> StudentRecord:
        fields = normalize_student_data(data)
        with self._session() as session:
            if self._usn_taken(session, fields["usn"]):
                raise ConflictError(DUPLICATE_USN_MESSAGE)
            student = Student(**fields)
            session.add(student)
            session.commit()
            record = to_record(student)

        log_with_context(logger, "INFO", "Student created",
                         context={"student_id": record.id, "usn": record.usn})
        return record

    def list(self, filters: Optional[StudentFilter] = None) -> List[StudentRecord]:
        filters = filters or StudentFilter()
        with self._session() as session:
            query = session.query(Student)
            if filters.usn:
                query = query.filter(Student.usn == filters.usn)
            if filters.sem:
                query = query.filter(func.coalesce(Student.sem, Student.legacy_class) == filters.sem)
            students = [to_record(s) for s in query.all()]

        # Database LOWER()/ILIKE folding differs per dialect (SQLite folds
        # ASCII only), so the name search runs here like in the memory store
        if filters.name:
            students = [s for s in students if name_matches(s.name, filters.name)]
        return students

    def get(self, student_id: StudentId) -> StudentRecord:
        with self._session() as session:
            return to_record(self._require(session, student_id))

    def update(self, student_id: StudentId, data: Mapping[str, Any]) -> StudentRecord:
        with self._session() as session:
            student = self._require(session, student_id)
            fields = normalize_student_data(data)
            if self._usn_taken(session, fields["usn"], exclude_id=student.id):
                raise ConflictError(DUPLICATE_USN_MESSAGE)
            student.name = fields["name"]
            student.usn = fields["usn"]
            student.sem = fields["sem"]
            session.commit()
            record = to_record(student)

        log_with_context(logger, "INFO", "Student updated",
                         context={"student_id": record.id, "usn": record.usn})
        return record

    def delete(self, student_id: StudentId) -> StudentRecord:
        with self._session() as session:
            student = self._require(session, student_id)
            record = to_record(student)
            session.delete(student)
            session.commit()

        log_with_context(logger, "INFO", "Student deleted",
                         context={"student_id": record.id, "usn": record.usn})
        return record

    def close(self):
        self.engine.dispose()
