"""
In-process student store used when no database is reachable.

Records live in a dict keyed by an integer identifier handed out by a
counter starting at 1. A single lock guards both the dict and the counter;
FastAPI runs the synchronous handlers on a thread pool, so concurrent
requests really do meet here.
"""

import threading
from typing import Any, Dict, List, Mapping, Optional

from app.errors import ConflictError, NotFoundError
from app.logging_config import get_logger, log_with_context
from app.schemas import StudentFilter, StudentRecord
from app.services.normalize import name_matches, normalize_student_data
from app.services.student_store import (
    DUPLICATE_USN_MESSAGE, NOT_FOUND_MESSAGE, StudentId, StudentStore
)

logger = get_logger("store")


def _parse_id(student_id: StudentId) -> Optional[int]:
    """Identifiers arrive as path strings; anything non-numeric cannot exist."""
    if isinstance(student_id, int):
        return student_id
    text = str(student_id).strip()
    # isdigit() alone admits non-ASCII digits such as "²" or "١"
    return int(text) if text.isascii() and text.isdigit() else None


class MemoryStudentStore(StudentStore):
    """Volatile store; everything is lost when the process exits."""

    durable = False

    def __init__(self):
        self._lock = threading.Lock()
        self._students: Dict[int, StudentRecord] = {}
        self._next_id = 1

    def _usn_taken(self, usn: str, exclude_id: Optional[int] = None) -> bool:
        return any(
            s.usn == usn and s.id != exclude_id
            for s in self._students.values()
        )

    def _require(self, student_id: StudentId) -> StudentRecord:
        key = _parse_id(student_id)
        student = self._students.get(key) if key is not None else None
        if student is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return student

    def create(self, data: Mapping[str, Any]) -> StudentRecord:
        fields = normalize_student_data(data)
        with self._lock:
            if self._usn_taken(fields["usn"]):
                raise ConflictError(DUPLICATE_USN_MESSAGE)
            student = StudentRecord(id=self._next_id, **fields)
            self._next_id += 1
            self._students[student.id] = student

        log_with_context(logger, "INFO", "Student created in memory",
                         context={"student_id": student.id, "usn": student.usn})
        return student

    def list(self, filters: Optional[StudentFilter] = None) -> List[StudentRecord]:
        with self._lock:
            students = list(self._students.values())

        if filters is None:
            return students
        if filters.name:
            students = [s for s in students if name_matches(s.name, filters.name)]
        if filters.usn:
            students = [s for s in students if s.usn == filters.usn]
        if filters.sem:
            students = [s for s in students if s.sem == filters.sem]
        return students

    def get(self, student_id: StudentId) -> StudentRecord:
        with self._lock:
            return self._require(student_id)

    def update(self, student_id: StudentId, data: Mapping[str, Any]) -> StudentRecord:
        with self._lock:
            current = self._require(student_id)
            fields = normalize_student_data(data)
            if self._usn_taken(fields["usn"], exclude_id=current.id):
                raise ConflictError(DUPLICATE_USN_MESSAGE)
            updated = current.model_copy(update=fields)
            self._students[current.id] = updated

        log_with_context(logger, "INFO", "Student updated in memory",
                         context={"student_id": updated.id, "usn": updated.usn})
        return updated

    def delete(self, student_id: StudentId) -> StudentRecord:
        with self._lock:
            student = self._require(student_id)
            del self._students[student.id]

        log_with_context(logger, "INFO", "Student deleted from memory",
                         context={"student_id": student.id, "usn": student.usn})
        return student
