"""
The record store contract shared by the durable and in-memory backends.

Route handlers only ever talk to a StudentStore. Which implementation
they get is decided once at startup by app.services.storage.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Union

from app.schemas import StudentFilter, StudentRecord

StudentId = Union[int, str]

NOT_FOUND_MESSAGE = "Student not found"
DUPLICATE_USN_MESSAGE = "Student with this USN already exists"


class StudentStore(ABC):
    """
    CRUD over student records.

    Implementations must raise the errors from app.errors:
    ValidationError for missing fields, ConflictError for a USN that is
    already taken, NotFoundError for unknown identifiers and BackendError
    for unexpected storage failures.
    """

    #: True when records survive a process restart
    durable: bool = False

    @property
    def mode(self) -> str:
        return "durable" if self.durable else "memory"

    @abstractmethod
    def create(self, data: Mapping[str, Any]) -> StudentRecord:
        """Validate and store a new student; return it with its identifier."""

    @abstractmethod
    def list(self, filters: Optional[StudentFilter] = None) -> List[StudentRecord]:
        """Return the students matching every filter that is set."""

    @abstractmethod
    def get(self, student_id: StudentId) -> StudentRecord:
        """Return one student or raise NotFoundError."""

    @abstractmethod
    def update(self, student_id: StudentId, data: Mapping[str, Any]) -> StudentRecord:
        """Replace name, usn and sem of an existing student."""

    @abstractmethod
    def delete(self, student_id: StudentId) -> StudentRecord:
        """Remove a student and return the removed record."""

    def close(self):
        """Release backend resources. No-op unless overridden."""
