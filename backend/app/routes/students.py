"""
Student API routes - create, read, update and delete student records.

Each handler decodes the request, makes one store call and maps the
outcome to a response:
- ValidationError / ConflictError → 400
- NotFoundError → 404
- BackendError → 500 on reads, 400 on writes
"""

import time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.errors import NotFoundError, StoreError
from app.schemas import StudentFilter, StudentPayload, StudentRecord
from app.services.storage import get_store
from app.services.student_store import StudentStore
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


def serialize_student(student: StudentRecord) -> dict:
    """Serialize a StudentRecord for an API response."""
    result = {
        "id": student.id,
        "_id": student.id,
        "name": student.name,
        "usn": student.usn,
        "sem": student.sem,
    }
    if student.created_at is not None:
        result["createdAt"] = student.created_at.isoformat()
    return result


def _http_error(exc: StoreError, status_code: int) -> HTTPException:
    """404 for unknown students, `status_code` for everything else."""
    if isinstance(exc, NotFoundError):
        status_code = 404
    log_with_context(logger, "WARNING",
        "Student request failed: {}".format(exc.message),
        extra_data={"error": type(exc).__name__, "status_code": status_code})
    return HTTPException(status_code=status_code, detail=exc.message)


@router.get("/api/students")
@router.get("/api/students/", include_in_schema=False)
def list_students(
    name: Optional[str] = Query(None, description="Case-insensitive name search"),
    usn: Optional[str] = Query(None, description="Exact USN"),
    sem: Optional[str] = Query(None, description="Exact semester"),
    store: StudentStore = Depends(get_store)
):
    """List students, optionally filtered by name, usn and sem."""
    start_time = time.time()
    filters = StudentFilter(name=name or None, usn=usn or None, sem=sem or None)

    try:
        students = store.list(filters)
    except StoreError as exc:
        raise _http_error(exc, 500)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO",
        "Listed {} students".format(len(students)),
        extra_data={"duration_ms": round(duration_ms, 2),
                    "filters": filters.model_dump(exclude_none=True)})

    return [serialize_student(s) for s in students]


@router.get("/api/students/{student_id}")
def get_student(student_id: str, store: StudentStore = Depends(get_store)):
    """Get a single student by identifier."""
    try:
        student = store.get(student_id)
    except StoreError as exc:
        raise _http_error(exc, 500)
    return serialize_student(student)


@router.post("/api/students", status_code=201)
@router.post("/api/students/", status_code=201, include_in_schema=False)
def create_student(payload: StudentPayload, store: StudentStore = Depends(get_store)):
    """Create a student. `class` and `semester` are accepted in place of `sem`."""
    try:
        student = store.create(payload.to_data())
    except StoreError as exc:
        raise _http_error(exc, 400)

    return {"message": "Student added", "student": serialize_student(student)}


@router.put("/api/students/{student_id}")
def update_student(student_id: str, payload: StudentPayload,
                   store: StudentStore = Depends(get_store)):
    """Replace the name, usn and sem of an existing student."""
    try:
        student = store.update(student_id, payload.to_data())
    except StoreError as exc:
        raise _http_error(exc, 400)

    return {"message": "Student updated", "updated": serialize_student(student)}


@router.delete("/api/students/{student_id}")
def delete_student(student_id: str, store: StudentStore = Depends(get_store)):
    """Delete a student and return the removed record."""
    try:
        student = store.delete(student_id)
    except StoreError as exc:
        raise _http_error(exc, 400)

    return {"message": "Student deleted", "deleted": serialize_student(student)}
