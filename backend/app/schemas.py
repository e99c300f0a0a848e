"""Pydantic schemas shared by the stores and the HTTP layer."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class StudentPayload(BaseModel):
    """
    Request body for creating or updating a student.

    Every field is optional here so that missing values reach the store,
    which reports them as a validation failure (HTTP 400). The semester may
    arrive as `sem`, `semester` or the legacy `class`; the store picks one.
    """
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    usn: Optional[str] = None
    sem: Optional[str] = None
    semester: Optional[str] = None
    class_: Optional[str] = Field(None, alias="class")

    def to_data(self) -> dict:
        """Fields actually sent by the client, keyed by their wire names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class StudentRecord(BaseModel):
    """A stored student as returned by either store."""
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    name: str
    usn: str
    sem: str
    created_at: Optional[datetime] = None


class StudentFilter(BaseModel):
    """
    Filters for listing students. Unset fields do not filter.

    - name: case-insensitive substring
    - usn: exact match
    - sem: exact match
    """
    name: Optional[str] = None
    usn: Optional[str] = None
    sem: Optional[str] = None
