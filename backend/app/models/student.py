"""
Student model - the single table behind the durable student store.

Rows are identified by UUID. The `class` column is the legacy name of the
semester field; older rows may carry a value there and nothing in `sem`.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String
from app.database import Base
from app.services.normalize import USN_MAX_LENGTH


class Student(Base):
    """SQLAlchemy model for the students table."""
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier")
    name = Column(Text, nullable=False,
                  doc="Student's full name")
    usn = Column(String(USN_MAX_LENGTH), nullable=False, unique=True, index=True,
                 doc="University seat number, unique per student")
    sem = Column(Text, nullable=True,
                 doc="Semester")
    legacy_class = Column("class", Text, nullable=True,
                          doc="Semester under its legacy column name")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the student record was created")

    @property
    def semester(self):
        """Semester value, falling back to the legacy column."""
        return self.sem or self.legacy_class

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', usn='{self.usn}')>"
