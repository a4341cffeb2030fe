"""
DocTrack Backend — Student Request Model
==========================================

What:  ORM model for the `students` table: one row per document request.
Who:   Used by StudentService for all four registry operations and by Alembic.

Table Design:
    - Integer autoincrement id: clients address rows by this value
      (`student_id` in the request bodies)
    - request_type stored as its string value ("transcript",
      "recommendation_letter")
    - UNIQUE (email, request_type): a student may hold one open request
      per document type
"""

import enum

from sqlalchemy import Boolean, Integer, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class RequestType(str, enum.Enum):
    """The two kinds of document a student can request."""

    TRANSCRIPT = "transcript"
    RECOMMENDATION_LETTER = "recommendation_letter"

    @property
    def label(self) -> str:
        """Human wording used in email subjects and bodies."""
        return self.value.replace("_", " ")


class StudentRequest(Base):
    """
    A student's request for a transcript or recommendation letter.

    Lifecycle:
        1. Created on registration with request_ready = False
        2. request_ready set to True when the document is prepared
        3. Hard-deleted on explicit removal
    """

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    request_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="transcript or recommendation_letter",
    )

    request_ready: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    __table_args__ = (
        UniqueConstraint("email", "request_type", name="uq_students_email_request_type"),
    )

    def to_log_fields(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "request_type": self.request_type,
            "request_ready": self.request_ready,
        }

    def __repr__(self) -> str:
        return (
            f"<StudentRequest(id={self.id}, email='{self.email}', "
            f"request_type='{self.request_type}', ready={self.request_ready})>"
        )
