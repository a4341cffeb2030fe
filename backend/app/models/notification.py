"""
DocTrack Backend — Notification Record Model
==============================================

What:  ORM model for the `notifications` table, an append-only record of
       "document ready" emails that reached the mail relay.
When:  One row is written per successful MarkReady email; rows are never
       updated or deleted.

student_id is a plain integer column rather than a foreign key so that
deleting a student request never fails or cascades because of its history.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    email_sent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    # Copied from the student row at send time
    request_type: Mapped[str] = mapped_column(String(32), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, student_id={self.student_id}, "
            f"sent_at='{self.sent_at}')>"
        )
