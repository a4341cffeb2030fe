"""
DocTrack Backend — Student Service (Registry)
===============================================

What:  Business logic for the four registry operations: register, list,
       mark ready, delete.
How:   Each operation runs one statement through the request's session,
       commits it, and then (for register and mark ready) asks the notifier
       to email the student.
Who:   Called by the student route handlers with an injected session and
       notifier.

Write-then-notify ordering:
    register   INSERT → COMMIT → email            (email failure → 500, row kept)
    mark_ready UPDATE → COMMIT → email → INSERT notification on success
                                                   (email failure → 500, flag kept,
                                                    no notification row)
    delete     DELETE → COMMIT → log line

The primary write is committed before the email is attempted, so a failed
email is reported to the client while the write stays persisted.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    DatabaseError,
    DocTrackError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from app.models.notification import Notification
from app.models.student import RequestType, StudentRequest
from app.services.notifier import Notifier, ready_email, received_email
from app.services.validation import validate_student_request

logger = logging.getLogger(__name__)

DUPLICATE_REQUEST_MESSAGE = "Request already exists for this student."
MISSING_ID_MESSAGE = "Student ID is required."

# Largest value the INTEGER id column holds
MAX_STUDENT_ID = 2**31 - 1


class StudentService:
    """
    Registry operations over the `students` and `notifications` tables.

    Stateless: the session and notifier arrive with every call.
    """

    async def register(
        self,
        db: AsyncSession,
        notifier: Notifier,
        name: Optional[str],
        email: Optional[str],
        request_type: Optional[str],
    ) -> StudentRequest:
        """
        Register a new document request and send the confirmation email.

        Raises:
            ValidationError: invalid input or duplicate (email, request_type)
            NotificationError: the row was stored but the email failed
            DatabaseError: query or commit failed
        """
        kind = validate_student_request(name, email, request_type)

        try:
            result = await db.execute(
                select(StudentRequest.id).where(
                    StudentRequest.email == email,
                    StudentRequest.request_type == kind.value,
                )
            )
            if result.first() is not None:
                raise ValidationError(message=DUPLICATE_REQUEST_MESSAGE)

            student = StudentRequest(
                name=name,
                email=email,
                request_type=kind.value,
                request_ready=False,
            )
            db.add(student)
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same pair
            await db.rollback()
            raise ValidationError(message=DUPLICATE_REQUEST_MESSAGE)
        except DocTrackError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", email, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "register", "error_type": type(e).__name__})

        logger.info("Registered student request %s (%s, %s)", student.id, email, kind.value)

        subject, body = received_email(name, kind)
        sent = await notifier.send(email, subject, body)
        if not sent:
            raise NotificationError(
                context={"student_id": student.id, "delivery_status": sent.status.value},
            )
        return student

    async def list_students(self, db: AsyncSession) -> List[StudentRequest]:
        """Return every student request, ordered by id."""
        try:
            result = await db.execute(select(StudentRequest).order_by(StudentRequest.id))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to fetch students: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch students",
                context={"operation": "list", "error_type": type(e).__name__},
            )

    async def mark_ready(
        self,
        db: AsyncSession,
        notifier: Notifier,
        student_id: Optional[int],
    ) -> Notification:
        """
        Flag a request as ready, email the student, and record the notification.

        Returns:
            The notification record written after the email went out.

        Raises:
            ValidationError: student_id missing
            NotFoundError: no request with that id
            NotificationError: flag set but the email failed (no record written)
            DatabaseError: query or commit failed
        """
        if student_id is None:
            raise ValidationError(message=MISSING_ID_MESSAGE, field="student_id")

        student = await self._get(db, student_id)
        try:
            student.request_ready = True
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to mark student %s ready: %s", student_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "mark_ready", "student_id": student_id})

        subject, body = ready_email(student.name, RequestType(student.request_type))
        sent = await notifier.send(student.email, subject, body)
        if not sent:
            raise NotificationError(
                context={"student_id": student_id, "delivery_status": sent.status.value},
            )

        notification = Notification(
            student_id=student.id,
            email_sent=True,
            request_type=student.request_type,
        )
        try:
            db.add(notification)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Email sent but notification record for student %s not saved: %s",
                student_id,
                str(e),
                exc_info=True,
            )
            raise DatabaseError(context={"operation": "record_notification", "student_id": student_id})

        logger.info("Student request %s marked ready", student_id)
        return notification

    async def delete(self, db: AsyncSession, student_id: Optional[int]) -> StudentRequest:
        """
        Hard-delete a request. The deleted row's fields are logged.

        Raises:
            ValidationError: student_id missing
            NotFoundError: no request with that id
            DatabaseError: delete or commit failed
        """
        if student_id is None:
            raise ValidationError(message=MISSING_ID_MESSAGE, field="student_id")

        student = await self._get(db, student_id)
        try:
            await db.delete(student)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete student %s: %s", student_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "delete", "student_id": student_id})

        logger.info("Deleted student request: %s", student.to_log_fields())
        return student

    async def _get(self, db: AsyncSession, student_id: int) -> StudentRequest:
        if not 1 <= student_id <= MAX_STUDENT_ID:
            raise NotFoundError(resource_id=student_id)
        try:
            result = await db.execute(
                select(StudentRequest).where(StudentRequest.id == student_id)
            )
            student = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching student %s: %s", student_id, str(e))
            raise DatabaseError(context={"operation": "get", "student_id": student_id})

        if student is None:
            raise NotFoundError(resource_id=student_id)
        return student


student_service = StudentService()
