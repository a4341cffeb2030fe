"""
DocTrack Backend — Student Route Handlers
===========================================

What:  The four registry endpoints.
How:   Parse the JSON body, hand it to StudentService together with the
       injected session and notifier, return a message or the row list.
       Errors are raised as DocTrackError subclasses and turned into
       responses by the handlers in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.student import (
    ErrorResponse,
    MessageResponse,
    StudentCreate,
    StudentIdRequest,
    StudentResponse,
)
from app.services.notifier import Notifier, get_notifier
from app.services.student_service import student_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Students"])


@router.post(
    "/add-student",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing/invalid fields or duplicate request", "model": ErrorResponse},
        500: {"description": "Email or database failure", "model": ErrorResponse},
    },
    summary="Register a document request and send the confirmation email",
)
async def add_student(
    payload: Optional[StudentCreate] = None,
    db: AsyncSession = Depends(get_db_session),
    notifier: Notifier = Depends(get_notifier),
) -> MessageResponse:
    payload = payload or StudentCreate()
    await student_service.register(
        db=db,
        notifier=notifier,
        name=payload.name,
        email=payload.email,
        request_type=payload.request_type,
    )
    return MessageResponse(message="Student added and confirmation email sent!")


@router.get(
    "/students",
    response_model=List[StudentResponse],
    responses={500: {"description": "Database failure", "model": ErrorResponse}},
    summary="List every document request",
)
async def list_students(
    db: AsyncSession = Depends(get_db_session),
) -> List[StudentResponse]:
    students = await student_service.list_students(db)
    return [StudentResponse.model_validate(s) for s in students]


@router.post(
    "/mark-ready",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing student_id", "model": ErrorResponse},
        404: {"description": "Unknown student_id", "model": ErrorResponse},
        500: {"description": "Email or database failure", "model": ErrorResponse},
    },
    summary="Flag a request as ready and email the student",
)
async def mark_ready(
    payload: Optional[StudentIdRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    notifier: Notifier = Depends(get_notifier),
) -> MessageResponse:
    payload = payload or StudentIdRequest()
    await student_service.mark_ready(db=db, notifier=notifier, student_id=payload.student_id)
    return MessageResponse(message="Student marked as ready and notification email sent!")


@router.delete(
    "/delete-student",
    response_model=MessageResponse,
    responses={
        400: {"description": "Missing student_id", "model": ErrorResponse},
        404: {"description": "Unknown student_id", "model": ErrorResponse},
        500: {"description": "Database failure", "model": ErrorResponse},
    },
    summary="Delete a document request",
)
async def delete_student(
    payload: Optional[StudentIdRequest] = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    payload = payload or StudentIdRequest()
    await student_service.delete(db=db, student_id=payload.student_id)
    return MessageResponse(message="Student deleted successfully.")
