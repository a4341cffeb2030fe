"""
DocTrack Backend — Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the HTTP contract.
How:   FastAPI parses request bodies into these models and serializes
       responses through them (also feeding the OpenAPI docs).

Request bodies declare every field Optional on purpose: presence and format
are checked by the request validator, which produces the exact 400 messages
clients rely on, instead of FastAPI's generic 422.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StudentCreate(BaseModel):
    """Body of POST /add-student."""
    name: Optional[str] = Field(default=None, description="Student's full name")
    email: Optional[str] = Field(default=None, description="Address the notifications go to")
    request_type: Optional[str] = Field(
        default=None,
        description="Requested document: transcript or recommendation_letter",
    )

    @field_validator("name", "email", "request_type", mode="before")
    @classmethod
    def stringify_numbers(cls, v: Any) -> Any:
        """Numbers are taken as their text form and left to the request validator."""
        if isinstance(v, bool):
            return v
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        if isinstance(v, (int, float)):
            return str(v)
        return v


class StudentIdRequest(BaseModel):
    """Body of POST /mark-ready and DELETE /delete-student."""
    student_id: Optional[int] = Field(default=None, description="ID returned by GET /students")

    @field_validator("student_id", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        """JSON true/false is not an id."""
        if isinstance(v, bool):
            raise ValueError("student_id must be an integer")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StudentResponse(BaseModel):
    """One row of GET /students."""
    id: int
    name: str
    email: str
    request_type: str
    request_ready: bool

    model_config = {"from_attributes": True}


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    Error body returned by every handler.

    `error` carries the human message (the field existing clients read);
    `code` is the machine-readable kind.
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="validation_error, not_found, email_error, server_error")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or degraded")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
