"""
DocTrack Backend — Request Validator
======================================

Pure checks for a registration body. No I/O, no state.
"""

import re
from typing import Optional

from app.exceptions import ValidationError
from app.models.student import RequestType

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS_MESSAGE = "Name, email, and request type are required"
INVALID_EMAIL_MESSAGE = "Invalid email format"
INVALID_REQUEST_TYPE_MESSAGE = "Invalid request type."


def is_valid_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_student_request(
    name: Optional[str],
    email: Optional[str],
    request_type: Optional[str],
) -> RequestType:
    """
    Check a registration body and return the parsed request type.

    Checks run in order and the first failure wins:
        1. name, email and request_type all present and non-empty
        2. email matches local@domain.tld
        3. request_type is a known RequestType value

    Raises:
        ValidationError: with the client-facing message for the failed check
    """
    if not name or not email or not request_type:
        raise ValidationError(message=MISSING_FIELDS_MESSAGE)
    if not is_valid_email(email):
        raise ValidationError(message=INVALID_EMAIL_MESSAGE, field="email")
    try:
        return RequestType(request_type)
    except ValueError:
        raise ValidationError(
            message=INVALID_REQUEST_TYPE_MESSAGE,
            field="request_type",
            context={"allowed": [t.value for t in RequestType]},
        )
