"""Validation schema for registration submissions."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator

from tichnuta.registration.exceptions import RegistrationValidationError

PHONE_PATTERN = re.compile(r"^[0-9+\-\s()]{9,20}$")

# Localized message per field; keyed by pydantic error type, "default" otherwise
FIELD_MESSAGES: dict[str, dict[str, str]] = {
    "name": {
        "default": "שם חייב להכיל לפחות 2 תווים",
        "string_too_long": "שם ארוך מדי",
    },
    "phone": {"default": "מספר טלפון לא תקין"},
    "email": {"default": "כתובת מייל לא תקינה"},
    "course": {"default": "יש לבחור קורס"},
    "location": {"default": "יש לבחור מיקום"},
    "grade": {
        "default": "יש למלא כיתה",
        "string_too_long": "כיתה ארוכה מדי",
    },
    "time": {"default": "יש לבחור יום ושעה"},
    "gender": {"default": "יש לבחור מגדר"},
    "learning_period": {"default": "תקופת לימוד לא תקינה"},
    "message": {"default": "הודעה ארוכה מדי"},
}


class RegistrationSubmission(BaseModel):
    """A registration ready to be stored."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=100)
    phone: str = Field(..., max_length=20)
    email: EmailStr
    course: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=255)
    grade: str = Field(..., min_length=1, max_length=20)
    time: str = Field(..., min_length=1, max_length=100)
    gender: str = Field(..., min_length=1, max_length=20)
    learning_period: str | None = Field(default=None, max_length=255)
    message: str | None = Field(default=None, max_length=2000)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.match(value) or not any(ch.isdigit() for ch in value):
            raise ValueError("invalid phone number")
        return value

    @field_validator("learning_period", "message")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return value or None


def field_errors(error: ValidationError) -> dict[str, str]:
    """Map a pydantic error to one localized message per field (first error wins)."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field = str(item["loc"][0]) if item["loc"] else "__root__"
        if field in errors:
            continue
        messages = FIELD_MESSAGES.get(field, {})
        errors[field] = messages.get(item["type"], messages.get("default", item["msg"]))
    return errors


def validate_registration(values: Mapping[str, Any]) -> RegistrationSubmission:
    """Validate raw form values.

    Raises:
        RegistrationValidationError: With localized messages per invalid field.
    """
    try:
        return RegistrationSubmission.model_validate(dict(values))
    except ValidationError as e:
        raise RegistrationValidationError(field_errors(e)) from e
