"""
Request and response models for the auth endpoints.

Emails are trimmed and lowercased so each address maps to one account.
Field checks raise errors of type ``field`` with a message meant for the end
user. Each field reports only its first failing check, and fields are checked
in declaration order, so the error list is stable for a given payload.
"""
from typing import Any, Dict, List, Optional, Sequence

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

MIN_PASSWORD_LENGTH = 8
# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def _require_text(value: Any, message: str) -> str:
    if value is None:
        raise PydanticCustomError("field", message)
    if not isinstance(value, str):
        raise PydanticCustomError("field", "Value must be a string")
    if not value.strip():
        raise PydanticCustomError("field", message)
    return value


def _check_email(value: Any) -> str:
    email = _require_text(value, "Email is required!").strip().lower()
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise PydanticCustomError("field", "Email should be a valid email")
    return email


class RegisterRequest(BaseModel):
    """Model for user registration."""
    model_config = ConfigDict(populate_by_name=True)

    first_name: Optional[str] = Field(default=None, alias="firstName", validate_default=True)
    last_name: Optional[str] = Field(default=None, alias="lastName", validate_default=True)
    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("first_name", mode="before")
    @classmethod
    def first_name_required(cls, v):
        return _require_text(v, "First name is required!")

    @field_validator("last_name", mode="before")
    @classmethod
    def last_name_required(cls, v):
        return _require_text(v, "Last name is required!")

    @field_validator("email", mode="before")
    @classmethod
    def email_must_be_valid(cls, v):
        return _check_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def password_must_be_long_enough(cls, v):
        v = _require_text(v, "Password is required!")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "field", "Password length should be at least 8 chars!"
            )
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise PydanticCustomError(
                "field", "Password should be at most 72 bytes long!"
            )
        return v


class LoginRequest(BaseModel):
    """Model for user login."""

    email: Optional[str] = Field(default=None, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email", mode="before")
    @classmethod
    def email_must_be_valid(cls, v):
        return _check_email(v)

    @field_validator("password", mode="before")
    @classmethod
    def password_required(cls, v):
        return _require_text(v, "Password is required!")


class UserOut(BaseModel):
    """Model for user information returned to clients."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    role: str


class UserCreated(BaseModel):
    id: int


def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[Dict[str, str]]:
    """
    Convert pydantic error dicts into the client-facing error items.

    Args:
        errors: Output of ``RequestValidationError.errors()``

    Returns:
        List of ``{type, msg, path, location}`` dicts, in the order given
    """
    items = []
    for err in errors:
        loc = err.get("loc") or ()
        location = str(loc[0]) if loc else ""
        path = ".".join(str(part) for part in loc[1:])
        items.append({
            "type": "field",
            "msg": err.get("msg", "Invalid value"),
            "path": path,
            "location": location,
        })
    return items
