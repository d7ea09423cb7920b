"""User model definitions."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class Role(str, Enum):
    """Mutually exclusive user roles. A user without a stored role is ``none``."""

    NONE = "none"
    ADMIN = "admin"
    SURVEYOR = "surveyor"
    PROUSER = "prouser"


def stored_role(user: dict | None) -> Role:
    if not user:
        return Role.NONE
    try:
        return Role(user.get("role") or Role.NONE.value)
    except ValueError:
        return Role.NONE


class UserCreate(BaseModel):
    """Profile document submitted on sign up. Extra profile fields are stored as-is."""

    model_config = ConfigDict(extra="allow")

    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Email is required.")
        return normalized


class TokenRequest(BaseModel):
    """Identity claim submitted to obtain a session token."""

    model_config = ConfigDict(extra="allow")

    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Email is required.")
        return normalized
