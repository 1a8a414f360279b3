"""Pydantic request / response models for the auth endpoints."""

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

# JSON keys are camelCase on the wire; snake_case is accepted on input too
_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


# -- Requests --------------------------------------------------------------


class RegisterRequest(BaseModel):
    username: str = Field(max_length=64)
    password: str
    email: Optional[str] = Field(default=None, max_length=255)

    @field_validator("username")
    @classmethod
    def _username_present(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v

    @field_validator("password")
    @classmethod
    def _password_policy(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Password is required")
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @field_validator("email")
    @classmethod
    def _email_format(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address")
        return v


class LoginRequest(BaseModel):
    username: str
    password: str

    @field_validator("username")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


# -- Responses -------------------------------------------------------------


class UserSummary(BaseModel):
    """Public view of a user; the password hash is never part of it."""

    id: int
    username: str
    email: Optional[str] = None
    role: str

    model_config = {"from_attributes": True}


class RegisterResult(BaseModel):
    user_id: int

    model_config = _CAMEL


class LoginResult(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserSummary

    model_config = _CAMEL


class VerifyResult(BaseModel):
    user: UserSummary
