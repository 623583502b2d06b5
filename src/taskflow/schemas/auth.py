"""Pydantic schemas for registration, login and the public user projection.

UserRead is the only shape a user ever leaves the API in: id, email and
role. The password hash never appears in a response.
"""

import uuid

from pydantic import BaseModel, EmailStr, Field, field_validator

from taskflow.db.models import UserRole


def normalize_email(email: str) -> str:
    return email.strip().lower()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

    @field_validator("email")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_email(v)


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"
    data: UserRead


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    data: UserRead
