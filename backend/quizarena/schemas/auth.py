from typing import Optional

from pydantic import EmailStr, Field

from .base import CamelModel


class SignupRequest(CamelModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    role: Optional[str] = None


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class AdminSignupRequest(CamelModel):
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class SubAdminCreate(AdminSignupRequest):
    pass
