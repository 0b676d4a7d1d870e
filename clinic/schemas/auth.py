from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
import re

from ..core.security import UserRole

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

def normalize_email(value: str) -> str:
    return value.strip().lower()

class UserRegister(BaseModel):
    email: str
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., max_length=200)
    role: UserRole = UserRole.PATIENT

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        value = normalize_email(value)
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address")
        return value

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter your full name")
        return value

    @field_validator("role")
    @classmethod
    def check_role(cls, value: UserRole) -> UserRole:
        # Admin accounts are provisioned, never self-registered
        if value == UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be created by sign-up")
        return value

class UserLogin(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)

class ProfileResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    full_name: str

    @classmethod
    def from_user(cls, user) -> "ProfileResponse":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            full_name=user.display_name,
        )

class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    full_name: Optional[str] = None
    is_active: bool
    is_demo: bool
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    profile: ProfileResponse

class RefreshTokenRequest(BaseModel):
    refresh_token: str

class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)

class DemoAccount(BaseModel):
    email: str
    password: str
    role: UserRole
    full_name: str
