import re
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

from expense_app.models.platform import COUNTRIES, Platform

PASSWORD_HINT = (
    "Password must be at least 8 characters with a number, "
    "a lowercase character, and an uppercase character."
)


class Token(BaseModel):
    """Access token"""
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    """Login request"""
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    """Registration request"""
    email: EmailStr
    password: str
    country: str = "US"

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        if (
            len(v) < 8
            or not re.search(r"\d", v)
            or not re.search(r"[a-z]", v)
            or not re.search(r"[A-Z]", v)
        ):
            raise ValueError(PASSWORD_HINT)
        return v

    @field_validator('country')
    @classmethod
    def validate_country(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in COUNTRIES:
            raise ValueError(f"Unsupported country: {v}")
        return v


class UserResponse(BaseModel):
    """User data returned to the client"""
    id: int
    email: str
    country: str
    platform: Platform
    stripe_account_id: Optional[str] = None
    stripe_publishable_key: Optional[str] = None

    class Config:
        from_attributes = True
