import re

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime

from ..core.security import BCRYPT_MAX_BYTES

_LETTER_AND_DIGIT = re.compile(r"^(?=.*[a-zA-Z])(?=.*\d)")


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


class UserCreate(BaseModel):
    """Schema for creating a new user"""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)

    @field_validator("password")
    @classmethod
    def password_has_letter_and_digit(cls, value: str) -> str:
        if not _LETTER_AND_DIGIT.match(value):
            raise ValueError("Password must contain at least one letter and one number")
        return _check_password_bytes(value)


class UserLogin(BaseModel):
    """Schema for login credentials"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class UserResponse(BaseModel):
    """Schema for user response"""
    id: int
    email: str
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    """Schema for authentication token"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
