"""User and authentication models."""

from pydantic import BaseModel, EmailStr, field_validator

from docshelf.db.models import Role
from docshelf.models.common import CamelModel


class AuthorSummary(CamelModel):
    """Public author fields embedded in documents and comments."""

    id: str
    name: str
    email: str


class UserResponse(CamelModel):
    """The signed-in user."""

    id: str
    name: str
    email: str
    role: Role


class RegisterRequest(BaseModel):
    email: EmailStr
    name: str
    password: str

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not any(c.isalpha() for c in v):
            raise ValueError("Password must contain at least one letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one number")
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    token: str


class AuthToken(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: Role
