"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def _normalize_email(value: str | None) -> str | None:
    return value.strip().lower() if value is not None else None


class UserRegister(BaseModel):
    """User registration request."""

    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)

    normalize_email = field_validator("email")(_normalize_email)


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    normalize_email = field_validator("email")(_normalize_email)


class UserUpdate(BaseModel):
    """Change the current user's email and/or password."""

    email: EmailStr | None = None
    password: str | None = Field(None, min_length=6, max_length=128)

    normalize_email = field_validator("email")(_normalize_email)


class UserResponse(BaseModel):
    """User information response. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class AuthData(BaseModel):
    """Payload returned by register and login."""

    user: UserResponse
    token: str
