from datetime import datetime, timezone
from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, EmailStr, Field
from pydantic.alias_generators import to_camel


def as_utc(value: datetime) -> datetime:
    """Stored datetimes are naive UTC; mark them so they serialize with a Z suffix."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base schema speaking camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)


class VerifyOtpRequest(CamelModel):
    # Named userId on the wire; it carries the temporary registration id
    user_id: str = Field(..., min_length=1)
    entered_otp: str = Field(..., min_length=1, max_length=12)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserPublic(CamelModel):
    """The projection returned to the client; never includes the password."""
    id: str
    name: str
    is_admin: bool
    is_approved: bool
    is_email_verified: bool


class UserAdminView(CamelModel):
    id: str
    name: str
    email: str
    is_admin: bool
    is_approved: bool
    otp: Optional[str] = None
    otp_expires_at: Optional[UtcDatetime] = None
    is_email_verified: bool


class RegisterResponse(CamelModel):
    message: str
    user_id: str


class AuthResponse(CamelModel):
    message: str
    user: UserPublic


class MessageResponse(CamelModel):
    message: str
