"""User model for the chat application - created only after OTP verification."""

import uuid
from sqlalchemy import Column, String, DateTime, Boolean

from app.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    is_admin = Column(Boolean, default=False, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    is_email_verified = Column(Boolean, default=False, nullable=False)
    # Kept for the admin listing; promoted users never carry a code
    otp = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email}>"
