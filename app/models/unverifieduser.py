from sqlalchemy import Column, DateTime, String
from app.models.base import Base, TimestampMixin


class UnverifiedUser(Base, TimestampMixin):
    """Registration attempts awaiting OTP confirmation (database-backed pending store)."""
    __tablename__ = 'pending_registrations'

    temp_id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String(255), nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    otp = Column(String(6), nullable=False)
    otp_expires = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<UnverifiedUser {self.email}>"
