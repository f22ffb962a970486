from sqlalchemy.orm import declarative_base
from sqlalchemy import Boolean, Column, DateTime, String
from datetime import datetime

Base = declarative_base()


class TimestampMixin:
    """Mixin for timestamp columns"""
    __abstract__ = True
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PostedItemMixin:
    """Columns shared by everything users post to a board: sender snapshot, soft-delete flag and post time."""
    __abstract__ = True
    # No foreign key: posts outlive removed users
    sender_id = Column(String, nullable=False, index=True)
    sender_name = Column(String, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

__all__ = ["Base", "TimestampMixin", "PostedItemMixin"]
