# models/messaging.py
from sqlalchemy import Column, Integer, String, Text

from app.models.base import Base, PostedItemMixin


class Message(Base, PostedItemMixin):
    """Group chat messages, optionally carrying an uploaded file"""
    __tablename__ = 'messages'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Replaced by a placeholder on soft delete
    text = Column(Text, nullable=True)
    file_url = Column(String, nullable=True)
    file_name = Column(String, nullable=True)
    file_type = Column(String, nullable=True)


class VivaQuestion(Base, PostedItemMixin):
    """Questions posted to the viva board"""
    __tablename__ = 'viva_questions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_text = Column(Text, nullable=False)
