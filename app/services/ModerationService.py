"""Admin moderation, posting and settings actions.

Every action commits its change first and then broadcasts one event to all
connected sockets. Nothing is guarded against repetition: approving an
approved user or deleting a deleted message applies and broadcasts again.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.constants import (
    DEFAULT_SETTING_VALUES,
    DELETED_MESSAGE_PLACEHOLDER,
    DELETED_QUESTION_PLACEHOLDER,
    RealtimeEvent,
)
from app.core.exceptions import BadRequestError, NotFoundError
from app.models.messaging import Message, VivaQuestion
from app.models.setting import AppSetting
from app.models.user import User
from app.schemas.messagingSchema import MessageOut, VivaQuestionOut
from app.services.ConnectionManager import ConnectionManager

logger = logging.getLogger(__name__)


def serialize_message(message: Message) -> dict:
    return MessageOut.model_validate(message).model_dump(mode="json", by_alias=True)


def serialize_question(question: VivaQuestion) -> dict:
    return VivaQuestionOut.model_validate(question).model_dump(mode="json", by_alias=True)


# -----------------------------
# Users
# -----------------------------
async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at, User.id))
    return list(result.scalars().all())


async def _get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found.")
    return user


async def approve_user(db: AsyncSession, manager: ConnectionManager, user_id: str) -> User:
    user = await _get_user(db, user_id)
    user.is_approved = True
    await db.commit()
    logger.info(f"User {user_id} approved")
    await manager.broadcast(RealtimeEvent.user_approved, user_id)
    return user


async def remove_user(db: AsyncSession, manager: ConnectionManager, user_id: str) -> None:
    user = await _get_user(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info(f"User {user_id} removed")
    await manager.broadcast(RealtimeEvent.user_removed, user_id)


# -----------------------------
# Chat messages
# -----------------------------
async def list_messages(db: AsyncSession) -> List[Message]:
    result = await db.execute(select(Message).order_by(Message.timestamp.asc(), Message.id.asc()))
    return list(result.scalars().all())


async def post_message(
    db: AsyncSession,
    manager: ConnectionManager,
    sender_id: str,
    sender_name: str,
    text: Optional[str] = None,
    file_url: Optional[str] = None,
    file_name: Optional[str] = None,
    file_type: Optional[str] = None,
) -> Message:
    if not (text and text.strip()) and not file_url:
        raise BadRequestError("Message must contain text or a file.")

    message = Message(
        sender_id=sender_id,
        sender_name=sender_name,
        text=text if text else None,
        file_url=file_url,
        file_name=file_name,
        file_type=file_type,
        is_deleted=False,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    await manager.broadcast(RealtimeEvent.new_message, serialize_message(message))
    return message


async def soft_delete_message(db: AsyncSession, manager: ConnectionManager, message_id: int) -> Message:
    message = await db.get(Message, message_id)
    if not message:
        raise NotFoundError("Message not found.")
    # The original text is overwritten and cannot be recovered
    message.is_deleted = True
    message.text = DELETED_MESSAGE_PLACEHOLDER
    await db.commit()
    logger.info(f"Message {message_id} soft-deleted")
    await manager.broadcast(RealtimeEvent.message_deleted, message.id)
    return message


# -----------------------------
# Viva questions
# -----------------------------
async def list_viva_questions(db: AsyncSession) -> List[VivaQuestion]:
    result = await db.execute(select(VivaQuestion).order_by(VivaQuestion.timestamp.asc(), VivaQuestion.id.asc()))
    return list(result.scalars().all())


async def post_viva_question(
    db: AsyncSession,
    manager: ConnectionManager,
    sender_id: str,
    sender_name: str,
    question_text: str,
) -> VivaQuestion:
    question = VivaQuestion(
        sender_id=sender_id,
        sender_name=sender_name,
        question_text=question_text,
        is_deleted=False,
    )
    db.add(question)
    await db.commit()
    await db.refresh(question)

    await manager.broadcast(RealtimeEvent.new_viva_question, serialize_question(question))
    return question


async def soft_delete_viva_question(db: AsyncSession, manager: ConnectionManager, question_id: int) -> VivaQuestion:
    question = await db.get(VivaQuestion, question_id)
    if not question:
        raise NotFoundError("Viva question not found.")
    question.is_deleted = True
    question.question_text = DELETED_QUESTION_PLACEHOLDER
    await db.commit()
    logger.info(f"Viva question {question_id} soft-deleted")
    await manager.broadcast(RealtimeEvent.viva_question_deleted, question.id)
    return question


# -----------------------------
# Settings
# -----------------------------
async def get_settings_map(db: AsyncSession) -> Dict[str, bool]:
    result = await db.execute(select(AppSetting))
    return {s.setting_name: bool(s.setting_value) for s in result.scalars().all()}


async def update_setting(db: AsyncSession, manager: ConnectionManager, setting_name: str, setting_value: bool) -> int:
    """
    Write the value and broadcast it. An unknown name matches no row and
    stores nothing, but the update is still acknowledged and broadcast.

    Returns the number of rows written.
    """
    setting_value = bool(setting_value)
    result = await db.execute(
        update(AppSetting)
        .where(AppSetting.setting_name == setting_name)
        .values(setting_value=setting_value)
    )
    await db.commit()
    if result.rowcount:
        logger.info(f"Setting {setting_name} set to {setting_value}")
    else:
        logger.warning(f"Setting {setting_name} does not exist; nothing stored")
    await manager.broadcast(
        RealtimeEvent.setting_updated,
        {"settingName": setting_name, "settingValue": setting_value},
    )
    return result.rowcount or 0


async def seed_default_settings(db: AsyncSession) -> List[str]:
    """Create the known settings that are missing; existing values are left alone."""
    existing = await get_settings_map(db)
    created = []
    for name, value in DEFAULT_SETTING_VALUES.items():
        if name.value not in existing:
            db.add(AppSetting(setting_name=name.value, setting_value=value))
            created.append(name.value)
    if created:
        await db.commit()
    return created
