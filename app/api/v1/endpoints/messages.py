import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.exceptions import ChatAppError, InternalServerError
from app.schemas.messagingSchema import MessageCreatedResponse, MessageOut
from app.schemas.userSchema import MessageResponse
from app.services import ModerationService
from app.services.ConnectionManager import ConnectionManager, get_connection_manager
from app.utils.uploads.store_upload import store_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=List[MessageOut])
async def get_messages(db: AsyncSession = Depends(aget_db)):
    try:
        return await ModerationService.list_messages(db)
    except Exception as e:
        logger.error(f"Error fetching messages: {e}", exc_info=True)
        raise InternalServerError("Server error fetching messages.")


@router.post("", status_code=201, response_model=MessageCreatedResponse)
async def send_message(
    sender_id: str = Form(..., alias="senderId"),
    sender_name: str = Form(..., alias="senderName"),
    text: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """
    Post a chat message (multipart form) with an optional attachment.
    The stored file is served from /uploads.
    """
    file_url = file_name = file_type = None
    try:
        if file is not None and file.filename:
            file_url, file_name, file_type = await store_upload(file)

        message = await ModerationService.post_message(
            db,
            manager,
            sender_id=sender_id,
            sender_name=sender_name,
            text=text,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
        )
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error sending message: {e}", exc_info=True)
        raise InternalServerError("Server error sending message.")

    return MessageCreatedResponse(
        message="Message sent successfully.",
        new_message=MessageOut.model_validate(message),
    )


@router.put("/{message_id}/delete", response_model=MessageResponse)
async def delete_message(
    message_id: int,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    """Soft delete: the row stays, its text is replaced by a placeholder."""
    try:
        await ModerationService.soft_delete_message(db, manager, message_id)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error soft-deleting message: {e}", exc_info=True)
        raise InternalServerError("Server error soft-deleting message.")
    return MessageResponse(message="Message soft-deleted successfully.")
