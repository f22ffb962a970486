import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.exceptions import ChatAppError, InternalServerError
from app.schemas.messagingSchema import (
    VivaQuestionCreatedResponse,
    VivaQuestionCreateRequest,
    VivaQuestionOut,
)
from app.schemas.userSchema import MessageResponse
from app.services import ModerationService
from app.services.ConnectionManager import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/viva-questions", tags=["viva-questions"])


@router.get("", response_model=List[VivaQuestionOut])
async def get_viva_questions(db: AsyncSession = Depends(aget_db)):
    try:
        return await ModerationService.list_viva_questions(db)
    except Exception as e:
        logger.error(f"Error fetching viva questions: {e}", exc_info=True)
        raise InternalServerError("Server error fetching viva questions.")


@router.post("", status_code=201, response_model=VivaQuestionCreatedResponse)
async def add_viva_question(
    payload: VivaQuestionCreateRequest,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    try:
        question = await ModerationService.post_viva_question(
            db,
            manager,
            sender_id=payload.sender_id,
            sender_name=payload.sender_name,
            question_text=payload.question_text,
        )
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error adding viva question: {e}", exc_info=True)
        raise InternalServerError("Server error adding viva question.")

    return VivaQuestionCreatedResponse(
        message="Question added successfully.",
        question=VivaQuestionOut.model_validate(question),
    )


@router.put("/{question_id}/delete", response_model=MessageResponse)
async def delete_viva_question(
    question_id: int,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    try:
        await ModerationService.soft_delete_viva_question(db, manager, question_id)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error soft-deleting viva question: {e}", exc_info=True)
        raise InternalServerError("Server error soft-deleting viva question.")
    return MessageResponse(message="Viva question soft-deleted successfully.")
