import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.exceptions import ChatAppError, InternalServerError
from app.schemas.userSchema import MessageResponse, UserAdminView
from app.services import ModerationService
from app.services.ConnectionManager import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserAdminView])
async def get_all_users(db: AsyncSession = Depends(aget_db)):
    """List every user for the admin dashboard."""
    try:
        return await ModerationService.list_users(db)
    except Exception as e:
        logger.error(f"Error fetching users: {e}", exc_info=True)
        raise InternalServerError("Server error fetching users.")


@router.put("/{user_id}/approve", response_model=MessageResponse)
async def approve_user(
    user_id: str,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    try:
        await ModerationService.approve_user(db, manager, user_id)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error approving user: {e}", exc_info=True)
        raise InternalServerError("Server error approving user.")
    return MessageResponse(message="User approved successfully.")


@router.delete("/{user_id}", response_model=MessageResponse)
async def remove_user(
    user_id: str,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    try:
        await ModerationService.remove_user(db, manager, user_id)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error removing user: {e}", exc_info=True)
        raise InternalServerError("Server error removing user.")
    return MessageResponse(message="User removed successfully.")
