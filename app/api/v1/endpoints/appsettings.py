import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import aget_db
from app.core.exceptions import ChatAppError, InternalServerError
from app.schemas.messagingSchema import SettingsMap, SettingUpdateRequest
from app.schemas.userSchema import MessageResponse
from app.services import ModerationService
from app.services.ConnectionManager import ConnectionManager, get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsMap)
async def get_settings(db: AsyncSession = Depends(aget_db)):
    """Return every setting as {settingName: bool}."""
    try:
        return await ModerationService.get_settings_map(db)
    except Exception as e:
        logger.error(f"Error fetching settings: {e}", exc_info=True)
        raise InternalServerError("Server error fetching settings.")


@router.put("/{setting_name}", response_model=MessageResponse)
async def update_setting(
    setting_name: str,
    payload: SettingUpdateRequest,
    db: AsyncSession = Depends(aget_db),
    manager: ConnectionManager = Depends(get_connection_manager),
):
    try:
        await ModerationService.update_setting(db, manager, setting_name, payload.setting_value)
    except ChatAppError:
        raise
    except Exception as e:
        logger.error(f"Error updating setting: {e}", exc_info=True)
        raise InternalServerError("Server error updating setting.")
    return MessageResponse(message="Setting updated successfully.")
