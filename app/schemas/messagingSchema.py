from typing import Dict, Optional
from pydantic import Field

from app.schemas.userSchema import CamelModel, UtcDatetime


class MessageOut(CamelModel):
    id: int
    sender_id: str
    sender_name: str
    text: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    is_deleted: bool
    timestamp: UtcDatetime


class MessageCreatedResponse(CamelModel):
    message: str
    new_message: MessageOut


class VivaQuestionCreateRequest(CamelModel):
    sender_id: str = Field(..., min_length=1)
    sender_name: str = Field(..., min_length=1)
    question_text: str = Field(..., min_length=1)


class VivaQuestionOut(CamelModel):
    id: int
    sender_id: str
    sender_name: str
    question_text: str
    is_deleted: bool
    timestamp: UtcDatetime


class VivaQuestionCreatedResponse(CamelModel):
    message: str
    question: VivaQuestionOut


class SettingUpdateRequest(CamelModel):
    setting_value: bool


SettingsMap = Dict[str, bool]
