"""Constants for application settings, real-time event names, and soft-delete placeholders."""

from enum import Enum


class SettingName(str, Enum):
    """Enumeration of the known application settings."""

    chat_enabled = "chat-enabled"
    viva_question_add_enabled = "viva-question-add-enabled"


# Value a known setting gets when it is provisioned at startup
DEFAULT_SETTING_VALUES = {
    SettingName.chat_enabled: True,
    SettingName.viva_question_add_enabled: True,
}


class RealtimeEvent(str, Enum):
    """Enumeration of the events pushed to every connected socket."""

    new_message = "newMessage"
    message_deleted = "messageDeleted"
    new_viva_question = "newVivaQuestion"
    viva_question_deleted = "vivaQuestionDeleted"
    user_approved = "userApproved"
    user_removed = "userRemoved"
    setting_updated = "settingUpdated"


class PendingRegistrationBackend(str, Enum):
    """Enumeration of the pending-registration store implementations."""

    memory = "memory"
    database = "database"


DELETED_MESSAGE_PLACEHOLDER = "[This message was deleted by an admin]"
DELETED_QUESTION_PLACEHOLDER = "[This question was deleted by an admin]"

TEMP_ID_PREFIX = "temp_"
