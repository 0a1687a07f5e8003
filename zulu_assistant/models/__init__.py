from zulu_assistant.models.chat_session import ChatSession
from zulu_assistant.models.sheet_row import SheetRow

__all__ = [
    "ChatSession",
    "SheetRow",
]
