"""Models module - Pydantic data models"""

from .chat import (
    BASE_LANGUAGE,
    ContentEvent,
    DoneEvent,
    ErrorEvent,
    Language,
    Message,
    ModelTurn,
    Part,
    Role,
    SendMessageRequest,
)
from .config import AppConfig, GeminiConfig, TranslateConfig

__all__ = [
    # Chat models
    "BASE_LANGUAGE",
    "ContentEvent",
    "DoneEvent",
    "ErrorEvent",
    "Language",
    "Message",
    "ModelTurn",
    "Part",
    "Role",
    "SendMessageRequest",
    # Config models
    "AppConfig",
    "GeminiConfig",
    "TranslateConfig",
]
