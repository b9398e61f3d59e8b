"""Chat data models"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    """Languages the chat can be localized to"""

    ENGLISH = "en"
    TIBETAN = "bo"
    HAWAIIAN = "haw"
    TELUGU = "te"

    @classmethod
    def resolve(cls, tag: str | Language | None) -> Language:
        """Map any language tag onto a supported language, defaulting to English"""
        if isinstance(tag, Language):
            return tag
        try:
            return cls((tag or "").strip().lower())
        except ValueError:
            return cls.ENGLISH


BASE_LANGUAGE = Language.ENGLISH


class Role(str, Enum):
    """Author of a conversation message"""

    USER = "user"
    ASSISTANT = "assistant"


# Spellings older clients used for the assistant role
_ASSISTANT_ALIASES = {"model", "ai", "bot"}


class Message(BaseModel):
    """A single message as held by the client and sent as history"""

    role: Role
    text: str = ""
    language: str = BASE_LANGUAGE.value

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value):
        if isinstance(value, str) and value.lower() in _ASSISTANT_ALIASES:
            return Role.ASSISTANT
        return value


class SendMessageRequest(BaseModel):
    """Body of POST /api/sendMessage"""

    model_config = ConfigDict(populate_by_name=True)

    text: str
    history: list[Message] = []
    language: str = BASE_LANGUAGE.value
    conversation_name: str | None = Field(default=None, alias="conversationName")
    generate_name: bool = Field(default=False, alias="generateName")


class Part(BaseModel):
    """Text part of a model turn"""

    text: str


class ModelTurn(BaseModel):
    """One entry of the model-facing conversation"""

    role: Literal["system", "user", "model"]
    parts: list[Part]

    @classmethod
    def of(cls, role: str, text: str) -> ModelTurn:
        return cls(role=role, parts=[Part(text=text)])

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.parts)


class ContentEvent(BaseModel):
    """Payload of a content frame"""

    text: str


class ErrorEvent(BaseModel):
    """Payload of an error frame"""

    error: str


class DoneEvent(BaseModel):
    """Payload of the terminal frame"""

    model_config = ConfigDict(populate_by_name=True)

    chat_name: str | None = Field(default=None, alias="chatName")
