"""Conversation naming"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence

from lingochat.models.chat import Language, Message, Role
from lingochat.services.llm_service import LLMService
from lingochat.services.prompts import build_naming_prompt

logger = logging.getLogger(__name__)

FALLBACK_LENGTH = 30
ELLIPSIS = "..."

_STRIP_CHARS = re.compile(r"[\"'`“”‘’«»「」.。]")
_WHITESPACE = re.compile(r"\s+")


def should_generate_name(generate_name: bool, history: Sequence[Message]) -> bool:
    """Name only on the first user message of a conversation"""
    user_turns = sum(1 for message in history if message.role == Role.USER) + 1
    return bool(generate_name) and user_turns == 1


def fallback_name(text: str) -> str:
    """Truncated echo of the first message"""
    return _WHITESPACE.sub(" ", text).strip()[:FALLBACK_LENGTH] + ELLIPSIS


def clean_name(raw: str) -> str:
    """Strip quotes and periods and collapse whitespace"""
    first_line = raw.strip().splitlines()[0] if raw.strip() else ""
    return _WHITESPACE.sub(" ", _STRIP_CHARS.sub("", first_line)).strip()


class Namer:
    """Generate a short title for a conversation"""

    def __init__(self, llm_service: LLMService):
        self.llm_service = llm_service

    async def generate_name(self, text: str, language: str | Language | None) -> str:
        """Title for `text` in `language`; never raises"""
        try:
            raw = await self.llm_service.generate_response(build_naming_prompt(text, language), temperature=0.2)
        except Exception as e:
            logger.warning("[Namer] Falling back to truncated message: %s", e)
            return fallback_name(text)

        name = clean_name(raw)
        if not name:
            logger.warning("[Namer] Empty title from provider, falling back")
            return fallback_name(text)
        return name
