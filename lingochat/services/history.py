"""Model-facing history assembly"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from lingochat.models.chat import Language, Message, ModelTurn, Role
from lingochat.services.prompts import system_prompt_for
from lingochat.services.translator import Translator


class HistoryNormalizer:
    """Build the turn list sent to the model"""

    def __init__(self, translator: Translator):
        self.translator = translator

    async def _turn_for(self, message: Message) -> ModelTurn:
        if message.role == Role.USER:
            text = await self.translator.to_working_language(message.text, message.language)
            return ModelTurn.of("user", text)
        return ModelTurn.of("model", message.text)

    async def build_turns(
        self,
        history: Sequence[Message],
        text: str,
        language: str | Language | None,
    ) -> list[ModelTurn]:
        """System turn, then every history entry in order, then the new user message.

        User turns are translated concurrently; gather keeps results in
        submission order so completion order never reorders the history.
        """
        entries = [*history, Message(role=Role.USER, text=text, language=Language.resolve(language).value)]
        turns = await asyncio.gather(*(self._turn_for(entry) for entry in entries))
        return [ModelTurn.of("system", system_prompt_for(language)), *turns]
