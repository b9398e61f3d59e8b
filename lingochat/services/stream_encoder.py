"""
Stream Encoder - Translate model output chunk by chunk and frame it as SSE

Frames on the wire:
  data: {"text": "..."}                      content, one per model chunk
  data: {"error": "..."}                     model failure, always last
  event: done\\ndata: {"chatName": ...}        normal completion, always last
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence

from sse_starlette import ServerSentEvent

from lingochat.models.chat import ContentEvent, DoneEvent, ErrorEvent, Language, ModelTurn
from lingochat.services.llm_service import LLMService
from lingochat.services.translator import Translator

logger = logging.getLogger(__name__)

SSE_SEPARATOR = "\n"
DONE_EVENT = "done"


def content_event(text: str) -> ServerSentEvent:
    return ServerSentEvent(data=ContentEvent(text=text).model_dump_json(), sep=SSE_SEPARATOR)


def error_event(message: str) -> ServerSentEvent:
    return ServerSentEvent(data=ErrorEvent(error=message).model_dump_json(), sep=SSE_SEPARATOR)


def done_event(chat_name: str | None) -> ServerSentEvent:
    data = DoneEvent(chat_name=chat_name).model_dump_json(by_alias=True)
    return ServerSentEvent(data=data, event=DONE_EVENT, sep=SSE_SEPARATOR)


def describe_error(error: BaseException) -> str:
    """Human-readable message for an error frame"""
    return str(error) or f"The model stream failed ({error.__class__.__name__})"


class StreamEncoder:
    """Serve one request: one model call, translated content frames, one closing frame"""

    def __init__(self, llm_service: LLMService, translator: Translator, language: str | Language | None):
        self.llm_service = llm_service
        self.translator = translator
        self.language = Language.resolve(language)

    async def events(self, turns: Sequence[ModelTurn], chat_name: str | None = None) -> AsyncIterator[ServerSentEvent]:
        chunks = self.llm_service.generate_response_stream(turns)
        forwarded = 0
        try:
            async for chunk in chunks:
                if not chunk:
                    continue
                text = await self.translator.translate(chunk, self.language)
                forwarded += 1
                yield content_event(text)
        except Exception as e:
            logger.error("[StreamEncoder] Model stream failed after %d chunks: %s", forwarded, e)
            yield error_event(describe_error(e))
            return
        finally:
            await chunks.aclose()

        logger.info("[StreamEncoder] Stream complete (%d chunks, name: %s)", forwarded, chat_name is not None)
        yield done_event(chat_name)
