"""Chat streaming API endpoint"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing

from fastapi import APIRouter, Depends, Request
from sse_starlette import EventSourceResponse

from lingochat.models.chat import Language, SendMessageRequest
from lingochat.models.config import AppConfig
from lingochat.services.history import HistoryNormalizer
from lingochat.services.llm_service import LLMService
from lingochat.services.namer import Namer, should_generate_name
from lingochat.services.stream_encoder import SSE_SEPARATOR, StreamEncoder, describe_error, error_event
from lingochat.services.translator import Translator

router = APIRouter()
logger = logging.getLogger(__name__)

STREAM_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_llm_service(config: AppConfig = Depends(get_config)) -> LLMService:
    return LLMService(config)


def get_translator(config: AppConfig = Depends(get_config)) -> Translator:
    return Translator(config)


def get_namer(llm_service: LLMService = Depends(get_llm_service)) -> Namer:
    return Namer(llm_service)


async def _no_name() -> None:
    return None


@router.post("/sendMessage")
async def send_message(
    request: SendMessageRequest,
    llm_service: LLMService = Depends(get_llm_service),
    translator: Translator = Depends(get_translator),
    namer: Namer = Depends(get_namer),
):
    """Send a chat message and stream the translated response (SSE)"""
    language = Language.resolve(request.language)
    normalizer = HistoryNormalizer(translator)
    encoder = StreamEncoder(llm_service, translator, language)

    name_requested = should_generate_name(request.generate_name, request.history)

    async def event_generator():
        naming = namer.generate_name(request.text, language) if name_requested else _no_name()
        try:
            try:
                turns, chat_name = await asyncio.gather(
                    normalizer.build_turns(request.history, request.text, language),
                    naming,
                )
            except Exception as e:
                logger.error("[Chat] Failed to prepare conversation: %s", e)
                yield error_event(describe_error(e))
                return

            async with aclosing(encoder.events(turns, chat_name)) as events:
                async for event in events:
                    yield event
        finally:
            await translator.close()

    return EventSourceResponse(event_generator(), headers=STREAM_HEADERS, sep=SSE_SEPARATOR)
