"""Client for the streaming chat endpoint"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing, asynccontextmanager

import aiohttp

from lingochat.client.decoder import ErrorCallback, SSEStreamDecoder, StreamOutcome, TokenCallback
from lingochat.models.chat import SendMessageRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
SEND_MESSAGE_PATH = "/api/sendMessage"
CONNECT_TIMEOUT_SECONDS = 30


class ChatAPIError(Exception):
    """Non-200 answer from the chat endpoint"""

    def __init__(self, status: int, body: str):
        super().__init__(f"API {status}: {body}")
        self.status = status
        self.body = body


@asynccontextmanager
async def _session_scope(session: aiohttp.ClientSession | None, read_timeout_seconds: int):
    if session is not None:
        yield session
        return
    # No total deadline: a long answer may stream for as long as reads keep arriving
    timeout = aiohttp.ClientTimeout(total=None, sock_connect=CONNECT_TIMEOUT_SECONDS, sock_read=read_timeout_seconds)
    async with aiohttp.ClientSession(timeout=timeout) as own_session:
        yield own_session


async def _reads(content, cancel_event: asyncio.Event | None):
    """Yield reads until the body ends or `cancel_event` is set, whichever comes first"""
    if cancel_event is None:
        async for data in content.iter_any():
            yield data
        return

    reads = content.iter_any().__aiter__()
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        while not cancel_event.is_set():
            read = asyncio.ensure_future(reads.__anext__())
            await asyncio.wait({read, cancelled}, return_when=asyncio.FIRST_COMPLETED)
            if cancel_event.is_set():
                read.cancel()
                await asyncio.wait({read})
                return
            try:
                data = read.result()
            except StopAsyncIteration:
                return
            yield data
    finally:
        cancelled.cancel()


async def send_message_stream(
    payload: SendMessageRequest,
    on_token: TokenCallback,
    *,
    base_url: str = DEFAULT_BASE_URL,
    session: aiohttp.ClientSession | None = None,
    on_error: ErrorCallback | None = None,
    cancel_event: asyncio.Event | None = None,
    read_timeout_seconds: int = 120,
) -> StreamOutcome:
    """POST a message and feed the SSE response through the decoder.

    Tokens reach `on_token` in server order. Returns once the terminal frame
    arrives, the stream ends, or `cancel_event` is set (even while a read is
    pending); only a non-200 status raises (`ChatAPIError`).
    """
    decoder = SSEStreamDecoder(on_token, on_error)
    url = f"{base_url.rstrip('/')}{SEND_MESSAGE_PATH}"
    body = payload.model_dump(mode="json", by_alias=True)

    async with _session_scope(session, read_timeout_seconds) as http:
        async with http.post(url, json=body) as response:
            if response.status != 200:
                raise ChatAPIError(response.status, await response.text())

            try:
                async with aclosing(_reads(response.content, cancel_event)) as reads:
                    async for data in reads:
                        decoder.feed(data)
                        if decoder.finished:
                            break
            except (aiohttp.ClientPayloadError, aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                logger.warning("[ChatClient] Stream interrupted after %d tokens: %s", decoder.outcome.tokens, e)
                decoder.outcome.error = decoder.outcome.error or f"Connection lost: {e}"
                if on_error is not None:
                    on_error(decoder.outcome.error)

            if cancel_event is not None and cancel_event.is_set() and not decoder.finished:
                logger.info("[ChatClient] Stream cancelled after %d tokens", decoder.outcome.tokens)
                decoder.outcome.cancelled = True

    return decoder.close()
