"""
SSE Stream Decoder - Rebuild chat events from an arbitrarily fragmented byte stream

Reads may end anywhere: inside a frame, inside a JSON string, or inside a
multi-byte character. Only frames terminated by a blank line are handled;
the remainder waits in the buffer for the next read.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

FRAME_SEPARATOR = "\n\n"
DONE_EVENT = "done"

TokenCallback = Callable[[str], None]
ErrorCallback = Callable[[str], None]


class StreamOutcome(BaseModel):
    """What a finished (or abandoned) stream delivered"""

    chat_name: str | None = None
    done: bool = False
    error: str | None = None
    cancelled: bool = False
    tokens: int = 0


class SSEStreamDecoder:
    """Incremental decoder for one response stream"""

    def __init__(self, on_token: TokenCallback, on_error: ErrorCallback | None = None):
        self.on_token = on_token
        self.on_error = on_error
        self.outcome = StreamOutcome()
        self._text_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def finished(self) -> bool:
        return self.outcome.done

    def feed(self, data: bytes) -> None:
        """Append one read to the buffer and handle every complete frame"""
        if self.outcome.done:
            return
        self._buffer += self._text_decoder.decode(data)
        self._drain()

    def close(self) -> StreamOutcome:
        """End of input; a trailing partial frame is discarded"""
        if not self.outcome.done:
            self._buffer += self._text_decoder.decode(b"", final=True)
            self._drain()
            if self._buffer.strip():
                logger.warning("[SSEStreamDecoder] Discarding incomplete frame: %r", self._buffer[:200])
        self._buffer = ""
        return self.outcome

    def _drain(self) -> None:
        self._buffer = self._buffer.replace("\r\n", "\n")
        *frames, self._buffer = self._buffer.split(FRAME_SEPARATOR)
        for frame in frames:
            self._handle_frame(frame)
            if self.outcome.done:
                self._buffer = ""
                return

    def _handle_frame(self, frame: str) -> None:
        event = None
        data_lines = []
        for line in frame.split("\n"):
            if not line or line.startswith(":"):
                continue
            field, _, value = line.partition(":")
            if value.startswith(" "):
                value = value[1:]
            if field == "event":
                event = value
            elif field == "data":
                data_lines.append(value)

        if not data_lines:
            return

        try:
            payload = json.loads("\n".join(data_lines))
        except json.JSONDecodeError as e:
            logger.warning("[SSEStreamDecoder] Skipping malformed frame (%s): %r", e, frame[:200])
            return
        if not isinstance(payload, dict):
            return

        if event == DONE_EVENT:
            self.outcome.chat_name = payload.get("chatName")
            self.outcome.done = True
            return
        if event not in (None, "message"):
            return

        if payload.get("error"):
            self.outcome.error = str(payload["error"])
            if self.on_error is not None:
                self.on_error(self.outcome.error)
            return

        text = payload.get("text")
        if isinstance(text, str) and text:
            self.outcome.tokens += 1
            self.on_token(text)
