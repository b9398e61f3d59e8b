"""
LLM Service - Handles interactions with the Gemini generation API
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing, asynccontextmanager
from typing import Any

import aiohttp

from lingochat.models.chat import ModelTurn
from lingochat.models.config import AppConfig

logger = logging.getLogger(__name__)


class LLMServiceError(Exception):
    """Raised when the generation provider fails or answers with no content"""


class LLMService:
    """Service for interacting with Gemini"""

    def __init__(self, config: AppConfig):
        self.config = config.gemini

    # ========== Config Helpers ==========

    def _get_gemini_config(self) -> tuple[str, str, str]:
        """Get Gemini config: (api_key, model, base_url). Raises if api_key missing."""
        api_key = self.config.api_key
        if not api_key:
            raise LLMServiceError("Gemini API key not configured")
        model = self.config.model
        if model.startswith("models/"):
            model = model.split("/", 1)[1]
        base_url = f"{self.config.base_url.rstrip('/')}/{model}"
        return api_key, model, base_url

    # ========== HTTP Helpers ==========

    @asynccontextmanager
    async def _request(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        streaming: bool = False,
    ):
        """Context manager for HTTP POST requests with automatic session cleanup"""
        if streaming:
            # Bound the wait between reads, not the length of the whole answer
            timeout = aiohttp.ClientTimeout(total=None, sock_read=self.config.timeout_seconds)
        else:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, json=payload, headers=headers) as response:
                if response.status != 200:
                    error_text = await response.text()
                    logger.error("[LLMService] Gemini API Error (%s): %s", response.status, error_text)
                    raise LLMServiceError(f"Gemini API error ({response.status}): {error_text[:400]}")
                yield response

    async def _request_json(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        """Make request and return JSON response"""
        async with self._request(url, payload, headers) as response:
            return await response.json()

    async def _stream_response(self, url: str, payload: dict[str, Any], headers: dict[str, str]):
        """Stream response and yield parsed content"""
        async with self._request(url, payload, headers, streaming=True) as response:
            async for line in response.content:
                line_text = line.decode("utf-8").strip()
                content = self._parse_gemini_stream_line(line_text)
                if content:
                    yield content

    # ========== Response Parsers ==========

    def _extract_gemini_text(self, data: dict[str, Any]) -> str | None:
        """Extract text from Gemini response data, skipping thought parts"""
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [part["text"] for part in parts if "text" in part and not part.get("thought")]
        if not texts:
            return None
        return "".join(texts)

    def _parse_gemini_response(self, data: dict[str, Any]) -> str:
        """Parse Gemini API response format"""
        text = self._extract_gemini_text(data)
        if text is not None:
            return text
        raise LLMServiceError("No valid response from Gemini API")

    def _parse_gemini_stream_line(self, line_text: str) -> str | None:
        """Parse a single SSE line from the Gemini stream"""
        if not line_text.startswith("data: "):
            return None
        try:
            data = json.loads(line_text[6:])
        except json.JSONDecodeError:
            logger.warning("[LLMService] Skipping malformed stream line: %s", line_text[:200])
            return None
        if "error" in data:
            raise LLMServiceError(f"Gemini stream error: {data['error']}")
        return self._extract_gemini_text(data)

    # ========== Payload Builders ==========

    def _build_gemini_payload(self, turns: Sequence[ModelTurn], temperature: float | None = None) -> dict[str, Any]:
        """Build Gemini API request payload from model turns"""
        system_text = "\n\n".join(turn.text for turn in turns if turn.role == "system")
        contents = [
            {"role": turn.role, "parts": [part.model_dump() for part in turn.parts]}
            for turn in turns
            if turn.role != "system"
        ]

        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": self.config.temperature if temperature is None else temperature,
                "topP": 0.95,
                "maxOutputTokens": self.config.max_output_tokens,
            },
        }
        if system_text:
            payload["systemInstruction"] = {"parts": [{"text": system_text}]}
        return payload

    # ========== Public API ==========

    async def generate_response_stream(self, turns: Sequence[ModelTurn]) -> AsyncIterator[str]:
        """Stream text fragments for the given conversation"""
        api_key, model, base_url = self._get_gemini_config()
        url = f"{base_url}:streamGenerateContent?alt=sse"
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        payload = self._build_gemini_payload(turns)

        logger.info("[LLMService] Streaming from %s with %d turns", model, len(turns))
        async with aclosing(self._stream_response(url, payload, headers)) as stream:
            async for content in stream:
                yield content

    async def generate_response(self, prompt: str, temperature: float | None = None) -> str:
        """Generate a single response for a standalone prompt"""
        api_key, model, base_url = self._get_gemini_config()
        url = f"{base_url}:generateContent"
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}
        payload = self._build_gemini_payload([ModelTurn.of("user", prompt)], temperature)

        data = await self._request_json(url, payload, headers)
        response_text = self._parse_gemini_response(data)
        logger.info("[LLMService] Received response from %s (length: %d chars)", model, len(response_text))
        return response_text
