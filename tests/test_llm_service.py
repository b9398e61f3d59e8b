import asyncio

import pytest

from lingochat.models.chat import ModelTurn
from lingochat.models.config import AppConfig
from lingochat.services.llm_service import LLMService, LLMServiceError


class FakeContent:
    def __init__(self, lines):
        self.lines = lines

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for line in self.lines:
            yield line


class FakeResponse:
    def __init__(self, status=200, lines=(), data=None, text=""):
        self.status = status
        self.content = FakeContent([line.encode("utf-8") for line in lines])
        self._data = data
        self._text = text

    async def json(self):
        return self._data

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *a):
        return False


def patch_session(monkeypatch, response, requests, timeouts=None):
    class Session:
        def __init__(self, *a, **kw):
            if timeouts is not None:
                timeouts.append(kw.get("timeout"))

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        def post(self, url, json=None, headers=None):
            requests.append({"url": url, "json": json, "headers": headers})
            return response

    monkeypatch.setattr("aiohttp.ClientSession", Session)


def chunk(text):
    return 'data: {"candidates": [{"content": {"role": "model", "parts": [{"text": "%s"}]}}]}\n' % text


TURNS = [
    ModelTurn.of("system", "be brief"),
    ModelTurn.of("user", "Hi"),
    ModelTurn.of("model", "Hello"),
    ModelTurn.of("user", "How are you?"),
]


def test_payload_moves_system_turn_to_instruction(app_config: AppConfig):
    payload = LLMService(app_config)._build_gemini_payload(TURNS)

    assert payload["systemInstruction"] == {"parts": [{"text": "be brief"}]}
    assert payload["contents"] == [
        {"role": "user", "parts": [{"text": "Hi"}]},
        {"role": "model", "parts": [{"text": "Hello"}]},
        {"role": "user", "parts": [{"text": "How are you?"}]},
    ]


def test_stream_yields_text_in_order(monkeypatch, app_config: AppConfig):
    requests = []
    lines = [chunk("Good"), "\n", chunk(" day"), ": keepalive\n", chunk("!")]
    patch_session(monkeypatch, FakeResponse(lines=lines), requests)

    async def run():
        return [c async for c in LLMService(app_config).generate_response_stream(TURNS)]

    assert asyncio.run(run()) == ["Good", " day", "!"]
    assert requests[0]["url"].endswith("/gemini-test:streamGenerateContent?alt=sse")
    assert requests[0]["headers"]["x-goog-api-key"] == "test-key"


def test_stream_http_error_raises(monkeypatch, app_config: AppConfig):
    patch_session(monkeypatch, FakeResponse(status=429, text="quota"), [])

    async def run():
        return [c async for c in LLMService(app_config).generate_response_stream(TURNS)]

    with pytest.raises(LLMServiceError, match="429"):
        asyncio.run(run())


def test_missing_key_raises_on_first_pull():
    service = LLMService(AppConfig())

    async def run():
        return [c async for c in service.generate_response_stream(TURNS)]

    with pytest.raises(LLMServiceError, match="not configured"):
        asyncio.run(run())


def test_thought_parts_skipped(app_config: AppConfig):
    data = {"candidates": [{"content": {"parts": [{"text": "thinking", "thought": True}, {"text": "answer"}]}}]}

    assert LLMService(app_config)._extract_gemini_text(data) == "answer"
    assert LLMService(app_config)._extract_gemini_text({"candidates": []}) is None


def test_generate_response(monkeypatch, app_config: AppConfig):
    requests = []
    data = {"candidates": [{"content": {"parts": [{"text": "Mountain Tea Talk"}]}}]}
    patch_session(monkeypatch, FakeResponse(data=data), requests)

    result = asyncio.run(LLMService(app_config).generate_response("name this", temperature=0.2))

    assert result == "Mountain Tea Talk"
    assert requests[0]["url"].endswith("/gemini-test:generateContent")
    assert requests[0]["json"]["contents"] == [{"role": "user", "parts": [{"text": "name this"}]}]
    assert requests[0]["json"]["generationConfig"]["temperature"] == 0.2
    assert "systemInstruction" not in requests[0]["json"]


def test_generate_response_without_content_raises(monkeypatch, app_config: AppConfig):
    patch_session(monkeypatch, FakeResponse(data={"candidates": []}), [])

    with pytest.raises(LLMServiceError):
        asyncio.run(LLMService(app_config).generate_response("name this"))


def test_stream_waits_per_read_not_for_whole_answer(monkeypatch, app_config: AppConfig):
    timeouts = []
    patch_session(monkeypatch, FakeResponse(lines=[chunk("ok")]), [], timeouts)

    async def run():
        return [c async for c in LLMService(app_config).generate_response_stream(TURNS)]

    asyncio.run(run())

    assert timeouts[0].total is None
    assert timeouts[0].sock_read == app_config.gemini.timeout_seconds


def test_generate_response_keeps_total_deadline(monkeypatch, app_config: AppConfig):
    timeouts = []
    data = {"candidates": [{"content": {"parts": [{"text": "Title"}]}}]}
    patch_session(monkeypatch, FakeResponse(data=data), [], timeouts)

    asyncio.run(LLMService(app_config).generate_response("name this"))

    assert timeouts[0].total == app_config.gemini.timeout_seconds


def test_closing_stream_releases_http_response_immediately(monkeypatch, app_config: AppConfig):
    service = LLMService(app_config)
    released = []

    async def held_response(url, payload, headers):
        try:
            yield "first"
            yield "second"
        finally:
            released.append(True)

    monkeypatch.setattr(service, "_stream_response", held_response)

    async def run():
        stream = service.generate_response_stream(TURNS)
        first = await stream.__anext__()
        await stream.aclose()
        return first, list(released)

    first, released_at_close = asyncio.run(run())

    assert first == "first"
    assert released_at_close == [True]
