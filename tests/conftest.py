from __future__ import annotations

import pytest

from lingochat.models.config import AppConfig, GeminiConfig, TranslateConfig

from .fakes import FakeLLM, FakeTranslator


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        gemini=GeminiConfig(api_key="test-key", model="gemini-test"),
        translate=TranslateConfig(api_key="translate-key"),
    )


@pytest.fixture
def fake_translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture(autouse=True)
def reset_sse_app_status():
    """sse-starlette keeps a module-level exit event bound to the first event loop"""
    from sse_starlette import sse

    status = getattr(sse, "AppStatus", None)
    if status is not None and hasattr(status, "should_exit_event"):
        status.should_exit_event = None
    yield
    if status is not None and hasattr(status, "should_exit_event"):
        status.should_exit_event = None
