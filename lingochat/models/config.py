"""Application configuration models"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class GeminiConfig(BaseModel):
    """Generation provider settings"""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    model: str = "gemini-1.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta/models"
    temperature: float = 0.7
    max_output_tokens: int = 2048
    timeout_seconds: int = 120


class TranslateConfig(BaseModel):
    """Translation provider settings"""

    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    endpoint: str = "https://translation.googleapis.com/language/translate/v2"
    timeout_seconds: int = 15


class AppConfig(BaseModel):
    """Process-wide configuration, read once at startup"""

    model_config = ConfigDict(frozen=True)

    gemini: GeminiConfig = GeminiConfig()
    translate: TranslateConfig = TranslateConfig()
    log_level: str = "INFO"

    @property
    def translate_api_key(self) -> str:
        """Translation key, falling back to the Gemini key when unset"""
        return self.translate.api_key or self.gemini.api_key
