"""Services module - Business logic layer"""

from .config_manager import ConfigManager
from .history import HistoryNormalizer
from .llm_service import LLMService, LLMServiceError
from .namer import Namer, should_generate_name
from .stream_encoder import StreamEncoder
from .translator import Translator

__all__ = [
    "ConfigManager",
    "HistoryNormalizer",
    "LLMService",
    "LLMServiceError",
    "Namer",
    "should_generate_name",
    "StreamEncoder",
    "Translator",
]
