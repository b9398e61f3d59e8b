"""Routers module - FastAPI route handlers"""

from . import chat

__all__ = ["chat"]
