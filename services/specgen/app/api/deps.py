"""FastAPI dependency helpers."""
from __future__ import annotations

from ..config import get_settings
from ..domain.ai_client import AIClient, CompletionProvider


def get_completion_provider() -> CompletionProvider:
    return AIClient(get_settings())


__all__ = ["get_completion_provider"]
