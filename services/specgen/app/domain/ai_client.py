"""Client for the hosted completion provider (Anthropic Messages API)."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

import httpx
import structlog

from ..config import SpecgenSettings, get_settings

logger = structlog.get_logger(__name__)

_TRUNCATED_STOP_REASON = "max_tokens"


@dataclass(frozen=True)
class Completion:
    text: str
    truncated: bool
    output_tokens: int = 0
    input_tokens: int = 0


class CompletionProvider(Protocol):
    async def complete(self, system: str, user: str, max_output_tokens: int) -> Completion:
        ...


class AIClient:
    """Wrapper around the Messages endpoint exposing the ``CompletionProvider`` contract."""

    def __init__(self, settings: SpecgenSettings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings or get_settings()
        self._transport = transport

    async def complete(self, system: str, user: str, max_output_tokens: int) -> Completion:
        settings = self._settings.anthropic
        if not settings.api_key:
            raise RuntimeError("Anthropic API key is not configured")
        payload = {
            "model": settings.model,
            "max_tokens": max_output_tokens,
            "system": system,
            "messages": [{"role": "user", "content": user}],
        }
        headers = {
            "x-api-key": settings.api_key,
            "anthropic-version": settings.api_version,
            "content-type": "application/json",
        }

        start = time.perf_counter()
        async with httpx.AsyncClient(base_url=settings.base_url, transport=self._transport) as client:
            response = await client.post("/v1/messages", headers=headers, json=payload, timeout=settings.timeout_s)
        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "anthropic.call",
            model=settings.model,
            latency_ms=latency_ms,
            status_code=response.status_code,
            max_output_tokens=max_output_tokens,
        )
        response.raise_for_status()
        data = response.json()

        blocks: List[Dict[str, Any]] = data.get("content") or []
        if not blocks:
            raise RuntimeError("Anthropic response missing content blocks")
        text = "\n".join(block.get("text", "") for block in blocks if block.get("type") == "text")

        usage = data.get("usage") or {}
        return Completion(
            text=text,
            truncated=data.get("stop_reason") == _TRUNCATED_STOP_REASON,
            output_tokens=usage.get("output_tokens", 0),
            input_tokens=usage.get("input_tokens", 0),
        )


__all__ = ["AIClient", "Completion", "CompletionProvider"]
