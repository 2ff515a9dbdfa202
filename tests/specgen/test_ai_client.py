import json

import httpx
import pytest

from services.specgen.app.config import AnthropicSettings, SpecgenSettings
from services.specgen.app.domain.ai_client import AIClient


def _settings(api_key: str = "test-key") -> SpecgenSettings:
    return SpecgenSettings(anthropic=AnthropicSettings(api_key=api_key, base_url="http://anthropic.test"))


@pytest.mark.asyncio
async def test_complete_posts_messages_request():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "content": [{"type": "text", "text": "{\"tasks\": []"}, {"type": "text", "text": "}"}],
                "stop_reason": "end_turn",
                "usage": {"input_tokens": 900, "output_tokens": 12},
            },
        )

    client = AIClient(_settings(), transport=httpx.MockTransport(handler))

    result = await client.complete("system prompt", "user message", 2048)

    assert seen["url"] == "http://anthropic.test/v1/messages"
    assert seen["headers"]["x-api-key"] == "test-key"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    assert seen["body"]["max_tokens"] == 2048
    assert seen["body"]["system"] == "system prompt"
    assert seen["body"]["messages"] == [{"role": "user", "content": "user message"}]
    assert result.text == '{"tasks": []\n}'
    assert result.truncated is False
    assert (result.input_tokens, result.output_tokens) == (900, 12)


@pytest.mark.asyncio
async def test_max_tokens_stop_reason_marks_truncation():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"content": [{"type": "text", "text": "{"}], "stop_reason": "max_tokens"})
    )

    result = await AIClient(_settings(), transport=transport).complete("s", "u", 256)

    assert result.truncated is True


@pytest.mark.asyncio
async def test_missing_api_key_raises_before_any_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(RuntimeError, match="API key"):
        await AIClient(_settings(api_key=""), transport=httpx.MockTransport(handler)).complete("s", "u", 256)


@pytest.mark.asyncio
async def test_http_error_is_raised():
    transport = httpx.MockTransport(lambda request: httpx.Response(529, json={"error": {"type": "overloaded_error"}}))

    with pytest.raises(httpx.HTTPStatusError):
        await AIClient(_settings(), transport=transport).complete("s", "u", 256)


@pytest.mark.asyncio
async def test_empty_content_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"content": [], "stop_reason": "end_turn"}))

    with pytest.raises(RuntimeError, match="content blocks"):
        await AIClient(_settings(), transport=transport).complete("s", "u", 256)
