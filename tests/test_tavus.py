"""Tests for services/tavus.py — conversation client over a mocked HTTP transport."""

import json

import httpx
import pytest

from services.tavus import (
    ConversationServiceError,
    TavusClient,
    TavusConfig,
    describe_error,
)


def _config(**overrides):
    values = {"api_key": "key-123", "replica_id": "r-1", "base_url": "https://tavus.test/v2"}
    values.update(overrides)
    return TavusConfig(**values)


def _client(handler, **overrides):
    return TavusClient(_config(**overrides), transport=httpx.MockTransport(handler))


class TestCreateConversation:
    @pytest.mark.asyncio
    async def test_request_body_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"conversation_id": "c1", "conversation_url": "https://x/c1"})

        data = await _client(handler, persona_id="p-9").create_conversation("context", "Margaret")

        assert data["conversation_id"] == "c1"
        assert seen["url"] == "https://tavus.test/v2/conversations"
        assert seen["key"] == "key-123"
        body = seen["body"]
        assert body["replica_id"] == "r-1"
        assert body["persona_id"] == "p-9"
        assert body["conversational_context"] == "context"
        assert body["conversation_name"].endswith("Margaret")
        assert body["properties"]["max_call_duration"] == 3600
        assert body["properties"]["enable_recording"] is True

    @pytest.mark.asyncio
    async def test_persona_omitted_when_unset(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"conversation_id": "c1"})

        await _client(handler).create_conversation("ctx", "Ann")
        assert "persona_id" not in seen["body"]

    @pytest.mark.asyncio
    async def test_concurrency_limit_message(self):
        def handler(request):
            return httpx.Response(400, text='{"message": "User has reached maximum concurrent conversations"}')

        with pytest.raises(ConversationServiceError) as exc:
            await _client(handler).create_conversation("ctx", "Ann")
        assert "maximum number of concurrent conversations" in str(exc.value)
        assert exc.value.status_code == 400

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ConversationServiceError, match="Could not reach"):
            await _client(handler).create_conversation("ctx", "Ann")


class TestOtherCalls:
    @pytest.mark.asyncio
    async def test_end_conversation_empty_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            return httpx.Response(200)

        await _client(handler).end_conversation("c1")
        assert seen == {"method": "POST", "path": "/v2/conversations/c1/end"}

    @pytest.mark.asyncio
    async def test_get_transcript(self):
        def handler(request):
            assert request.url.path == "/v2/conversations/c1/transcripts"
            return httpx.Response(200, json={"segments": [{"text": "hi"}]})

        data = await _client(handler).get_transcript("c1")
        assert data["segments"][0]["text"] == "hi"


class TestConfig:
    def test_from_settings(self):
        from config import Settings

        settings = Settings(tavus_api_key="k", tavus_replica_id="r", tavus_base_url="https://a/v2/")
        cfg = TavusConfig.from_settings(settings)
        assert cfg.base_url == "https://a/v2"
        assert cfg.api_key == "k"
        assert settings.tavus_configured

    @pytest.mark.parametrize("status,fragment", [
        (400, "Invalid request"),
        (401, "Authentication failed"),
        (403, "Access denied"),
        (429, "Rate limit"),
        (503, "Server error"),
        (418, "Unexpected response (418)"),
    ])
    def test_describe_error(self, status, fragment):
        assert fragment in describe_error(status)
