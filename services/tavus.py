"""Tavus conversational video client.

The client is built once at startup from an explicit ``TavusConfig`` and kept
on ``app.state``; nothing here reads credentials from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from loguru import logger

DEFAULT_GREETING = (
    "Hey there! It's so good to see you again. Let's go through some lovely memories together."
)


@dataclass(frozen=True)
class TavusConfig:
    api_key: str
    replica_id: str
    persona_id: str = ""
    base_url: str = "https://tavusapi.com/v2"
    timeout_seconds: float = 15.0
    custom_greeting: str = DEFAULT_GREETING
    max_call_duration: int = 3600
    participant_left_timeout: int = 60
    participant_absent_timeout: int = 300

    @classmethod
    def from_settings(cls, settings) -> "TavusConfig":
        return cls(
            api_key=settings.tavus_api_key,
            replica_id=settings.tavus_replica_id,
            persona_id=settings.tavus_persona_id,
            base_url=settings.tavus_base_url.rstrip("/"),
            timeout_seconds=settings.tavus_timeout_seconds,
        )


class ConversationServiceError(Exception):
    """The conversational-AI service refused or failed a request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def describe_error(status_code: int, body: str = "") -> str:
    """Caregiver-readable explanation of a failed Tavus call."""
    lower = body.lower()
    if "maximum concurrent conversations" in lower:
        return (
            "You have reached the maximum number of concurrent conversations. "
            "Please end any existing conversations or try again later."
        )
    if status_code == 400:
        return "Invalid request. Please check your configuration and try again."
    if status_code == 401:
        return "Authentication failed. Please check your API credentials."
    if status_code == 403:
        return "Access denied. Please check your API permissions."
    if status_code == 429:
        return "Rate limit exceeded. Please wait a moment and try again."
    if status_code >= 500:
        return "Server error. Please try again later."
    return f"Unexpected response ({status_code})."


class TavusClient:
    """Thin async wrapper over the Tavus conversations API."""

    def __init__(self, config: TavusConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            headers={"x-api-key": self.config.api_key},
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, json: dict | None = None) -> dict:
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.error("Tavus {m} {p} failed: {err}", m=method, p=path, err=str(e))
            raise ConversationServiceError("Could not reach the conversation service.") from e

        if response.status_code >= 400:
            logger.error(
                "Tavus {m} {p} returned {code}: {body}",
                m=method, p=path, code=response.status_code, body=response.text[:300],
            )
            raise ConversationServiceError(
                describe_error(response.status_code, response.text),
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        return response.json()

    async def create_conversation(self, conversational_context: str, patient_name: str) -> dict:
        """Create a conversation; the response carries conversation_id and conversation_url."""
        cfg = self.config
        body = {
            "replica_id": cfg.replica_id,
            "conversation_name": f"A Conversation with My AI Memory Guide - {patient_name}",
            "conversational_context": conversational_context,
            "custom_greeting": cfg.custom_greeting,
            "properties": {
                "max_call_duration": cfg.max_call_duration,
                "participant_left_timeout": cfg.participant_left_timeout,
                "participant_absent_timeout": cfg.participant_absent_timeout,
                "enable_recording": True,
                "enable_closed_captions": True,
                "language": "english",
            },
        }
        if cfg.persona_id:
            body["persona_id"] = cfg.persona_id
        data = await self._request("POST", "/conversations", json=body)
        logger.info("Created Tavus conversation {cid}", cid=data.get("conversation_id"))
        return data

    async def get_conversation(self, conversation_id: str) -> dict:
        return await self._request("GET", f"/conversations/{conversation_id}")

    async def get_transcript(self, conversation_id: str) -> dict:
        return await self._request("GET", f"/conversations/{conversation_id}/transcripts")

    async def end_conversation(self, conversation_id: str) -> None:
        await self._request("POST", f"/conversations/{conversation_id}/end")
        logger.info("Ended Tavus conversation {cid}", cid=conversation_id)
