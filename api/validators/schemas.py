"""Pydantic request validation schemas.

FastAPI automatically validates request bodies against these.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from prompts import FOCUS_GUIDANCE, URGENCY_GUIDANCE
from quiz.models import EMOTION_LABELS
from quiz.scoring import SCORING_POLICIES


# ---------------------------------------------------------------------------
# Common validators
# ---------------------------------------------------------------------------

def clean_names(names: list[str] | None) -> list[str] | None:
    """Strip whitespace and drop empty entries, keeping order."""
    if names is None:
        return None
    return [n.strip() for n in names if n and n.strip()]


# ---------------------------------------------------------------------------
# Patient schemas
# ---------------------------------------------------------------------------

class LifeEvent(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=5000)
    date: Optional[str] = None
    significance: str = "medium"
    people_involved: list[str] = Field(default_factory=list)

    @field_validator("significance")
    @classmethod
    def validate_significance(cls, v: str) -> str:
        if v not in ("high", "medium", "low"):
            raise ValueError("Invalid significance. Must be one of: high, medium, low")
        return v


class CreatePatientRequest(BaseModel):
    preferred_name: str = Field(min_length=1, max_length=255)
    family_relationships: dict[str, str] = Field(default_factory=dict)
    life_events: list[LifeEvent] = Field(default_factory=list)
    personality_traits: list[str] = Field(default_factory=list)
    medical_notes: Optional[str] = Field(default=None, max_length=10000)


class UpdatePatientRequest(BaseModel):
    preferred_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    family_relationships: Optional[dict[str, str]] = None
    life_events: Optional[list[LifeEvent]] = None
    personality_traits: Optional[list[str]] = None
    medical_notes: Optional[str] = Field(default=None, max_length=10000)


# ---------------------------------------------------------------------------
# Memory card schemas
# ---------------------------------------------------------------------------

class CreateMemoryRequest(BaseModel):
    photo_url: Optional[str] = Field(default=None, max_length=2048)
    audio_url: Optional[str] = Field(default=None, max_length=2048)
    date_taken: Optional[date] = None
    location: Optional[str] = Field(default=None, max_length=255)
    caption: Optional[str] = Field(default=None, max_length=2000)
    emotional_context: Optional[str] = None
    people_involved: list[str] = Field(default_factory=list)

    @field_validator("emotional_context")
    @classmethod
    def validate_emotion(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if v not in EMOTION_LABELS:
            raise ValueError(f"Invalid emotional context. Must be one of: {', '.join(EMOTION_LABELS)}")
        return v

    @field_validator("people_involved")
    @classmethod
    def validate_people(cls, v: list[str]) -> list[str]:
        return clean_names(v)


class UpdateMemoryRequest(CreateMemoryRequest):
    people_involved: Optional[list[str]] = None

    @field_validator("people_involved")
    @classmethod
    def validate_people(cls, v: list[str] | None) -> list[str] | None:
        return clean_names(v)


# ---------------------------------------------------------------------------
# Quiz schemas
# ---------------------------------------------------------------------------

class StartQuizRequest(BaseModel):
    time_limit_seconds: Optional[int] = Field(default=None, ge=5, le=300)
    scoring_policy: Optional[str] = None

    @field_validator("scoring_policy")
    @classmethod
    def validate_policy(cls, v: str | None) -> str | None:
        if v is not None and v not in SCORING_POLICIES:
            raise ValueError(f"Invalid scoring policy. Must be one of: {', '.join(SCORING_POLICIES)}")
        return v


class SubmitAnswerRequest(BaseModel):
    selected_answer: str = Field(min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Conversation schemas
# ---------------------------------------------------------------------------

class EmotionalCheckInRequest(BaseModel):
    focus_areas: list[str] = Field(min_length=1)
    custom_message: str = Field(default="", max_length=2000)
    urgency_level: str = "normal"

    @field_validator("focus_areas")
    @classmethod
    def validate_focus(cls, v: list[str]) -> list[str]:
        unknown = [a for a in v if a not in FOCUS_GUIDANCE]
        if unknown:
            raise ValueError(f"Invalid focus areas: {', '.join(unknown)}")
        return v

    @field_validator("urgency_level")
    @classmethod
    def validate_urgency(cls, v: str) -> str:
        if v not in URGENCY_GUIDANCE:
            raise ValueError(f"Invalid urgency level. Must be one of: {', '.join(URGENCY_GUIDANCE)}")
        return v


class StartConversationRequest(BaseModel):
    memory_id: Optional[str] = None
    checkin: Optional[EmotionalCheckInRequest] = None


class EndSessionRequest(BaseModel):
    duration_seconds: Optional[int] = Field(default=None, ge=0)
