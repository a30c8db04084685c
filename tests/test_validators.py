"""Tests for Pydantic validation schemas."""

from datetime import date

import pytest
from pydantic import ValidationError

from api.validators.schemas import (
    CreateMemoryRequest,
    CreatePatientRequest,
    EmotionalCheckInRequest,
    LifeEvent,
    StartQuizRequest,
    SubmitAnswerRequest,
    UpdateMemoryRequest,
)


class TestCreatePatientRequest:
    def test_valid_patient(self):
        req = CreatePatientRequest(preferred_name="Margaret", family_relationships={"son": "Tom"})
        assert req.preferred_name == "Margaret"
        assert req.life_events == []

    def test_rejects_empty_name(self):
        with pytest.raises(ValidationError):
            CreatePatientRequest(preferred_name="")

    def test_life_event_significance(self):
        assert LifeEvent(title="Wedding", significance="high").significance == "high"
        with pytest.raises(ValidationError):
            LifeEvent(title="Wedding", significance="huge")


class TestMemoryRequests:
    def test_valid_memory(self):
        req = CreateMemoryRequest(
            date_taken="1985-07-14",
            emotional_context=" Joyful ",
            people_involved=[" Ann ", "", "Joe"],
        )
        assert req.date_taken == date(1985, 7, 14)
        assert req.emotional_context == "joyful"
        assert req.people_involved == ["Ann", "Joe"]

    def test_rejects_unknown_emotion(self):
        with pytest.raises(ValidationError):
            CreateMemoryRequest(emotional_context="furious")

    def test_rejects_bad_date(self):
        with pytest.raises(ValidationError):
            CreateMemoryRequest(date_taken="last summer")

    def test_update_leaves_people_unset(self):
        req = UpdateMemoryRequest(location="Paris")
        assert req.model_dump(exclude_unset=True) == {"location": "Paris"}


class TestQuizRequests:
    def test_defaults(self):
        req = StartQuizRequest()
        assert req.time_limit_seconds is None
        assert req.scoring_policy is None

    def test_policy_must_be_known(self):
        assert StartQuizRequest(scoring_policy="flat").scoring_policy == "flat"
        with pytest.raises(ValidationError):
            StartQuizRequest(scoring_policy="double")

    def test_time_limit_bounds(self):
        with pytest.raises(ValidationError):
            StartQuizRequest(time_limit_seconds=1)
        with pytest.raises(ValidationError):
            StartQuizRequest(time_limit_seconds=3600)

    def test_answer_required(self):
        with pytest.raises(ValidationError):
            SubmitAnswerRequest(selected_answer="")


class TestCheckInRequest:
    def test_valid(self):
        req = EmotionalCheckInRequest(focus_areas=["mood", "sleep"], urgency_level="watch_closely")
        assert req.focus_areas == ["mood", "sleep"]

    def test_requires_focus(self):
        with pytest.raises(ValidationError):
            EmotionalCheckInRequest(focus_areas=[])

    def test_rejects_unknown_focus(self):
        with pytest.raises(ValidationError):
            EmotionalCheckInRequest(focus_areas=["weather"])

    def test_rejects_unknown_urgency(self):
        with pytest.raises(ValidationError):
            EmotionalCheckInRequest(focus_areas=["mood"], urgency_level="panic")
