"""Tests for services/sessions.py — session records, quiz history and patient stats."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from unittest.mock import AsyncMock, patch


class TestCreate:
    @pytest.mark.asyncio
    async def test_quiz_results_serialized(self):
        from services.sessions import create

        with patch("services.sessions.query_one", new_callable=AsyncMock, return_value={"id": "s1"}) as q:
            await create("p1", {"session_type": "quiz", "status": "completed", "quiz_results": {"score": 80}})
        args = q.call_args.args
        assert args[5] == "quiz"
        assert args[6] == "completed"
        assert json.loads(args[10]) == {"score": 80}

    @pytest.mark.asyncio
    async def test_defaults(self):
        from services.sessions import create

        with patch("services.sessions.query_one", new_callable=AsyncMock, return_value={"id": "s1"}) as q:
            await create("p1", {})
        args = q.call_args.args
        assert args[5] == "general"
        assert args[6] == "created"
        assert args[10] is None

    @pytest.mark.asyncio
    async def test_rejects_unknown_type(self):
        from services.sessions import create

        with pytest.raises(ValueError, match="Invalid session type"):
            await create("p1", {"session_type": "karaoke"})


class TestComplete:
    @pytest.mark.asyncio
    async def test_explicit_duration(self):
        from services.sessions import complete

        with patch("services.sessions.query_one", new_callable=AsyncMock, return_value={"id": "s1"}) as q:
            await complete("s1", 120)
        assert q.call_args.args[2] == 120

    @pytest.mark.asyncio
    async def test_duration_from_started_at(self):
        from services.sessions import complete

        started = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(seconds=90)
        with patch("services.sessions.get_by_id", new_callable=AsyncMock, return_value={"started_at": started}), \
             patch("services.sessions.query_one", new_callable=AsyncMock, return_value={"id": "s1"}) as q:
            await complete("s1")
        assert 89 <= q.call_args.args[2] <= 92

    @pytest.mark.asyncio
    async def test_duration_zero_when_never_started(self):
        from services.sessions import complete

        with patch("services.sessions.get_by_id", new_callable=AsyncMock, return_value={"started_at": None}), \
             patch("services.sessions.query_one", new_callable=AsyncMock, return_value=None) as q:
            assert await complete("s1") is None
        assert q.call_args.args[2] == 0


class TestQuizHistory:
    @pytest.mark.asyncio
    async def test_decodes_and_skips_bad_json(self):
        from services.sessions import get_quiz_history

        rows = [
            {"id": "s1", "created_at": "t1", "quiz_results": json.dumps({"score": 90})},
            {"id": "s2", "created_at": "t2", "quiz_results": "{broken"},
            {"id": "s3", "created_at": "t3", "quiz_results": {"score": 40}},
        ]
        with patch("services.sessions.query_many", new_callable=AsyncMock, return_value=rows):
            history = await get_quiz_history("p1")
        assert [h["session_id"] for h in history] == ["s1", "s3"]
        assert history[0]["score"] == 90


class TestPatientStats:
    @pytest.mark.asyncio
    async def test_aggregates(self):
        from services.sessions import get_patient_stats

        sessions = [{"duration_seconds": 100}, {"duration_seconds": 200}, {"duration_seconds": None}]
        transcripts = [
            {"word_count": 300, "key_topics": ["family", "garden"]},
            {"word_count": 150, "key_topics": ["family", "church"]},
        ]
        quizzes = [{"score": 80}, {"score": 60}]
        with patch("services.memories.get_by_patient", new_callable=AsyncMock, return_value=[{}, {}]), \
             patch("services.transcripts.get_by_patient", new_callable=AsyncMock, return_value=transcripts), \
             patch("services.sessions.get_for_patient", new_callable=AsyncMock, return_value=sessions), \
             patch("services.sessions.get_quiz_history", new_callable=AsyncMock, return_value=quizzes):
            stats = await get_patient_stats("p1")

        assert stats["memory_count"] == 2
        assert stats["session_count"] == 3
        assert stats["total_duration_seconds"] == 300
        assert stats["average_session_duration"] == 100
        assert stats["total_words"] == 450
        assert stats["average_words_per_session"] == 150
        assert stats["unique_topics"] == ["family", "garden", "church"]
        assert stats["quiz_count"] == 2
        assert stats["average_quiz_score"] == 70
        assert stats["best_quiz_score"] == 80

    @pytest.mark.asyncio
    async def test_empty_patient(self):
        from services.sessions import get_patient_stats

        with patch("services.memories.get_by_patient", new_callable=AsyncMock, return_value=[]), \
             patch("services.transcripts.get_by_patient", new_callable=AsyncMock, return_value=[]), \
             patch("services.sessions.get_for_patient", new_callable=AsyncMock, return_value=[]), \
             patch("services.sessions.get_quiz_history", new_callable=AsyncMock, return_value=[]):
            stats = await get_patient_stats("p1")

        assert stats["average_session_duration"] == 0
        assert stats["average_quiz_score"] is None
        assert stats["best_quiz_score"] is None
