"""Session record service.

A session is any timed activity with a patient: a video conversation
(general, memory-focused, emotional check-in) or a memory quiz.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from loguru import logger
from db import query_one, query_many

SESSION_TYPES = ("general", "memory_focused", "emotional_checkin", "quiz")


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def create(patient_id: str, data: dict) -> dict:
    """Create a session record.

    Accepts snake_case keys: session_type, memory_id, conversation_id,
    conversation_url, status, duration_seconds, started_at, ended_at,
    quiz_results.
    """
    session_type = data.get("session_type", "general")
    if session_type not in SESSION_TYPES:
        raise ValueError(f"Invalid session type. Must be one of: {', '.join(SESSION_TYPES)}")

    row = await query_one(
        """INSERT INTO sessions (patient_id, memory_id, conversation_id, conversation_url,
           session_type, status, duration_seconds, started_at, ended_at, quiz_results)
           VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
           RETURNING *""",
        patient_id,
        data.get("memory_id"),
        data.get("conversation_id"),
        data.get("conversation_url"),
        session_type,
        data.get("status", "created"),
        data.get("duration_seconds", 0),
        data.get("started_at"),
        data.get("ended_at"),
        json.dumps(data["quiz_results"]) if data.get("quiz_results") else None,
    )
    logger.info("Created {t} session {id} for patient {pid}", t=session_type, id=row["id"], pid=patient_id)
    return row


async def get_by_id(session_id: str) -> dict | None:
    return await query_one("SELECT * FROM sessions WHERE id = $1", session_id)


async def get_for_patient(patient_id: str, limit: int = 50) -> list[dict]:
    """Recent sessions for a patient."""
    return await query_many(
        "SELECT * FROM sessions WHERE patient_id = $1 ORDER BY created_at DESC LIMIT $2",
        patient_id,
        limit,
    )


async def activate(session_id: str) -> dict | None:
    """Mark a session as started (the patient joined the conversation)."""
    row = await query_one(
        "UPDATE sessions SET status = 'active', started_at = $1 WHERE id = $2 RETURNING *",
        _now(),
        session_id,
    )
    if row:
        logger.info("Session {id} active", id=session_id)
    return row


async def complete(session_id: str, duration_seconds: int | None = None) -> dict | None:
    """Mark a session as completed.

    Duration falls back to the time since ``started_at`` when not given.
    """
    if duration_seconds is None:
        existing = await get_by_id(session_id)
        started_at = (existing or {}).get("started_at")
        if started_at is not None:
            if started_at.tzinfo is not None:
                started_at = started_at.replace(tzinfo=None)
            duration_seconds = max(0, round((_now() - started_at).total_seconds()))
        else:
            duration_seconds = 0

    row = await query_one(
        """UPDATE sessions SET status = 'completed', ended_at = $1, duration_seconds = $2
           WHERE id = $3
           RETURNING *""",
        _now(),
        duration_seconds,
        session_id,
    )
    if row:
        logger.info("Completed session {id} ({dur}s)", id=session_id, dur=duration_seconds)
    return row


async def get_quiz_history(patient_id: str, limit: int = 10) -> list[dict]:
    """Completed quiz results for a patient, newest first, decoded."""
    rows = await query_many(
        """SELECT id, quiz_results, created_at
           FROM sessions
           WHERE patient_id = $1
             AND session_type = 'quiz'
             AND quiz_results IS NOT NULL
           ORDER BY created_at DESC
           LIMIT $2""",
        patient_id,
        limit,
    )
    history = []
    for row in rows:
        results = row["quiz_results"]
        if isinstance(results, str):
            try:
                results = json.loads(results)
            except ValueError:
                logger.warning("Skipping quiz session {id}: bad quiz_results JSON", id=row["id"])
                continue
        history.append({"session_id": row["id"], "created_at": row["created_at"], **results})
    return history


async def get_patient_stats(patient_id: str) -> dict:
    """Aggregate counts and averages for the caregiver dashboard."""
    from services import memories, transcripts

    memory_rows = await memories.get_by_patient(patient_id)
    session_rows = await get_for_patient(patient_id, limit=1000)
    transcript_rows = await transcripts.get_by_patient(patient_id)
    quizzes = await get_quiz_history(patient_id, limit=1000)

    total_duration = sum(s.get("duration_seconds") or 0 for s in session_rows)
    total_words = sum(t.get("word_count") or 0 for t in transcript_rows)

    topics: list[str] = []
    for t in transcript_rows:
        for topic in t.get("key_topics") or []:
            if topic not in topics:
                topics.append(topic)

    scores = [q["score"] for q in quizzes if isinstance(q.get("score"), (int, float))]
    n_sessions = len(session_rows)

    return {
        "memory_count": len(memory_rows),
        "session_count": n_sessions,
        "transcript_count": len(transcript_rows),
        "total_duration_seconds": total_duration,
        "total_words": total_words,
        "unique_topics": topics,
        "average_session_duration": round(total_duration / n_sessions) if n_sessions else 0,
        "average_words_per_session": round(total_words / n_sessions) if n_sessions else 0,
        "quiz_count": len(quizzes),
        "average_quiz_score": round(sum(scores) / len(scores)) if scores else None,
        "best_quiz_score": max(scores) if scores else None,
    }
