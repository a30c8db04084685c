"""Quiz service — connects the quiz engine to stored memories and sessions.

Fetch failures are never turned into a partial quiz: the caller gets a
PersistenceError and shows "no quiz available".
"""

from __future__ import annotations

from datetime import datetime, timezone

from loguru import logger

from config import settings
from quiz.assembler import build_quiz
from quiz.errors import PersistenceError
from quiz.models import MemoryRecord, QuizQuestion
from quiz.randomness import RandomSource, default_source
from quiz.session import QuizSession, QuizState


async def build_quiz_for_patient(
    patient_id: str, rng: RandomSource = default_source
) -> list[QuizQuestion]:
    """Load a patient's memories and assemble a quiz. Empty list = no quiz available."""
    from services.memories import get_by_patient

    try:
        rows = await get_by_patient(patient_id)
    except Exception as e:
        logger.error("Failed to load memories for patient {pid}: {err}", pid=patient_id, err=str(e))
        raise PersistenceError("Could not load memories for this patient") from e

    memories = []
    for row in rows:
        try:
            memories.append(MemoryRecord.from_row(row))
        except (KeyError, TypeError) as e:
            logger.warning("Skipping malformed memory row: {err}", err=str(e))

    return build_quiz(
        memories,
        rng=rng,
        max_questions=settings.quiz_max_questions,
        max_per_memory=settings.quiz_max_questions_per_memory,
    )


def quiz_results_payload(session: QuizSession) -> dict:
    """Result record stored with the quiz session row."""
    summary = session.summary
    return {
        "score": summary.score,
        "totalQuestions": summary.total_questions,
        "correctAnswers": summary.correct_answers,
        "timeSpentSeconds": summary.time_spent_seconds,
        "accuracyPercent": summary.accuracy_percent,
        "scoringPolicy": session.scoring.name,
        "questions": [q.to_dict() for q in session.questions],
        "answers": [a.to_dict() for a in session.answers],
    }


async def save_quiz_results(patient_id: str, session: QuizSession) -> dict:
    """Persist a completed quiz as a 'quiz' session record."""
    if session.state is not QuizState.COMPLETED or session.summary is None:
        raise ValueError("Only completed quizzes can be saved")

    from services.sessions import create

    try:
        row = await create(patient_id, {
            "session_type": "quiz",
            "status": "completed",
            "duration_seconds": session.summary.time_spent_seconds,
            "started_at": session.started_at.replace(tzinfo=None),
            "ended_at": datetime.now(timezone.utc).replace(tzinfo=None),
            "quiz_results": quiz_results_payload(session),
        })
    except Exception as e:
        logger.error("Failed to save quiz results for patient {pid}: {err}", pid=patient_id, err=str(e))
        raise PersistenceError("Could not save quiz results") from e

    logger.info(
        "Saved quiz results for patient {pid}: score {s}",
        pid=patient_id,
        s=session.summary.score,
    )
    return row
