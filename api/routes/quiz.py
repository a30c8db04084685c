"""Memory quiz routes.

1. GET  /api/patients/{id}/quiz — preview the questions a quiz would use
2. POST /api/patients/{id}/quiz/runs — build a quiz and start a live run
3. GET/POST /api/quiz/runs/{run_id}/... — answer, next, restart, state
4. DELETE /api/quiz/runs/{run_id} — abandon the run (nothing is saved)

Live runs are held in-process; each owns its QuizSession and QuestionTimer.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from api.routes.patients import require_patient
from api.validators.schemas import StartQuizRequest, SubmitAnswerRequest
from config import settings
from quiz.errors import PersistenceError, QuizRunNotFound
from quiz.feedback import generate_feedback
from quiz.models import QuizAnswer
from quiz.randomness import RandomSource, default_source
from quiz.scoring import get_policy
from quiz.session import QuizSession, QuizState
from quiz.timer import QuestionTimer

router = APIRouter()

_MAX_RUNS = 200
_IDLE_TTL_SECONDS = 30 * 60


@dataclass
class QuizRun:
    run_id: str
    patient_id: str
    session: QuizSession
    rng: RandomSource = default_source
    timer: QuestionTimer | None = None
    feedback: str | None = None
    saved_session_id: str | None = None
    save_error: str | None = None
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_activity = time.monotonic()

    def idle_for(self, now: float) -> float:
        return now - self.last_activity

    async def on_expire(self, answer: QuizAnswer) -> None:
        question = self.session.questions[self.session.current_index]
        self.feedback = generate_feedback(False, question, answer.selected_answer, self.rng)

    def view(self) -> dict:
        return {
            "run_id": self.run_id,
            "patient_id": self.patient_id,
            "feedback": self.feedback,
            "saved_session_id": self.saved_session_id,
            "save_error": self.save_error,
            **self.session.to_dict(),
        }


# run_id → QuizRun
active_runs: dict[str, QuizRun] = {}


def _get_run(run_id: str) -> QuizRun:
    run = active_runs.get(run_id)
    if run is None:
        raise QuizRunNotFound(run_id)
    run.touch()
    return run


def _discard(run_id: str) -> QuizRun | None:
    """Remove a run, stopping its timer. Unfinished runs are cancelled, not saved."""
    run = active_runs.pop(run_id, None)
    if run is None:
        return None
    if run.timer is not None:
        run.timer.cancel()
    run.session.cancel()
    return run


def _evict_runs(now: float | None = None) -> None:
    """Make room once the registry is full.

    Finished runs go first, then runs idle past _IDLE_TTL_SECONDS, then the
    least recently used runs.
    """
    if len(active_runs) < _MAX_RUNS:
        return
    now = time.monotonic() if now is None else now
    by_age = sorted(active_runs.values(), key=lambda r: r.last_activity)
    finished = [r for r in by_age if r.session.is_finished]
    idle = [r for r in by_age if not r.session.is_finished and r.idle_for(now) >= _IDLE_TTL_SECONDS]
    rest = [r for r in by_age if not r.session.is_finished and r.idle_for(now) < _IDLE_TTL_SECONDS]

    evicted = 0
    for run in finished + idle + rest:
        if len(active_runs) < _MAX_RUNS:
            break
        _discard(run.run_id)
        evicted += 1
    if evicted:
        logger.info("Evicted {n} quiz runs from the registry", n=evicted)


def _rejected(run: QuizRun, message: str) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": message, "run": run.view()})


@router.get("/api/patients/{patient_id}/quiz")
async def preview_quiz(patient_id: str):
    """Questions a quiz would draw from (with answers, for caregivers)."""
    from services.quiz import build_quiz_for_patient

    await require_patient(patient_id)
    questions = await build_quiz_for_patient(patient_id)
    return {
        "available": bool(questions),
        "questions": [q.to_dict() for q in questions],
    }


@router.post("/api/patients/{patient_id}/quiz/runs")
async def start_quiz(patient_id: str, body: StartQuizRequest | None = None):
    """Build a fresh quiz and start the first question's countdown."""
    from services.quiz import build_quiz_for_patient

    body = body or StartQuizRequest()
    await require_patient(patient_id)
    questions = await build_quiz_for_patient(patient_id)
    if not questions:
        return {"available": False, "run": None}

    session = QuizSession(
        questions,
        time_limit_seconds=body.time_limit_seconds or settings.quiz_time_limit_seconds,
        scoring=get_policy(body.scoring_policy or settings.quiz_scoring_policy),
    )
    run = QuizRun(run_id=str(uuid.uuid4()), patient_id=patient_id, session=session)
    run.timer = QuestionTimer(session, on_expire=run.on_expire)

    _evict_runs()
    active_runs[run.run_id] = run
    session.start()
    run.timer.arm()
    logger.info("Quiz run {rid} started for patient {pid}", rid=run.run_id, pid=patient_id)
    return {"available": True, "run": run.view()}


@router.get("/api/quiz/runs/{run_id}")
async def get_quiz_run(run_id: str):
    return _get_run(run_id).view()


@router.post("/api/quiz/runs/{run_id}/answer")
async def submit_answer(run_id: str, body: SubmitAnswerRequest):
    run = _get_run(run_id)
    session = run.session
    question = session.current_question
    answer = session.submit_answer(body.selected_answer)
    if answer is None:
        return _rejected(run, "This question can't be answered right now")

    run.timer.cancel()
    run.feedback = generate_feedback(answer.is_correct, question, answer.selected_answer, run.rng)
    return {"answer": answer.to_dict(), "feedback": run.feedback, "run": run.view()}


@router.post("/api/quiz/runs/{run_id}/next")
async def next_question(run_id: str):
    """Advance; on the last question this completes the quiz and saves the result."""
    from services.quiz import save_quiz_results

    run = _get_run(run_id)
    session = run.session
    if not session.next():
        return _rejected(run, "Answer the current question first")

    run.feedback = None
    if session.state is QuizState.COMPLETED:
        run.timer.cancel()
        try:
            row = await save_quiz_results(run.patient_id, session)
            run.saved_session_id = str(row["id"])
            run.save_error = None
        except PersistenceError as e:
            # The summary is still shown; the caregiver sees the save failure.
            run.save_error = str(e)
    else:
        run.timer.arm()
    return {"run": run.view()}


@router.post("/api/quiz/runs/{run_id}/restart")
async def restart_quiz(run_id: str):
    """Replay the same questions in the same order."""
    run = _get_run(run_id)
    if not run.session.restart():
        return _rejected(run, "This quiz can no longer be restarted")
    run.feedback = None
    run.saved_session_id = None
    run.save_error = None
    run.timer.arm()
    return {"run": run.view()}


@router.delete("/api/quiz/runs/{run_id}")
async def cancel_quiz(run_id: str):
    """Stop the timer and discard the run without saving anything."""
    if _discard(run_id) is None:
        raise QuizRunNotFound(run_id)
    logger.info("Quiz run {rid} discarded", rid=run_id)
    return {"success": True}


@router.get("/api/patients/{patient_id}/quiz/history")
async def quiz_history(patient_id: str, limit: int = 10):
    """Saved results of past quizzes, newest first."""
    from services.sessions import get_quiz_history

    await require_patient(patient_id)
    return {"history": await get_quiz_history(patient_id, limit=min(max(limit, 1), 100))}
