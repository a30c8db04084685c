"""Quiz session state machine.

    not_started ──start()──▶ in_progress ──submit_answer() / time_expire()──▶ awaiting_next
                                  ▲                                              │
                                  └──────────────── next() ◀─────────────────────┤
                                                                                 ▼
                                                              completed (after the last question)

``restart()`` returns any state to in_progress at question 0 with the same
question order. ``cancel()`` discards the run. Calls that do not fit the
current state are rejected (``None`` / ``False``) instead of raising.

The session is synchronous; ``quiz.timer.QuestionTimer`` drives ``tick()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from loguru import logger

from quiz.models import QuizAnswer, QuizQuestion
from quiz.scoring import AccuracySpeedScoring, ScoringPolicy, accuracy_percent, performance_message

DEFAULT_TIME_LIMIT_SECONDS = 30
TIME_UP = "Time up"


class QuizState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    AWAITING_NEXT = "awaiting_next"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class QuizSummary:
    score: int
    total_questions: int
    correct_answers: int
    time_spent_seconds: int
    accuracy_percent: int
    performance_message: str

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "totalQuestions": self.total_questions,
            "correctAnswers": self.correct_answers,
            "timeSpentSeconds": self.time_spent_seconds,
            "accuracyPercent": self.accuracy_percent,
            "performanceMessage": self.performance_message,
        }


class QuizSession:
    """One playthrough of a fixed question list."""

    def __init__(
        self,
        questions: list[QuizQuestion],
        time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS,
        scoring: ScoringPolicy | None = None,
    ):
        if not questions:
            raise ValueError("A quiz session needs at least one question")
        if time_limit_seconds <= 0:
            raise ValueError("time_limit_seconds must be positive")
        self.questions: tuple[QuizQuestion, ...] = tuple(questions)
        self.time_limit_seconds = time_limit_seconds
        self.scoring = scoring or AccuracySpeedScoring()
        self.started_at = datetime.now(timezone.utc)
        self.state = QuizState.NOT_STARTED
        self.current_index = 0
        self.answers: list[QuizAnswer] = []
        self.score = 0
        self.time_remaining = time_limit_seconds
        self.summary: QuizSummary | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> QuizQuestion | None:
        if self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers if a.is_correct)

    @property
    def total_time_seconds(self) -> int:
        return sum(a.time_spent_seconds for a in self.answers)

    @property
    def is_finished(self) -> bool:
        return self.state in (QuizState.COMPLETED, QuizState.CANCELLED)

    @property
    def last_answer(self) -> QuizAnswer | None:
        return self.answers[-1] if self.answers else None

    def _current_answered(self) -> bool:
        question = self.current_question
        return question is not None and any(a.question_id == question.id for a in self.answers)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> bool:
        if self.state is not QuizState.NOT_STARTED:
            logger.debug("start() ignored in state {s}", s=self.state.value)
            return False
        self._reset_run()
        logger.info("Quiz started: {n} questions, {t}s per question",
                    n=self.total_questions, t=self.time_limit_seconds)
        return True

    def submit_answer(self, selected_answer: str) -> QuizAnswer | None:
        """Record the patient's choice. A second call for the same question is a no-op."""
        if self.state is not QuizState.IN_PROGRESS or self._current_answered():
            logger.debug("submit_answer() ignored in state {s}", s=self.state.value)
            return None
        question = self.current_question
        return self._record(selected_answer, question.is_correct(selected_answer))

    def time_expire(self) -> QuizAnswer | None:
        """Record a timeout for the current question if it is still unanswered."""
        if self.state is not QuizState.IN_PROGRESS or self._current_answered():
            return None
        self.time_remaining = 0
        logger.info("Question {i} timed out", i=self.current_index + 1)
        return self._record(TIME_UP, False)

    def tick(self, seconds: int = 1) -> QuizAnswer | None:
        """Advance the countdown. Returns the timeout answer when time runs out."""
        if self.state is not QuizState.IN_PROGRESS:
            return None
        self.time_remaining = max(0, self.time_remaining - seconds)
        if self.time_remaining == 0:
            return self.time_expire()
        return None

    def next(self) -> bool:
        if self.state is not QuizState.AWAITING_NEXT:
            logger.debug("next() ignored in state {s}", s=self.state.value)
            return False
        if self.current_index + 1 >= len(self.questions):
            self.current_index = len(self.questions)
            self._complete()
            return True
        self.current_index += 1
        self.time_remaining = self.time_limit_seconds
        self.state = QuizState.IN_PROGRESS
        return True

    def restart(self) -> bool:
        if self.state is QuizState.CANCELLED:
            return False
        self._reset_run()
        logger.info("Quiz restarted")
        return True

    def cancel(self) -> bool:
        if self.is_finished:
            return False
        self.state = QuizState.CANCELLED
        logger.info("Quiz cancelled at question {i}/{n}",
                    i=self.current_index + 1, n=self.total_questions)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset_run(self) -> None:
        self.state = QuizState.IN_PROGRESS
        self.current_index = 0
        self.answers = []
        self.score = 0
        self.summary = None
        self.time_remaining = self.time_limit_seconds

    def _record(self, selected_answer: str, is_correct: bool) -> QuizAnswer:
        answer = QuizAnswer(
            question_id=self.current_question.id,
            selected_answer=selected_answer,
            is_correct=is_correct,
            time_spent_seconds=self.time_limit_seconds - self.time_remaining,
        )
        self.answers.append(answer)
        self.score += self.scoring.points_for_answer(is_correct)
        self.state = QuizState.AWAITING_NEXT
        return answer

    def _complete(self) -> None:
        total = self.total_questions
        correct = self.correct_count
        elapsed = self.total_time_seconds
        self.score = self.scoring.final_score(self.score, correct, total, elapsed)
        percent = accuracy_percent(correct, total)
        self.summary = QuizSummary(
            score=self.score,
            total_questions=total,
            correct_answers=correct,
            time_spent_seconds=elapsed,
            accuracy_percent=percent,
            performance_message=performance_message(percent),
        )
        self.state = QuizState.COMPLETED
        logger.info("Quiz completed: {c}/{n} correct, score {s}, {t}s",
                    c=correct, n=total, s=self.score, t=elapsed)

    def to_dict(self) -> dict:
        """Live state for progress / score display. Answers stay hidden until answered."""
        question = self.current_question
        answered = self._current_answered()
        return {
            "state": self.state.value,
            "currentIndex": self.current_index,
            "totalQuestions": self.total_questions,
            "score": self.score,
            "correctAnswers": self.correct_count,
            "timeLimitSeconds": self.time_limit_seconds,
            "timeRemaining": self.time_remaining,
            "startedAt": self.started_at.isoformat(),
            "scoringPolicy": self.scoring.name,
            "currentQuestion": (
                question.to_dict(include_answer=answered) if question and not self.is_finished else None
            ),
            "answers": [a.to_dict() for a in self.answers],
            "summary": self.summary.to_dict() if self.summary else None,
        }
