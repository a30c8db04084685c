"""Quiz scoring — accuracy + speed formula and the two scoring policies.

The canonical score rewards accuracy (up to 70 points) and speed (up to 30
points, one point lost per second of average answer time). The result is not
clamped; for non-negative times it already falls within [0, 100].
"""

from __future__ import annotations

import math

ACCURACY_WEIGHT = 70
SPEED_WEIGHT = 30
FLAT_POINTS_PER_CORRECT = 10


def compute_score(correct_count: int, total_questions: int, time_spent_seconds: float) -> int:
    """Combine accuracy and average answer time into an integer score."""
    if total_questions <= 0:
        raise ValueError("total_questions must be positive")
    accuracy_score = (correct_count / total_questions) * ACCURACY_WEIGHT
    speed_bonus = max(0.0, SPEED_WEIGHT - (time_spent_seconds / total_questions))
    # Half-up rounding, not banker's rounding
    return math.floor(accuracy_score + speed_bonus + 0.5)


def accuracy_percent(correct_count: int, total_questions: int) -> int:
    if total_questions <= 0:
        return 0
    return math.floor(correct_count / total_questions * 100 + 0.5)


def performance_message(percent: int) -> str:
    """Caregiver-facing headline for a finished quiz."""
    if percent >= 90:
        return "Outstanding memory recall!"
    if percent >= 75:
        return "Excellent work!"
    if percent >= 60:
        return "Good job remembering!"
    if percent >= 40:
        return "Nice effort!"
    return "Every memory counts!"


class ScoringPolicy:
    """Strategy deciding running points and the final score of a quiz run."""

    name = "base"

    def points_for_answer(self, is_correct: bool) -> int:
        raise NotImplementedError

    def final_score(
        self, running_score: int, correct_count: int, total_questions: int, time_spent_seconds: float
    ) -> int:
        raise NotImplementedError


class AccuracySpeedScoring(ScoringPolicy):
    """Score computed once at the end from accuracy and speed."""

    name = "accuracy_speed"

    def points_for_answer(self, is_correct: bool) -> int:
        return 0

    def final_score(self, running_score, correct_count, total_questions, time_spent_seconds):
        return compute_score(correct_count, total_questions, time_spent_seconds)


class FlatScoring(ScoringPolicy):
    """Fixed points per correct answer, accumulated as the run goes."""

    name = "flat"

    def __init__(self, points: int = FLAT_POINTS_PER_CORRECT):
        self.points = points

    def points_for_answer(self, is_correct: bool) -> int:
        return self.points if is_correct else 0

    def final_score(self, running_score, correct_count, total_questions, time_spent_seconds):
        return running_score


SCORING_POLICIES: dict[str, type[ScoringPolicy]] = {
    AccuracySpeedScoring.name: AccuracySpeedScoring,
    FlatScoring.name: FlatScoring,
}


def get_policy(name: str | None) -> ScoringPolicy:
    """Look up a policy by name; None selects the canonical accuracy+speed policy."""
    if not name:
        return AccuracySpeedScoring()
    try:
        return SCORING_POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown scoring policy '{name}'. Must be one of: {', '.join(SCORING_POLICIES)}"
        ) from None
