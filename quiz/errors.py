"""Quiz engine exceptions.

"No quiz available" is not an error: it is an empty question list.
"""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz engine failures."""


class PersistenceError(QuizError):
    """Fetching memories or saving results failed; the quiz cannot proceed."""


class QuizRunNotFound(QuizError):
    """No live quiz run with the requested id (finished, cancelled or never started)."""

    def __init__(self, run_id: str):
        super().__init__(f"Quiz run {run_id} not found")
        self.run_id = run_id
