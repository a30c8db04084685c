"""Per-question countdown for a quiz session.

One asyncio task per question, ticking the session once per ``tick_interval``
seconds:

1. ``arm()`` when a question is shown → any previous task is cancelled first
2. The session gets answered / leaves in_progress → the task exits on its own
3. The countdown reaches zero → session records "Time up", ``on_expire`` runs

Nothing about the countdown survives a process restart; the in-flight
question is simply lost.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from loguru import logger

from quiz.models import QuizAnswer
from quiz.session import QuizSession, QuizState

DEFAULT_TICK_INTERVAL = 1.0


class QuestionTimer:
    """Drives ``QuizSession.tick()`` for the current question.

    Usage:
        timer = QuestionTimer(session, on_expire=notify_ui)
        session.start()
        timer.arm()
        ...
        session.next()
        timer.arm()
    """

    def __init__(
        self,
        session: QuizSession,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        on_expire: Callable[[QuizAnswer], Awaitable[None]] | None = None,
    ):
        self._session = session
        self._tick_interval = tick_interval
        self._on_expire = on_expire
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self) -> None:
        """Start the countdown for the session's current question."""
        self.cancel()
        if self._session.state is not QuizState.IN_PROGRESS:
            return
        self._task = asyncio.create_task(self._run(self._session.current_index))

    def cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, question_index: int) -> None:
        session = self._session
        try:
            while session.state is QuizState.IN_PROGRESS and session.current_index == question_index:
                await asyncio.sleep(self._tick_interval)
                if session.current_index != question_index:
                    return
                expired = session.tick()
                if expired is not None:
                    if self._on_expire:
                        await self._on_expire(expired)
                    return
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("Quiz timer error: {err}", err=str(e))
