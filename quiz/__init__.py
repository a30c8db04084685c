"""Memory quiz engine — question synthesis, quiz sessions, feedback and scoring.

randomness.py: injectable random source + shuffle / choice / sample
models.py: MemoryRecord, QuizQuestion, QuizAnswer
synthesizer.py: one memory → questions with distractors
assembler.py: all memories → shuffled, capped quiz
session.py: per-run state machine and summary
timer.py: asyncio countdown driving the session
feedback.py: encouragement / gentle correction text
scoring.py: accuracy + speed score and scoring policies
"""

__all__ = [
    "assembler",
    "errors",
    "feedback",
    "models",
    "randomness",
    "scoring",
    "session",
    "synthesizer",
    "timer",
]
