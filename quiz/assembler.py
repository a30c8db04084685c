"""Quiz assembler — a patient's memories → one shuffled, capped question list."""

from __future__ import annotations

from typing import Iterable

from loguru import logger

from quiz.models import MemoryRecord, QuizQuestion
from quiz.randomness import RandomSource, default_source, shuffle
from quiz.synthesizer import DEFAULT_MAX_PER_MEMORY, QuestionSynthesizer

MAX_QUIZ_QUESTIONS = 10


def build_quiz(
    memories: Iterable[MemoryRecord | dict],
    rng: RandomSource = default_source,
    max_questions: int = MAX_QUIZ_QUESTIONS,
    max_per_memory: int = DEFAULT_MAX_PER_MEMORY,
    synthesizer: QuestionSynthesizer | None = None,
) -> list[QuizQuestion]:
    """Build a quiz from memory records (or raw rows).

    Returns an empty list when nothing is answerable; callers treat that as
    "no quiz available", not as an error.

    A prebuilt *synthesizer* brings its own random source and per-memory cap,
    so *rng* and *max_per_memory* cannot be combined with it.
    """
    if synthesizer is not None and (rng is not default_source or max_per_memory != DEFAULT_MAX_PER_MEMORY):
        raise ValueError("Pass either a synthesizer or rng/max_per_memory, not both")
    synth = synthesizer or QuestionSynthesizer(rng=rng, max_per_memory=max_per_memory)

    seen_memories: set[str] = set()
    questions: list[QuizQuestion] = []
    for memory in memories or []:
        if isinstance(memory, dict):
            memory = MemoryRecord.from_row(memory)
        if memory.id in seen_memories:
            continue
        seen_memories.add(memory.id)
        questions.extend(synth.synthesize(memory))

    if not questions:
        logger.info("No quiz questions from {n} memories", n=len(seen_memories))
        return []

    selected = shuffle(questions, synth.rng)[:max_questions]
    logger.info(
        "Built quiz: {n} questions from {m} memories ({total} candidates)",
        n=len(selected),
        m=len(seen_memories),
        total=len(questions),
    )
    return selected
