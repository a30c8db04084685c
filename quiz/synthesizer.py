"""Question synthesizer — turns one memory record into quiz questions.

Each category is checked independently against the memory's fields; every
eligible category produces a question (up to ``max_per_memory``, in the order
of ``CATEGORY_ORDER``). Options are the correct answer plus up to three
distractors, shuffled so the correct position is random.

With the default cap of 4 a fully filled memory stops after people, location,
year and month; emotion, people count and caption keyword questions only
appear for sparser memories or a higher ``max_per_memory``.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

from loguru import logger

from quiz.models import (
    EMOTION_LABELS,
    MemoryContext,
    MemoryRecord,
    QuestionCategory,
    QuizQuestion,
)
from quiz.randomness import RandomSource, default_source, sample, shuffle

MAX_OPTIONS = 4
MIN_OPTIONS = 2
DEFAULT_MAX_PER_MEMORY = 4
MIN_YEAR = 1900  # exclusive
MIN_CAPTION_WORDS = 6

CATEGORY_ORDER = (
    QuestionCategory.PEOPLE,
    QuestionCategory.LOCATION,
    QuestionCategory.DATE_YEAR,
    QuestionCategory.DATE_MONTH,
    QuestionCategory.EMOTION,
    QuestionCategory.PEOPLE_COUNT,
    QuestionCategory.CAPTION_KEYWORD,
)

COMMON_NAMES = (
    "Sarah", "Michael", "Emma", "David", "Lisa", "John", "Mary", "Robert",
    "James", "Patricia", "Linda", "William", "Barbara", "Richard", "Susan", "Thomas",
)

LOCATION_ARCHETYPES = (
    "At home", "In the garden", "At the park", "Downtown",
    "At the beach", "In the kitchen", "At church", "At a restaurant",
)

CAPTION_KEYWORDS = (
    "birthday", "anniversary", "wedding", "graduation", "vacation",
    "holiday", "christmas", "thanksgiving", "celebration", "party",
    "reunion", "picnic", "gathering", "dinner", "lunch",
)

MONTH_NAMES = tuple(calendar.month_name[1:])

# (with photo, without photo)
PROMPTS = {
    QuestionCategory.PEOPLE: (
        "Who can you see in this photo?",
        "Who was with you for this memory?",
    ),
    QuestionCategory.LOCATION: (
        "Where was this photo taken?",
        "Where did this moment happen?",
    ),
    QuestionCategory.DATE_YEAR: (
        "What year was this photo taken?",
        "What year did this moment happen?",
    ),
    QuestionCategory.DATE_MONTH: (
        "In which month was this photo taken?",
        "In which month did this moment happen?",
    ),
    QuestionCategory.EMOTION: (
        "What was the mood of this moment?",
        "What was the mood of this moment?",
    ),
    QuestionCategory.PEOPLE_COUNT: (
        "How many people are part of this photo's memory?",
        "How many people were part of this memory?",
    ),
    QuestionCategory.CAPTION_KEYWORD: (
        "What kind of occasion was captured in this photo?",
        "What kind of occasion was this?",
    ),
}


def find_caption_keyword(caption: str | None) -> str | None:
    """Return the first recognized occasion keyword in a long-enough caption."""
    if not caption or len(caption.split()) < MIN_CAPTION_WORDS:
        return None
    for word in re.findall(r"[a-z]+", caption.lower()):
        if word in CAPTION_KEYWORDS:
            return word
    return None


def build_options(
    correct: str, distractors: list[str], rng: RandomSource = default_source
) -> list[str] | None:
    """Correct answer plus distinct distractors, shuffled. None if < 2 options."""
    options = [correct]
    for candidate in distractors:
        if len(options) >= MAX_OPTIONS:
            break
        if candidate and candidate not in options:
            options.append(candidate)
    if len(options) < MIN_OPTIONS:
        return None
    return shuffle(options, rng)


class QuestionSynthesizer:
    """Builds every answerable question for a memory record.

    Args:
        rng: Random source used for distractor selection and option order.
        max_per_memory: Upper bound on questions produced per memory.
        today: Reference date for the latest plausible year (defaults to today).
    """

    def __init__(
        self,
        rng: RandomSource = default_source,
        max_per_memory: int = DEFAULT_MAX_PER_MEMORY,
        today: date | None = None,
    ):
        self.rng = rng
        self.max_per_memory = max_per_memory
        self._today = today

    @property
    def current_year(self) -> int:
        return (self._today or date.today()).year

    def eligible_categories(self, memory: MemoryRecord) -> list[QuestionCategory]:
        """Categories whose required fields are present, in CATEGORY_ORDER."""
        taken_on = memory.taken_on
        checks = {
            QuestionCategory.PEOPLE: len(memory.people_involved) > 0,
            QuestionCategory.LOCATION: bool(memory.location),
            QuestionCategory.DATE_YEAR: taken_on is not None,
            QuestionCategory.DATE_MONTH: taken_on is not None,
            QuestionCategory.EMOTION: bool((memory.emotional_context or "").strip()),
            QuestionCategory.PEOPLE_COUNT: len(memory.people_involved) > 1,
            QuestionCategory.CAPTION_KEYWORD: find_caption_keyword(memory.caption) is not None,
        }
        return [c for c in CATEGORY_ORDER if checks[c]]

    def synthesize(self, memory: MemoryRecord) -> list[QuizQuestion]:
        """Return zero or more questions for *memory*."""
        questions: list[QuizQuestion] = []
        for category in self.eligible_categories(memory):
            if len(questions) >= self.max_per_memory:
                break
            question = self._build(memory, category, ordinal=len(questions) + 1)
            if question is not None:
                questions.append(question)

        if not questions:
            logger.debug("Memory {mid} yields no quiz questions", mid=memory.id)
        return questions

    # ------------------------------------------------------------------
    # Per-category answer + distractor generation
    # ------------------------------------------------------------------

    def _build(
        self, memory: MemoryRecord, category: QuestionCategory, ordinal: int
    ) -> QuizQuestion | None:
        builder = {
            QuestionCategory.PEOPLE: self._people,
            QuestionCategory.LOCATION: self._location,
            QuestionCategory.DATE_YEAR: self._year,
            QuestionCategory.DATE_MONTH: self._month,
            QuestionCategory.EMOTION: self._emotion,
            QuestionCategory.PEOPLE_COUNT: self._people_count,
            QuestionCategory.CAPTION_KEYWORD: self._caption_keyword,
        }[category]
        correct, distractors = builder(memory)

        options = build_options(correct, distractors, self.rng)
        if options is None:
            logger.debug(
                "Dropping {cat} question for memory {mid}: not enough distinct options",
                cat=category.value,
                mid=memory.id,
            )
            return None

        with_photo, without_photo = PROMPTS[category]
        return QuizQuestion(
            id=f"quiz_{memory.id}_{category.value}_{ordinal}",
            memory_id=memory.id,
            category=category,
            prompt=with_photo if memory.photo_url else without_photo,
            options=tuple(options),
            correct_answer=correct,
            memory_context=MemoryContext.from_memory(memory),
            image_url=memory.photo_url,
        )

    def _people(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        people = memory.people_involved
        taken = {p.lower() for p in people}
        pool = shuffle([n for n in COMMON_NAMES if n.lower() not in taken], self.rng)
        size = min(len(people), len(pool))
        groups = []
        if size:
            # Disjoint chunks keep every distractor distinct
            for start in range(0, len(pool) - size + 1, size):
                groups.append(", ".join(pool[start:start + size]))
                if len(groups) == MAX_OPTIONS - 1:
                    break
        return ", ".join(people), groups

    def _location(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        correct = memory.location
        others = [loc for loc in LOCATION_ARCHETYPES if loc.lower() != correct.lower()]
        return correct, sample(others, MAX_OPTIONS - 1, self.rng)

    def _year(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        year = memory.taken_on.year
        candidates = []
        for delta in (1, -1, 2, -2, 3, -3):
            y = year + delta
            if MIN_YEAR < y <= self.current_year and y not in candidates:
                candidates.append(y)
        return str(year), [str(y) for y in sample(candidates, MAX_OPTIONS - 1, self.rng)]

    def _month(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        correct = MONTH_NAMES[memory.taken_on.month - 1]
        others = [m for m in MONTH_NAMES if m != correct]
        return correct, sample(others, MAX_OPTIONS - 1, self.rng)

    def _emotion(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        context = memory.emotional_context.strip()
        correct = EMOTION_LABELS.get(context.lower(), context.title())
        others = [label for label in EMOTION_LABELS.values() if label.lower() != correct.lower()]
        return correct, sample(others, MAX_OPTIONS - 1, self.rng)

    def _people_count(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        count = len(memory.people_involved)
        candidates = []
        for delta in (-1, 1, -2, 2):
            n = count + delta
            if n > 0 and n != count and n not in candidates:
                candidates.append(n)
        return str(count), [str(n) for n in candidates]

    def _caption_keyword(self, memory: MemoryRecord) -> tuple[str, list[str]]:
        keyword = find_caption_keyword(memory.caption)
        others = [k.capitalize() for k in CAPTION_KEYWORDS if k != keyword]
        return keyword.capitalize(), sample(others, MAX_OPTIONS - 1, self.rng)


def synthesize(memory: MemoryRecord, rng: RandomSource = default_source) -> list[QuizQuestion]:
    """Convenience wrapper using default limits."""
    return QuestionSynthesizer(rng=rng).synthesize(memory)
