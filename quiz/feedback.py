"""Feedback text spoken/shown after each quiz answer."""

from __future__ import annotations

from quiz.models import QuestionCategory, QuizQuestion, parse_date
from quiz.randomness import RandomSource, choice, default_source

ENCOURAGEMENTS = [
    "Exactly right! You remembered perfectly!",
    "That's absolutely correct! Your memory is wonderful!",
    "Perfect! You got it exactly right!",
    "Wonderful! You remembered that beautifully!",
    "Yes, that's exactly right! Well done!",
]

CORRECTIONS = [
    "That's a good guess, but actually",
    "Close, but let me help you remember -",
    "Almost there! Actually,",
    "Good try! The correct answer is that",
    "Not quite, but that's okay -",
]

CORRECT_CLOSING = "These memories are so precious, aren't they?"

REASSURANCE = (
    "But don't worry - remembering can be challenging sometimes, and that's "
    "perfectly normal. What matters is that we're sharing these beautiful moments together!"
)


def _join_names(names) -> str:
    names = list(names)
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + " and " + names[-1]


def _correct_statement(question: QuizQuestion) -> str:
    ctx = question.memory_context
    category = question.category
    answer = question.correct_answer

    if category is QuestionCategory.PEOPLE:
        return f"it was {_join_names(ctx.people_involved) or answer}"
    if category is QuestionCategory.LOCATION:
        return f"this was taken at {ctx.location or answer}"
    if category is QuestionCategory.DATE_YEAR:
        return f"this was in {answer}"
    if category is QuestionCategory.DATE_MONTH:
        taken_on = parse_date(ctx.date)
        return f"this was in {answer} {taken_on.year}" if taken_on else f"this was in {answer}"
    if category is QuestionCategory.EMOTION:
        return f"the mood of that moment was {answer.lower()}"
    if category is QuestionCategory.PEOPLE_COUNT:
        return f"there were {answer} people there"
    if category is QuestionCategory.CAPTION_KEYWORD:
        return f"this was a {answer.lower()}"
    return f"the answer was {answer}"


def generate_feedback(
    is_correct: bool,
    question: QuizQuestion,
    selected_answer: str | None = None,
    rng: RandomSource = default_source,
) -> str:
    """Encouragement on a correct answer, a gentle correction otherwise.

    ``selected_answer`` is accepted for callers that log it; the text itself
    only depends on correctness and the question's memory context.
    """
    ctx = question.memory_context

    if is_correct:
        parts = [choice(ENCOURAGEMENTS, rng)]
        if ctx.location:
            parts.append(f"That was such a lovely time at {ctx.location}.")
        if ctx.people_involved:
            parts.append(
                f"It's wonderful how you remember being with {_join_names(ctx.people_involved)}."
            )
        parts.append(CORRECT_CLOSING)
        return " ".join(parts)

    opener = choice(CORRECTIONS, rng)
    return f"{opener} {_correct_statement(question)}. {REASSURANCE}"
