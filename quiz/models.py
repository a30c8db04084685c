"""Quiz data model — memory records in, questions and answers out."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from loguru import logger


class QuestionCategory(str, Enum):
    PEOPLE = "people"
    LOCATION = "location"
    DATE_YEAR = "date_year"
    DATE_MONTH = "date_month"
    EMOTION = "emotion"
    PEOPLE_COUNT = "people_count"
    CAPTION_KEYWORD = "caption_keyword"


# Emotional context vocabulary → display label
EMOTION_LABELS = {
    "joyful": "Joyful & Happy",
    "peaceful": "Peaceful & Calm",
    "celebratory": "Celebratory & Festive",
    "nostalgic": "Nostalgic & Reflective",
    "loving": "Loving & Tender",
    "proud": "Proud & Accomplished",
    "adventurous": "Adventurous & Exciting",
    "cozy": "Cozy & Intimate",
}


def _parse_people(raw) -> tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            # Comma-separated text from older rows
            raw = raw.split(",")
        if isinstance(raw, str):
            raw = [raw]
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(p).strip() for p in raw if p and str(p).strip())


def _clean(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_date(value: str | date | None) -> date | None:
    """Parse an ISO date (or datetime) string. Returns None when unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.debug("Unparseable date_taken: {v}", v=value)
        return None


@dataclass(frozen=True)
class MemoryRecord:
    """A caregiver-authored memory card, read-only to the quiz engine."""

    id: str
    patient_id: str | None = None
    photo_url: str | None = None
    audio_url: str | None = None
    date_taken: str | None = None
    location: str | None = None
    people_involved: tuple[str, ...] = ()
    caption: str | None = None
    emotional_context: str | None = None
    created_at: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "MemoryRecord":
        """Build from a database row (or API payload), tolerating missing keys."""
        date_taken = row.get("date_taken")
        if isinstance(date_taken, (date, datetime)):
            date_taken = date_taken.isoformat()
        created_at = row.get("created_at")
        if isinstance(created_at, datetime):
            created_at = created_at.isoformat()
        emotion = _clean(row.get("emotional_context"))
        return cls(
            id=str(row["id"]),
            patient_id=_clean(row.get("patient_id")),
            photo_url=_clean(row.get("photo_url")),
            audio_url=_clean(row.get("audio_url")),
            date_taken=_clean(date_taken),
            location=_clean(row.get("location")),
            people_involved=_parse_people(row.get("people_involved")),
            caption=_clean(row.get("caption")),
            emotional_context=emotion.lower() if emotion else None,
            created_at=_clean(created_at),
        )

    @property
    def taken_on(self) -> date | None:
        return parse_date(self.date_taken)


@dataclass(frozen=True)
class MemoryContext:
    """Snapshot of the source memory, decoupled from later edits."""

    date: str | None = None
    location: str | None = None
    people_involved: tuple[str, ...] = ()
    caption: str | None = None

    @classmethod
    def from_memory(cls, memory: MemoryRecord) -> "MemoryContext":
        return cls(
            date=memory.date_taken,
            location=memory.location,
            people_involved=tuple(memory.people_involved),
            caption=memory.caption,
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "location": self.location,
            "peopleInvolved": list(self.people_involved),
            "caption": self.caption,
        }


@dataclass(frozen=True)
class QuizQuestion:
    """One multiple-choice item. ``correct_answer`` is the option's exact text."""

    id: str
    memory_id: str
    category: QuestionCategory
    prompt: str
    options: tuple[str, ...]
    correct_answer: str
    memory_context: MemoryContext = field(default_factory=MemoryContext)
    image_url: str | None = None

    @property
    def correct_index(self) -> int:
        return self.options.index(self.correct_answer)

    def is_correct(self, selected: str | None) -> bool:
        return selected is not None and selected == self.correct_answer

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            "id": self.id,
            "memoryId": self.memory_id,
            "category": self.category.value,
            "question": self.prompt,
            "options": list(self.options),
            "imageUrl": self.image_url,
            "memoryContext": self.memory_context.to_dict(),
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
            data["correctIndex"] = self.correct_index
        return data


@dataclass(frozen=True)
class QuizAnswer:
    question_id: str
    selected_answer: str
    is_correct: bool
    time_spent_seconds: int

    def to_dict(self) -> dict:
        return {
            "questionId": self.question_id,
            "selectedAnswer": self.selected_answer,
            "isCorrect": self.is_correct,
            "timeSpent": self.time_spent_seconds,
        }
