"""Conversation transcript service.

Turns the raw Tavus transcript into a stored record with simple keyword
analysis: topics mentioned, reminiscence phrases ("remember when", "back in
1965"), and counts of positive / negative emotion words.
"""

from __future__ import annotations

import json
import re
from loguru import logger
from db import query_one, query_many

TOPIC_KEYWORDS = [
    "family", "children", "grandchildren", "spouse", "husband", "wife",
    "birthday", "anniversary", "holiday", "christmas", "thanksgiving",
    "vacation", "travel", "home", "garden", "cooking", "recipe",
    "work", "career", "retirement", "school", "education",
    "health", "doctor", "medicine", "hospital",
    "friends", "neighbors", "community", "church",
    "mood", "sleep", "energy", "appetite", "social", "activities", "comfort", "memory",
]

MEMORY_PATTERNS = [
    re.compile(r"remember when", re.IGNORECASE),
    re.compile(r"back in \d{4}", re.IGNORECASE),
    re.compile(r"years ago", re.IGNORECASE),
    re.compile(r"when I was", re.IGNORECASE),
    re.compile(r"used to", re.IGNORECASE),
    re.compile(r"in the old days", re.IGNORECASE),
]

POSITIVE_WORDS = ["happy", "joy", "love", "wonderful", "beautiful", "amazing", "grateful", "blessed"]
NEGATIVE_WORDS = ["sad", "worried", "afraid", "lonely", "confused", "frustrated", "angry", "upset"]


def format_timestamp(seconds: float) -> str:
    """83.4 → '01:23'."""
    mins = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{mins:02d}:{secs:02d}"


def extract_key_topics(text: str) -> list[str]:
    lower = text.lower()
    return [k for k in TOPIC_KEYWORDS if k in lower]


def extract_memory_references(text: str) -> list[str]:
    refs: list[str] = []
    for pattern in MEMORY_PATTERNS:
        refs.extend(pattern.findall(text))
    return refs


def analyze_emotional_content(text: str) -> dict:
    """Count positive / negative word hits (substring matches)."""
    lower = text.lower()
    result = {"positive": 0, "negative": 0, "neutral": 0, "indicators": []}

    for kind, words in (("positive", POSITIVE_WORDS), ("negative", NEGATIVE_WORDS)):
        for word in words:
            count = lower.count(word)
            if count:
                result[kind] += count
                result["indicators"].append({"type": kind, "word": word, "count": count})

    total_words = len(text.split())
    result["neutral"] = max(0, total_words - result["positive"] - result["negative"])
    return result


def process_transcript_data(raw: dict | None) -> dict:
    """Normalize a raw transcript ({"segments": [...]}) into the stored shape."""
    if not raw or not raw.get("segments"):
        return {
            "full_transcript": "",
            "transcript_segments": [],
            "word_count": 0,
            "duration_seconds": 0,
            "key_topics": [],
            "memory_references": [],
            "emotional_indicators": {},
        }

    segments = raw["segments"]
    full_transcript = "\n".join(
        f"[{format_timestamp(s.get('start') or 0)}] {s.get('speaker', 'unknown')}: {s.get('text', '')}"
        for s in segments
    )
    word_count = sum(len(s["text"].split()) for s in segments if s.get("text"))
    duration = max((s.get("end") or 0) for s in segments)

    return {
        "full_transcript": full_transcript,
        "transcript_segments": [
            {
                "start": s.get("start"),
                "end": s.get("end"),
                "speaker": s.get("speaker"),
                "text": s.get("text"),
                "confidence": s.get("confidence") or 1.0,
            }
            for s in segments
        ],
        "word_count": word_count,
        "duration_seconds": round(duration),
        "key_topics": extract_key_topics(full_transcript),
        "memory_references": extract_memory_references(full_transcript),
        "emotional_indicators": analyze_emotional_content(full_transcript),
    }


async def save(patient_id: str, session_id: str | None, conversation_id: str | None, processed: dict) -> dict:
    """Store a processed transcript."""
    row = await query_one(
        """INSERT INTO transcripts (patient_id, session_id, conversation_id, full_transcript,
           transcript_segments, word_count, duration_seconds, key_topics, memory_references,
           emotional_indicators)
           VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
           RETURNING *""",
        patient_id,
        session_id,
        conversation_id,
        processed["full_transcript"],
        json.dumps(processed["transcript_segments"]),
        processed["word_count"],
        processed["duration_seconds"],
        processed["key_topics"],
        processed["memory_references"],
        json.dumps(processed["emotional_indicators"]),
    )
    logger.info("Saved transcript {id} ({w} words)", id=row["id"], w=processed["word_count"])
    return row


async def get_by_patient(patient_id: str) -> list[dict]:
    return await query_many(
        "SELECT * FROM transcripts WHERE patient_id = $1 ORDER BY created_at DESC",
        patient_id,
    )


async def get_by_session(session_id: str) -> list[dict]:
    return await query_many(
        "SELECT * FROM transcripts WHERE session_id = $1 ORDER BY created_at DESC",
        session_id,
    )


async def get_by_conversation_id(conversation_id: str) -> dict | None:
    return await query_one("SELECT * FROM transcripts WHERE conversation_id = $1", conversation_id)


async def search(patient_id: str, term: str) -> list[dict]:
    """Case-insensitive full-text match on the transcript body."""
    return await query_many(
        """SELECT * FROM transcripts
           WHERE patient_id = $1 AND full_transcript ILIKE $2
           ORDER BY created_at DESC""",
        patient_id,
        f"%{term}%",
    )
