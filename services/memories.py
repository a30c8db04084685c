"""Memory card service.

CRUD for the photo/audio memories caregivers record for a patient. The quiz
engine reads these through ``get_by_patient``.
"""

from __future__ import annotations

from datetime import date

from loguru import logger
from db import query_one, query_many, execute

_FIELDS = [
    ("photo_url", "photo_url"),
    ("audio_url", "audio_url"),
    ("date_taken", "date_taken"),
    ("location", "location"),
    ("caption", "caption"),
    ("emotional_context", "emotional_context"),
    ("people_involved", "people_involved"),
]


def _to_date(value):
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return value


async def create(patient_id: str, data: dict) -> dict:
    """Create a memory card for a patient."""
    row = await query_one(
        """INSERT INTO memory_cards (patient_id, photo_url, audio_url, date_taken, location,
           caption, emotional_context, people_involved)
           VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
           RETURNING *""",
        patient_id,
        data.get("photo_url"),
        data.get("audio_url"),
        _to_date(data.get("date_taken")),
        data.get("location"),
        data.get("caption"),
        data.get("emotional_context"),
        data.get("people_involved") or [],
    )
    logger.info("Stored memory {id} for patient {pid}", id=row["id"], pid=patient_id)
    return row


async def get_by_patient(patient_id: str) -> list[dict]:
    """All memory cards for a patient, most recent first."""
    return await query_many(
        "SELECT * FROM memory_cards WHERE patient_id = $1 ORDER BY date_taken DESC NULLS LAST",
        patient_id,
    )


async def get_by_id(memory_id: str) -> dict | None:
    return await query_one("SELECT * FROM memory_cards WHERE id = $1", memory_id)


async def update(memory_id: str, data: dict) -> dict | None:
    """Update a memory card. Returns updated row or None."""
    fields = []
    values = []
    idx = 1

    for key, col in _FIELDS:
        if key in data:
            val = data[key]
            if key == "date_taken":
                val = _to_date(val)
            fields.append(f"{col} = ${idx}")
            values.append(val)
            idx += 1

    if not fields:
        return await get_by_id(memory_id)

    fields.append("updated_at = NOW()")
    values.append(memory_id)

    sql = f"UPDATE memory_cards SET {', '.join(fields)} WHERE id = ${idx} RETURNING *"
    return await query_one(sql, *values)


async def delete(memory_id: str) -> bool:
    status = await execute("DELETE FROM memory_cards WHERE id = $1", memory_id)
    return status.endswith(" 1")
