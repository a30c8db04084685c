"""Patient profile service.

CRUD for the profiles caregivers keep about each patient (preferred name,
family relationships, personality traits, life events, medical notes).
"""

from __future__ import annotations

import json
from loguru import logger
from db import query_one, query_many, execute

# API key → column; JSON columns are serialized before writing
_FIELDS = [
    ("preferred_name", "preferred_name"),
    ("family_relationships", "family_relationships"),
    ("life_events", "life_events"),
    ("personality_traits", "personality_traits"),
    ("medical_notes", "medical_notes"),
]
_JSON_FIELDS = {"family_relationships", "life_events"}


def _encode(key: str, value):
    if key in _JSON_FIELDS and value is not None and not isinstance(value, str):
        return json.dumps(value)
    return value


async def create(data: dict) -> dict:
    """Create a new patient profile."""
    row = await query_one(
        """INSERT INTO patient_profiles (preferred_name, family_relationships, life_events,
           personality_traits, medical_notes)
           VALUES ($1, $2, $3, $4, $5)
           RETURNING *""",
        data.get("preferred_name"),
        _encode("family_relationships", data.get("family_relationships") or {}),
        _encode("life_events", data.get("life_events") or []),
        data.get("personality_traits") or [],
        data.get("medical_notes"),
    )
    logger.info("Created patient profile {id}", id=row["id"])
    return row


async def get_by_id(patient_id: str) -> dict | None:
    """Get a patient profile by ID."""
    return await query_one("SELECT * FROM patient_profiles WHERE id = $1", patient_id)


async def list_all() -> list[dict]:
    """List all patient profiles, newest first."""
    return await query_many("SELECT * FROM patient_profiles ORDER BY created_at DESC")


async def update(patient_id: str, data: dict) -> dict | None:
    """Update a patient profile. Returns updated row or None."""
    fields = []
    values = []
    idx = 1

    for key, col in _FIELDS:
        if key in data:
            fields.append(f"{col} = ${idx}")
            values.append(_encode(key, data[key]))
            idx += 1

    if not fields:
        return await get_by_id(patient_id)

    fields.append("updated_at = NOW()")
    values.append(patient_id)

    sql = f"UPDATE patient_profiles SET {', '.join(fields)} WHERE id = ${idx} RETURNING *"
    return await query_one(sql, *values)


async def delete(patient_id: str) -> bool:
    """Delete a patient and everything recorded about them."""
    for table in ("transcripts", "sessions", "memory_cards"):
        await execute(f"DELETE FROM {table} WHERE patient_id = $1", patient_id)
    status = await execute("DELETE FROM patient_profiles WHERE id = $1", patient_id)
    deleted = status.endswith(" 1")
    if deleted:
        logger.info("Deleted patient {id} and associated data", id=patient_id)
    return deleted


def parse_json_field(value, default):
    """Decode a JSON column that asyncpg returned as text."""
    if value is None:
        return default
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            return default
    return value
