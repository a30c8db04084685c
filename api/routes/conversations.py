"""Video conversation routes.

Start a Tavus conversation (general, memory-focused or emotional check-in),
track the session record through activate/end, and pull the transcript in
once the conversation is over.
"""

# No `from __future__ import annotations` here: slowapi's wrapper hides this
# module's globals from FastAPI's annotation resolution.
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger

from api.middleware.rate_limit import CONVERSATION_LIMIT, limiter
from api.routes.patients import require_patient
from api.validators.schemas import EndSessionRequest, StartConversationRequest
from prompts import build_checkin_prompt, build_conversation_prompt
from services import memories, patients, sessions, transcripts
from services.tavus import ConversationServiceError, TavusClient

router = APIRouter()


def get_tavus(request: Request) -> TavusClient:
    client = getattr(request.app.state, "tavus", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Conversation service not configured")
    return client


async def _require_session(session_id: str) -> dict:
    session = await sessions.get_by_id(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/api/patients/{patient_id}/conversations", status_code=201)
@limiter.limit(CONVERSATION_LIMIT)
async def start_conversation(
    request: Request,
    patient_id: str,
    body: StartConversationRequest,
    tavus: TavusClient = Depends(get_tavus),
):
    """Create a Tavus conversation with a prompt built from the patient's profile."""
    patient = dict(await require_patient(patient_id))
    patient["family_relationships"] = patients.parse_json_field(patient.get("family_relationships"), {})
    patient["life_events"] = patients.parse_json_field(patient.get("life_events"), [])
    cards = await memories.get_by_patient(patient_id)

    selected = None
    if body.memory_id:
        selected = next((m for m in cards if str(m["id"]) == body.memory_id), None)
        if selected is None:
            raise HTTPException(status_code=404, detail="Memory not found")

    if body.checkin:
        session_type = "emotional_checkin"
        prompt = build_checkin_prompt(patient, body.checkin.model_dump(), cards)
    else:
        session_type = "memory_focused" if selected else "general"
        prompt = build_conversation_prompt(patient, cards, selected)

    conversation = await tavus.create_conversation(prompt, patient.get("preferred_name") or "friend")
    session = await sessions.create(patient_id, {
        "session_type": session_type,
        "memory_id": body.memory_id,
        "conversation_id": conversation.get("conversation_id"),
        "conversation_url": conversation.get("conversation_url"),
    })
    logger.info("Started {t} conversation for patient {pid}", t=session_type, pid=patient_id)
    return {
        "session": session,
        "conversation_id": conversation.get("conversation_id"),
        "conversation_url": conversation.get("conversation_url"),
    }


@router.post("/api/sessions/{session_id}/activate")
async def activate_session(session_id: str):
    await _require_session(session_id)
    return await sessions.activate(session_id)


@router.post("/api/sessions/{session_id}/end")
async def end_session(
    session_id: str,
    body: Optional[EndSessionRequest] = None,
    tavus: TavusClient = Depends(get_tavus),
):
    """End the Tavus conversation and mark the session completed.

    A failure to end the remote conversation is logged; the session is still
    completed so the caregiver's history stays accurate.
    """
    session = await _require_session(session_id)
    conversation_id = session.get("conversation_id")
    if conversation_id:
        try:
            await tavus.end_conversation(conversation_id)
        except ConversationServiceError as e:
            logger.warning("Could not end conversation {cid}: {err}", cid=conversation_id, err=str(e))

    duration = body.duration_seconds if body else None
    return await sessions.complete(session_id, duration)


@router.post("/api/sessions/{session_id}/transcript", status_code=201)
async def fetch_transcript(session_id: str, tavus: TavusClient = Depends(get_tavus)):
    """Fetch, analyze and store the transcript of a finished conversation."""
    session = await _require_session(session_id)
    conversation_id = session.get("conversation_id")
    if not conversation_id:
        raise HTTPException(status_code=400, detail="Session has no conversation")

    existing = await transcripts.get_by_conversation_id(conversation_id)
    if existing:
        return existing

    raw = await tavus.get_transcript(conversation_id)
    processed = transcripts.process_transcript_data(raw)
    return await transcripts.save(str(session["patient_id"]), session_id, conversation_id, processed)


@router.get("/api/patients/{patient_id}/sessions")
async def list_sessions(patient_id: str, limit: int = 50):
    await require_patient(patient_id)
    return {"sessions": await sessions.get_for_patient(patient_id, limit=min(max(limit, 1), 200))}


@router.get("/api/patients/{patient_id}/transcripts")
async def list_transcripts(patient_id: str, search: Optional[str] = None):
    await require_patient(patient_id)
    if search and search.strip():
        rows = await transcripts.search(patient_id, search.strip())
    else:
        rows = await transcripts.get_by_patient(patient_id)
    return {"transcripts": rows}
