"""Patient profile and memory card routes."""

# No `from __future__ import annotations` here: slowapi's wrapper hides this
# module's globals from FastAPI's annotation resolution.
from fastapi import APIRouter, HTTPException, Request

from api.middleware.rate_limit import WRITE_LIMIT, limiter
from api.validators.schemas import (
    CreateMemoryRequest,
    CreatePatientRequest,
    UpdateMemoryRequest,
    UpdatePatientRequest,
)
from services import memories, patients, sessions

router = APIRouter()


async def require_patient(patient_id: str) -> dict:
    """Load a patient or raise 404."""
    patient = await patients.get_by_id(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient


# ---------------------------------------------------------------------------
# Patients
# ---------------------------------------------------------------------------

@router.post("/api/patients", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_patient(request: Request, body: CreatePatientRequest):
    return await patients.create(body.model_dump(mode="json"))


@router.get("/api/patients")
async def list_patients():
    return {"patients": await patients.list_all()}


@router.get("/api/patients/{patient_id}")
async def get_patient(patient_id: str):
    return await require_patient(patient_id)


@router.patch("/api/patients/{patient_id}")
async def update_patient(patient_id: str, body: UpdatePatientRequest):
    row = await patients.update(patient_id, body.model_dump(mode="json", exclude_unset=True))
    if row is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return row


@router.delete("/api/patients/{patient_id}")
async def delete_patient(patient_id: str):
    if not await patients.delete(patient_id):
        raise HTTPException(status_code=404, detail="Patient not found")
    return {"success": True}


@router.get("/api/patients/{patient_id}/stats")
async def patient_stats(patient_id: str):
    await require_patient(patient_id)
    return await sessions.get_patient_stats(patient_id)


# ---------------------------------------------------------------------------
# Memory cards
# ---------------------------------------------------------------------------

@router.post("/api/patients/{patient_id}/memories", status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_memory(request: Request, patient_id: str, body: CreateMemoryRequest):
    await require_patient(patient_id)
    return await memories.create(patient_id, body.model_dump())


@router.get("/api/patients/{patient_id}/memories")
async def list_memories(patient_id: str):
    return {"memories": await memories.get_by_patient(patient_id)}


@router.patch("/api/memories/{memory_id}")
async def update_memory(memory_id: str, body: UpdateMemoryRequest):
    row = await memories.update(memory_id, body.model_dump(exclude_unset=True))
    if row is None:
        raise HTTPException(status_code=404, detail="Memory not found")
    return row


@router.delete("/api/memories/{memory_id}")
async def delete_memory(memory_id: str):
    if not await memories.delete(memory_id):
        raise HTTPException(status_code=404, detail="Memory not found")
    return {"success": True}
