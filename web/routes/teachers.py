"""Teacher record routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from web.dependencies import get_store
from web.schemas import (
    EvaluationResponse,
    TeacherImportRequest,
    TeacherImportResult,
    TeacherPayload,
    TeacherResponse,
)
from web.services.repository import InMemoryEvaluationStore, require_teacher

router = APIRouter()


@router.get("", response_model=list[TeacherResponse])
async def list_teachers(store: InMemoryEvaluationStore = Depends(get_store)):
    """List teachers ordered by surname."""
    return store.list_teachers()


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(payload: TeacherPayload, store: InMemoryEvaluationStore = Depends(get_store)):
    return store.save_teacher(payload.to_record())


@router.post("/import", response_model=TeacherImportResult)
async def import_teachers(payload: TeacherImportRequest, store: InMemoryEvaluationStore = Depends(get_store)):
    """Bulk-create teachers, skipping DNIs that are already registered."""
    records = [teacher.to_record() for teacher in payload.teachers]
    imported = store.import_teachers(records)
    return TeacherImportResult(imported=imported, skipped=len(records) - imported)


@router.get("/{teacher_id}", response_model=TeacherResponse)
async def get_teacher(teacher_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    return require_teacher(store, teacher_id)


@router.put("/{teacher_id}", response_model=TeacherResponse)
async def replace_teacher(
    teacher_id: str,
    payload: TeacherPayload,
    store: InMemoryEvaluationStore = Depends(get_store),
):
    """Replace a teacher record; total hours are recomputed from the shifts."""
    return store.save_teacher(payload.to_record(teacher_id))


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_teacher(teacher_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    store.delete_teacher(teacher_id)


@router.get("/{teacher_id}/evaluations", response_model=list[EvaluationResponse])
async def list_teacher_evaluations(teacher_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    """Evaluations of one teacher, newest first."""
    require_teacher(store, teacher_id)
    return [EvaluationResponse.from_record(e) for e in store.list_evaluations_by_teacher(teacher_id)]
