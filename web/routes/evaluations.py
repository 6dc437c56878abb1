"""Evaluation record and report export routes."""
from __future__ import annotations

import asyncio
import io
import unicodedata
from typing import Any, Callable
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from web.config import Settings
from web.dependencies import get_document_generator, get_settings, get_store
from web.exceptions import GENERATION_ERROR_PREFIX
from web.schemas import BatchReportRequest, EvaluationPayload, EvaluationResponse, ScoreSummaryResponse
from web.services.docx_report import EvaluationDocumentGenerator, GeneratedDocument
from web.services.repository import (
    InMemoryEvaluationStore,
    collect_report_pairs,
    require_evaluation,
    require_teacher,
)
from web.services.scoring import summarize

router = APIRouter()


def _validate_evidence_size(payload: EvaluationPayload, settings: Settings) -> None:
    if not payload.evidence_image_base64:
        return
    # base64 carries 3 bytes in every 4 characters
    approx_bytes = len(payload.evidence_image_base64) * 3 // 4
    if approx_bytes > settings.MAX_EVIDENCE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Evidence image exceeds the maximum allowed size.",
        )


def _content_disposition(filename: str) -> str:
    ascii_name = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def _document_response(document: GeneratedDocument) -> StreamingResponse:
    headers = {"Content-Disposition": _content_disposition(document.filename)}
    return StreamingResponse(io.BytesIO(document.content), media_type=document.media_type, headers=headers)


async def _run_generation(settings: Settings, func: Callable[..., GeneratedDocument], *args: Any) -> GeneratedDocument:
    """Run a blocking generation call in a worker thread under the configured timeout."""
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args),
            timeout=settings.GENERATION_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError as exc:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail=f"{GENERATION_ERROR_PREFIX}tiempo de espera agotado",
        ) from exc


@router.get("", response_model=list[EvaluationResponse])
async def list_evaluations(store: InMemoryEvaluationStore = Depends(get_store)):
    """List all evaluations, newest first."""
    return [EvaluationResponse.from_record(e) for e in store.list_evaluations()]


@router.post("", response_model=EvaluationResponse, status_code=status.HTTP_201_CREATED)
async def create_evaluation(
    payload: EvaluationPayload,
    store: InMemoryEvaluationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    require_teacher(store, payload.teacher_id)
    _validate_evidence_size(payload, settings)
    return EvaluationResponse.from_record(store.save_evaluation(payload.to_record()))


@router.post("/report")
async def download_batch_report(
    request: BatchReportRequest,
    store: InMemoryEvaluationStore = Depends(get_store),
    generator: EvaluationDocumentGenerator = Depends(get_document_generator),
    settings: Settings = Depends(get_settings),
):
    """Download one document summarizing the requested evaluations, in request order."""
    pairs = collect_report_pairs(store, request.evaluation_ids)
    document = await _run_generation(settings, generator.export_batch_report, pairs)
    return _document_response(document)


@router.get("/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(evaluation_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    return EvaluationResponse.from_record(require_evaluation(store, evaluation_id))


@router.put("/{evaluation_id}", response_model=EvaluationResponse)
async def replace_evaluation(
    evaluation_id: str,
    payload: EvaluationPayload,
    store: InMemoryEvaluationStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """Replace the whole evaluation record; there is no partial update."""
    require_teacher(store, payload.teacher_id)
    _validate_evidence_size(payload, settings)
    return EvaluationResponse.from_record(store.save_evaluation(payload.to_record(evaluation_id)))


@router.delete("/{evaluation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_evaluation(evaluation_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    store.delete_evaluation(evaluation_id)


@router.get("/{evaluation_id}/summary", response_model=ScoreSummaryResponse)
async def get_evaluation_summary(evaluation_id: str, store: InMemoryEvaluationStore = Depends(get_store)):
    """Average rating and band of one evaluation."""
    evaluation = require_evaluation(store, evaluation_id)
    return ScoreSummaryResponse(**summarize(evaluation).to_dict())


@router.get("/{evaluation_id}/document")
async def download_evaluation_document(
    evaluation_id: str,
    store: InMemoryEvaluationStore = Depends(get_store),
    generator: EvaluationDocumentGenerator = Depends(get_document_generator),
    settings: Settings = Depends(get_settings),
):
    """Download the full Word report of one evaluation."""
    evaluation = require_evaluation(store, evaluation_id)
    teacher = require_teacher(store, evaluation.teacher_id)
    document = await _run_generation(settings, generator.export_report, teacher, evaluation)
    return _document_response(document)
