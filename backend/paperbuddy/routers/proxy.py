"""OCR and AI feedback proxy endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from paperbuddy.grading.pipeline import GradingPipeline
from paperbuddy.ocr.base import OcrFailure
from paperbuddy.pipeline.grade import get_grading_pipeline
from paperbuddy.pipeline.transcribe import get_ocr_client
from paperbuddy.schemas import AiFeedbackRequest, GradeResult, OcrResponse
from paperbuddy.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["proxy"])

ALLOWED_UPLOAD_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}


@router.post("/ocr", response_model=OcrResponse)
async def ocr_upload(file: UploadFile | None = File(default=None)) -> OcrResponse:
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded.")

    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type not in ALLOWED_UPLOAD_TYPES:
        logger.warning("ocr upload rejected", extra={"stage": "upload", "content_type": content_type})
        raise HTTPException(status_code=400, detail="Invalid file type. Allowed: JPG, PNG, GIF, PDF, DOC, DOCX, TXT.")

    data = await file.read()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.max_upload_mb} MB upload limit.")

    try:
        client = get_ocr_client()
    except OcrFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    try:
        text = await client.extract_text(data, content_type, file.filename or "file")
    except OcrFailure as exc:
        raise HTTPException(status_code=502, detail=str(exc) or "OCR processing failed on server.") from exc
    return OcrResponse(text=text)


@router.post("/ai-feedback", response_model=GradeResult)
async def ai_feedback(
    payload: AiFeedbackRequest,
    pipeline: GradingPipeline = Depends(get_grading_pipeline),
) -> GradeResult:
    return await pipeline.run(payload.paper_context, payload.user_answer, payload.paper_total_marks)
