"""Grading pipeline factory and request dependencies."""

from fastapi import Depends, HTTPException

from paperbuddy.ai.openai_grader import AiClient, AiFailure, get_ai_client
from paperbuddy.artifacts import get_artifact_fetcher
from paperbuddy.grading.markscheme import MarkSchemeResolver
from paperbuddy.grading.pipeline import GradingPipeline
from paperbuddy.pipeline.transcribe import get_markscheme_ocr_client
from paperbuddy.settings import settings


def build_grading_pipeline(ai_client: AiClient) -> GradingPipeline:
    resolver = MarkSchemeResolver(
        fetcher=get_artifact_fetcher(),
        ocr_client=get_markscheme_ocr_client(),
        min_content_chars=settings.min_markscheme_chars,
    )
    return GradingPipeline(resolver=resolver, ai_client=ai_client)


def require_ai_client() -> AiClient:
    try:
        return get_ai_client()
    except AiFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def get_grading_pipeline(ai_client: AiClient = Depends(require_ai_client)) -> GradingPipeline:
    return build_grading_pipeline(ai_client)
