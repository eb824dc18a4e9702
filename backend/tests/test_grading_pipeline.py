from __future__ import annotations

import json

import pytest

from paperbuddy.ai.openai_grader import AiFailure, AiFailureKind
from paperbuddy.artifacts import FetchFailure, FetchFailureKind
from paperbuddy.grading.bands import Grade
from paperbuddy.grading.markscheme import MarkSchemeResolver
from paperbuddy.grading.pipeline import AI_ERROR_OUTLINE, GradingPipeline
from paperbuddy.ocr.stub import StubOcrClient
from paperbuddy.schemas import PaperContext

MARKSCHEME = "Section A: 1 mark per correct definition. Section B: levels of response, L3 requires evaluation. " * 2


class MissingFetcher:
    async def fetch(self, name: str) -> bytes:
        raise FetchFailure(FetchFailureKind.NOT_FOUND, name)


class StaticFetcher:
    async def fetch(self, name: str) -> bytes:
        return b"%PDF"


class TextOcr:
    name = "text"

    async def extract_text(self, data: bytes, mime_type: str, filename: str) -> str:
        return MARKSCHEME


class RecordingAi:
    def __init__(self, response: str | None = None, failure: AiFailure | None = None) -> None:
        self.response = response
        self.failure = failure
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.failure is not None:
            raise self.failure
        return self.response or ""


CONTEXT = PaperContext(
    id="econ-9708-22-mj-23",
    subject_name="Economics",
    subject_code="9708",
    paper_number="2",
    variant="2",
    session_label="May/June",
    year="2023",
)


@pytest.mark.asyncio
async def test_missing_markscheme_still_grades_with_fallback() -> None:
    ai = RecordingAi(response=json.dumps({"score": 45, "totalMarks": 60, "grade": "B", "feedback": "Solid."}))
    pipeline = GradingPipeline(MarkSchemeResolver(MissingFetcher(), StubOcrClient()), ai)

    result = await pipeline.run(CONTEXT, "My essay on elasticity.", 60)

    assert len(ai.prompts) == 1
    assert "Mark Scheme file (9708_s23_ms_22.pdf) not found." in ai.prompts[0]
    assert "My essay on elasticity." in ai.prompts[0]
    assert result.score == 45
    assert result.total_marks == 60
    assert result.grade is Grade.B
    assert result.feedback == "Solid."
    assert result.degraded is True


@pytest.mark.asyncio
async def test_real_markscheme_is_passed_to_model() -> None:
    ai = RecordingAi(response=json.dumps({"score": 50, "grade": "A"}))
    pipeline = GradingPipeline(MarkSchemeResolver(StaticFetcher(), TextOcr()), ai)

    result = await pipeline.run(CONTEXT, "answer", 60)

    assert MARKSCHEME in ai.prompts[0]
    assert result.grade is Grade.A
    assert result.degraded is False


@pytest.mark.asyncio
async def test_invalid_model_json_is_degraded_u_grade() -> None:
    pipeline = GradingPipeline(MarkSchemeResolver(StaticFetcher(), TextOcr()), RecordingAi(response="Sure! Here is..."))

    result = await pipeline.run(CONTEXT, "answer", 60)

    assert result.score == 0
    assert result.grade is Grade.U
    assert result.feedback == "AI response was not valid JSON"
    assert result.degraded is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("kind", "fragment"),
    [
        (AiFailureKind.NOT_CONFIGURED, "not configured"),
        (AiFailureKind.EMPTY_RESPONSE, "empty response"),
        (AiFailureKind.TRANSPORT_ERROR, "could not be reached"),
        (AiFailureKind.RATE_LIMITED, "rate limited"),
    ],
)
async def test_ai_failure_becomes_error_result(kind: AiFailureKind, fragment: str) -> None:
    ai = RecordingAi(failure=AiFailure(kind, "upstream said no"))
    pipeline = GradingPipeline(MarkSchemeResolver(StaticFetcher(), TextOcr()), ai)

    result = await pipeline.run(CONTEXT, "answer", 60)

    assert result.score == 0
    assert result.total_marks == 60
    assert result.grade is Grade.U
    assert result.feedback.startswith("Error during AI processing:")
    assert fragment in result.feedback
    assert "upstream said no" in result.feedback
    assert result.outline == AI_ERROR_OUTLINE
    assert result.highlight_references == []
    assert result.section_scores == {}
    assert result.degraded is True


@pytest.mark.asyncio
async def test_unparseable_paper_id_does_not_block_grading() -> None:
    ai = RecordingAi(response=json.dumps({"score": 3}))
    pipeline = GradingPipeline(MarkSchemeResolver(StaticFetcher(), TextOcr()), ai)

    result = await pipeline.run(PaperContext(id="custom-upload"), "answer", 10)

    assert "paper id unrecognized" in ai.prompts[0]
    assert result.score == 3
    assert result.degraded is True
