"""End-to-end grading: mark scheme, prompt, model call, normalization."""

from __future__ import annotations

import logging

from paperbuddy.ai.openai_grader import AiClient, AiFailure, AiFailureKind
from paperbuddy.grading.markscheme import MarkSchemeResolver
from paperbuddy.grading.normalize import error_grade_result, normalize_grade_response
from paperbuddy.grading.prompt import build_grading_prompt
from paperbuddy.schemas import GradeResult, PaperContext

logger = logging.getLogger(__name__)

AI_ERROR_OUTLINE = "Outline generation failed due to an AI processing error."

_FAILURE_FEEDBACK = {
    AiFailureKind.NOT_CONFIGURED: "AI grading is not configured",
    AiFailureKind.EMPTY_RESPONSE: "AI returned an empty response",
    AiFailureKind.TRANSPORT_ERROR: "AI service could not be reached",
    AiFailureKind.RATE_LIMITED: "AI service is rate limited",
}


def ai_failure_feedback(failure: AiFailure) -> str:
    return f"Error during AI processing: {_FAILURE_FEEDBACK[failure.kind]} ({failure}). Please try again."


class GradingPipeline:
    def __init__(self, resolver: MarkSchemeResolver, ai_client: AiClient) -> None:
        self._resolver = resolver
        self._ai_client = ai_client

    async def run(self, context: PaperContext, student_answer: str, total_marks: int) -> GradeResult:
        """Grade `student_answer`. Always returns a GradeResult; AI failures become an error result."""
        markscheme = await self._resolver.resolve(context.id)
        prompt = build_grading_prompt(context, markscheme.text, student_answer, total_marks)
        logger.info(
            "grading prompt built",
            extra={
                "stage": "build_prompt",
                "paper_id": context.id,
                "markscheme_fallback": markscheme.is_fallback,
                "prompt_chars": len(prompt),
            },
        )

        try:
            raw = await self._ai_client.complete(prompt)
        except AiFailure as exc:
            logger.error("grading aborted by AI failure", extra={"stage": "call_ai", "paper_id": context.id, "kind": exc.kind.value})
            return error_grade_result(total_marks, ai_failure_feedback(exc), outline=AI_ERROR_OUTLINE)

        result = normalize_grade_response(raw, total_marks)
        if markscheme.is_fallback:
            result.degraded = True
        logger.info(
            "grading finished",
            extra={"stage": "normalize", "paper_id": context.id, "score": result.score, "total_marks": result.total_marks},
        )
        return result
