"""Normalization of untrusted AI grading responses.

The model's reply is treated as hostile input. Whatever it contains, the
result has every field present, typed and in range:

* ``totalMarks`` is always the caller's value.
* ``score`` is an integer clamped into ``[0, totalMarks]``.
* ``grade`` is recomputed from the clamped score; the model's letter is ignored.
* ``highlightReferences`` is a list and ``sectionScores`` a mapping, even when
  the model sent garbage for either.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from paperbuddy.grading.bands import Grade, grade_for_score
from paperbuddy.schemas import GradeResult, HighlightReference, SectionScore

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK = "Feedback processing error."
DEFAULT_OUTLINE = "Outline processing error."
INVALID_JSON_FEEDBACK = "AI response was not valid JSON"

_LEADING_INT = re.compile(r"^\s*([+-]?)(\d+)")
# Digit runs longer than this saturate instead of being converted.
_MAX_DIGITS = 18


def coerce_int(value: Any, default: int) -> int:
    """Leniently read an integer: ``45``, ``45.9``, ``"45"`` and ``"45 marks"`` all give 45."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            sign, digits = match.groups()
            digits = digits.lstrip("0") or "0"
            magnitude = 10**_MAX_DIGITS if len(digits) > _MAX_DIGITS else int(digits)
            return -magnitude if sign == "-" else magnitude
    return default


def clean_text(value: str) -> str:
    """Replace lone surrogates and other unencodable code points so the text is valid UTF-8."""
    return value.encode("utf-8", "replace").decode("utf-8")


def _first_present(payload: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return clean_text(value)
    return clean_text(json.dumps(value) if isinstance(value, (dict, list)) else str(value))


def _highlight_references(value: Any) -> list[HighlightReference]:
    if not isinstance(value, list):
        return []
    references: list[HighlightReference] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        match_level = _first_present(item, "msMatchLevel", "ms_match_level")
        references.append(
            HighlightReference(
                student_phrase=_as_text(_first_present(item, "studentPhrase", "student_phrase")),
                significance=_as_text(item.get("significance")),
                ms_match_level=None if match_level is None else _as_text(match_level),
            )
        )
    return references


def _section_scores(value: Any) -> dict[str, SectionScore]:
    if not isinstance(value, dict):
        return {}
    sections: dict[str, SectionScore] = {}
    for key, entry in value.items():
        if not isinstance(entry, dict):
            continue
        section_max = max(coerce_int(entry.get("max"), 0), 0)
        section_score = min(max(coerce_int(entry.get("score"), 0), 0), section_max)
        sections[clean_text(str(key))] = SectionScore(score=section_score, max=section_max)
    return sections


def error_grade_result(total_marks: int, feedback: str, outline: str = "") -> GradeResult:
    """Well-formed zero/U result used when no usable AI response exists."""
    return GradeResult(
        score=0,
        total_marks=max(total_marks, 0),
        grade=Grade.U,
        feedback=feedback,
        outline=outline,
        degraded=True,
    )


def normalize_grade_response(raw_json_text: str, total_marks: int) -> GradeResult:
    """Turn the model's raw JSON text into a bounded GradeResult. Never raises."""
    try:
        parsed = json.loads(raw_json_text)
    except (TypeError, ValueError, RecursionError):
        logger.warning("AI response was not valid JSON", extra={"stage": "normalize", "response_chars": len(raw_json_text) if isinstance(raw_json_text, str) else 0})
        return error_grade_result(total_marks, INVALID_JSON_FEEDBACK)
    if not isinstance(parsed, dict):
        logger.warning("AI response JSON was not an object", extra={"stage": "normalize"})
        return error_grade_result(total_marks, INVALID_JSON_FEEDBACK)

    merged: dict[str, Any] = {
        "score": 0,
        "totalMarks": total_marks,
        "grade": Grade.U.value,
        "feedback": DEFAULT_FEEDBACK,
        "outline": DEFAULT_OUTLINE,
        "highlightReferences": [],
        "sectionScores": {},
    }
    merged.update(parsed)
    if "highlightReferences" not in parsed and "highlight_references" in parsed:
        merged["highlightReferences"] = parsed["highlight_references"]
    if "sectionScores" not in parsed and "section_scores" in parsed:
        merged["sectionScores"] = parsed["section_scores"]

    authoritative_total = max(total_marks, 0)
    echoed_total = coerce_int(merged["totalMarks"], authoritative_total)
    if echoed_total != authoritative_total:
        logger.info(
            "AI echoed a different total; using caller total",
            extra={"stage": "normalize", "echoed_total": echoed_total, "total_marks": authoritative_total},
        )

    score = min(max(coerce_int(merged["score"], 0), 0), authoritative_total)
    grade = grade_for_score(score, authoritative_total)
    if str(merged["grade"]).strip().upper() != grade.value:
        logger.info(
            "AI grade disagrees with score; recomputed",
            extra={"stage": "normalize", "ai_grade": str(merged["grade"])[:8], "grade": grade.value},
        )

    feedback = clean_text(merged["feedback"]) if isinstance(merged["feedback"], str) else DEFAULT_FEEDBACK
    outline = clean_text(merged["outline"]) if isinstance(merged["outline"], str) else DEFAULT_OUTLINE
    if isinstance(merged["outline"], list):
        outline = "\n".join(_as_text(item) for item in merged["outline"])

    return GradeResult(
        score=score,
        total_marks=authoritative_total,
        grade=grade,
        feedback=feedback,
        outline=outline,
        highlight_references=_highlight_references(merged["highlightReferences"]),
        section_scores=_section_scores(merged["sectionScores"]),
    )
