"""Mark scheme acquisition with graceful fallback.

Missing or unreadable mark schemes must never stop grading. Every failure is
turned into a short instruction telling the examiner to fall back on general
subject knowledge, tagged with a reason so callers and tests can tell it apart
from real mark scheme text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from paperbuddy.artifacts import ArtifactFetcher, FetchFailure, FetchFailureKind
from paperbuddy.grading.paper_id import PaperIdError, parse_paper_id
from paperbuddy.ocr.base import OcrClient

logger = logging.getLogger(__name__)

MARKSCHEME_MIME_TYPE = "application/pdf"
DEFAULT_MIN_CONTENT_CHARS = 50


class FallbackReason(str, Enum):
    UNRECOGNIZED_PAPER_ID = "unrecognized_paper_id"
    NOT_FOUND = "not_found"
    INACCESSIBLE = "inaccessible"
    EXTRACTION_FAILED = "extraction_failed"
    SPARSE_CONTENT = "sparse_content"


_GENERAL_PRINCIPLES = "Grade based on general A-Level principles for the subject."

FALLBACK_TEXT = {
    FallbackReason.UNRECOGNIZED_PAPER_ID: "Mark Scheme could not be loaded: paper id unrecognized.",
    FallbackReason.NOT_FOUND: "Mark Scheme file {filename} not found.",
    FallbackReason.INACCESSIBLE: "Mark Scheme inaccessible: the file could not be retrieved.",
    FallbackReason.EXTRACTION_FAILED: "Mark Scheme extraction failed: the file could not be read.",
    FallbackReason.SPARSE_CONTENT: "Mark Scheme content sparse: too little text could be extracted.",
}


@dataclass(frozen=True)
class MarkSchemeText:
    text: str
    is_fallback: bool
    reason: FallbackReason | None = None
    filename: str | None = None

    @classmethod
    def fallback(cls, reason: FallbackReason, filename: str | None = None) -> "MarkSchemeText":
        text = FALLBACK_TEXT[reason].format(filename=f"({filename})" if filename else "")
        text = " ".join(f"{text} {_GENERAL_PRINCIPLES}".split())
        return cls(text=text, is_fallback=True, reason=reason, filename=filename)


class MarkSchemeResolver:
    def __init__(
        self,
        fetcher: ArtifactFetcher,
        ocr_client: OcrClient,
        min_content_chars: int = DEFAULT_MIN_CONTENT_CHARS,
    ) -> None:
        self._fetcher = fetcher
        self._ocr_client = ocr_client
        self._min_content_chars = min_content_chars

    async def resolve(self, paper_id: str) -> MarkSchemeText:
        """Return mark scheme text for `paper_id`, or a labelled fallback. Never raises."""
        try:
            parsed = parse_paper_id(paper_id)
        except PaperIdError as exc:
            logger.warning("mark scheme paper id rejected", extra={"stage": "parse_paper_id", "paper_id": paper_id, "error": str(exc)})
            return MarkSchemeText.fallback(FallbackReason.UNRECOGNIZED_PAPER_ID)

        filename = parsed.markscheme_filename
        log_extra = {"paper_id": paper_id, "markscheme_file": filename}

        try:
            data = await self._fetcher.fetch(filename)
        except FetchFailure as exc:
            logger.warning("mark scheme fetch failed", extra={**log_extra, "stage": "fetch", "kind": exc.kind.value, "status_code": exc.status_code})
            if exc.kind == FetchFailureKind.NOT_FOUND:
                return MarkSchemeText.fallback(FallbackReason.NOT_FOUND, filename)
            return MarkSchemeText.fallback(FallbackReason.INACCESSIBLE, filename)
        except Exception:  # noqa: BLE001
            logger.exception("mark scheme fetch raised unexpectedly", extra={**log_extra, "stage": "fetch"})
            return MarkSchemeText.fallback(FallbackReason.INACCESSIBLE, filename)

        try:
            text = await self._ocr_client.extract_text(data, MARKSCHEME_MIME_TYPE, filename)
        except Exception as exc:  # noqa: BLE001
            logger.warning("mark scheme OCR failed", extra={**log_extra, "stage": "ocr", "error": str(exc)})
            return MarkSchemeText.fallback(FallbackReason.EXTRACTION_FAILED, filename)

        if not isinstance(text, str) or len(text.strip()) < self._min_content_chars:
            logger.warning("mark scheme OCR returned little or no text", extra={**log_extra, "stage": "ocr"})
            return MarkSchemeText.fallback(FallbackReason.SPARSE_CONTENT, filename)

        logger.info("mark scheme loaded", extra={**log_extra, "stage": "ocr", "chars": len(text)})
        return MarkSchemeText(text=text, is_fallback=False, filename=filename)
