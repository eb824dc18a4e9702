"""OCR client interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass
class OcrFailure(Exception):
    message: str
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message


class OcrClient(Protocol):
    """OCR client protocol."""

    name: str

    async def extract_text(self, data: bytes, mime_type: str, filename: str) -> str:
        """Extract text from an image or PDF, raising OcrFailure on error."""


class UnavailableOcrClient:
    """Stands in for a provider that could not be configured; every call fails."""

    name = "unavailable"

    def __init__(self, reason: str) -> None:
        self.reason = reason

    async def extract_text(self, data: bytes, mime_type: str, filename: str) -> str:
        raise OcrFailure(self.reason)
