"""Stub OCR client for local/offline testing."""

from paperbuddy.ocr.base import OcrClient


class StubOcrClient(OcrClient):
    name = "stub"

    async def extract_text(self, data: bytes, mime_type: str, filename: str) -> str:
        return f"[stub-ocr] Extracted {len(data)} bytes of {mime_type} content from {filename}"
