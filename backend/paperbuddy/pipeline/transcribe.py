"""OCR client factory/dispatcher."""

from paperbuddy.ocr.base import OcrClient, OcrFailure, UnavailableOcrClient
from paperbuddy.ocr.compdfkit import CompdfkitOcrClient
from paperbuddy.ocr.stub import StubOcrClient
from paperbuddy.settings import settings


def get_ocr_client(name: str | None = None) -> OcrClient:
    provider = (name or settings.ocr_provider).lower()
    if provider == "stub":
        return StubOcrClient()
    if provider == "compdfkit":
        return CompdfkitOcrClient(
            api_key=settings.compdfkit_api_key,
            endpoint_url=settings.compdfkit_ocr_endpoint_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    raise ValueError(f"Unknown OCR provider '{provider}'. Use one of: stub, compdfkit")


def get_markscheme_ocr_client() -> OcrClient:
    """OCR client for mark schemes; an unconfigured provider degrades to one that always fails."""
    try:
        return get_ocr_client()
    except OcrFailure as exc:
        return UnavailableOcrClient(str(exc))
