"""ComPDFKit OCR client."""

from __future__ import annotations

import json
import logging

import httpx

from paperbuddy.ocr.base import OcrClient, OcrFailure
from paperbuddy.settings import is_configured

logger = logging.getLogger(__name__)


def _extract_content(payload: object) -> str:
    if not isinstance(payload, dict):
        return ""
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("content"), str):
        return data["content"]
    if isinstance(payload.get("content"), str):
        return payload["content"]
    return ""


def _error_message(status_code: int, body: str) -> str:
    message = f"ComPDFKit API Error: {status_code}"
    try:
        payload = json.loads(body)
    except ValueError:
        return message
    if isinstance(payload, dict):
        return str(payload.get("msg") or payload.get("message") or message)
    return message


class CompdfkitOcrClient(OcrClient):
    name = "compdfkit"

    def __init__(
        self,
        api_key: str | None,
        endpoint_url: str | None,
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not is_configured(api_key) or not is_configured(endpoint_url):
            raise OcrFailure("OCR service is not configured or API key is a placeholder.")
        self._api_key = (api_key or "").strip()
        self._endpoint_url = (endpoint_url or "").strip()
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def extract_text(self, data: bytes, mime_type: str, filename: str = "file") -> str:
        logger.info("ocr request", extra={"stage": "ocr_request", "ocr_filename": filename, "mime_type": mime_type, "size_bytes": len(data)})
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.post(
                    self._endpoint_url,
                    headers={"Authorization": self._api_key},
                    files={"file": (filename, data, mime_type)},
                )
        except httpx.HTTPError as exc:
            raise OcrFailure(f"Failed to process file {filename} with ComPDFKit OCR: {exc}") from exc

        if not response.is_success:
            logger.warning(
                "ocr request failed",
                extra={"stage": "ocr_response", "ocr_filename": filename, "status_code": response.status_code},
            )
            raise OcrFailure(_error_message(response.status_code, response.text), status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise OcrFailure(f"ComPDFKit returned a non-JSON response for {filename}") from exc

        text = _extract_content(payload)
        if not text:
            logger.warning("ocr response had no text content", extra={"stage": "ocr_response", "ocr_filename": filename})
        return text
