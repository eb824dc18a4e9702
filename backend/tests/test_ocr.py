from __future__ import annotations

import httpx
import pytest

from paperbuddy.ocr.base import OcrFailure, UnavailableOcrClient
from paperbuddy.ocr.compdfkit import CompdfkitOcrClient
from paperbuddy.ocr.stub import StubOcrClient
from paperbuddy.pipeline.transcribe import get_markscheme_ocr_client, get_ocr_client
from paperbuddy.settings import settings

ENDPOINT = "https://ocr.example.com/v1/ocr"


def _client(handler) -> CompdfkitOcrClient:
    return CompdfkitOcrClient(api_key="secret-key", endpoint_url=ENDPOINT, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_compdfkit_posts_multipart_file_with_auth_header() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers.get("Authorization")
        captured["content_type"] = request.headers.get("Content-Type", "")
        captured["body"] = request.read()
        return httpx.Response(200, json={"data": {"content": "Extracted answer text"}})

    text = await _client(handler).extract_text(b"%PDF-bytes", "application/pdf", "9708_m24_ms_22.pdf")

    assert text == "Extracted answer text"
    assert captured["url"] == ENDPOINT
    assert captured["auth"] == "secret-key"
    assert str(captured["content_type"]).startswith("multipart/form-data")
    assert b"9708_m24_ms_22.pdf" in captured["body"]
    assert b"%PDF-bytes" in captured["body"]


@pytest.mark.asyncio
async def test_compdfkit_reads_top_level_content() -> None:
    text = await _client(lambda request: httpx.Response(200, json={"content": "alt structure"})).extract_text(
        b"img", "image/png", "scan.png"
    )

    assert text == "alt structure"


@pytest.mark.asyncio
async def test_compdfkit_missing_content_returns_empty_string() -> None:
    text = await _client(lambda request: httpx.Response(200, json={"data": {}})).extract_text(b"img", "image/png", "scan.png")

    assert text == ""


@pytest.mark.asyncio
async def test_compdfkit_error_uses_vendor_message() -> None:
    client = _client(lambda request: httpx.Response(401, json={"msg": "Invalid API key"}))

    with pytest.raises(OcrFailure) as excinfo:
        await client.extract_text(b"img", "image/png", "scan.png")

    assert str(excinfo.value) == "Invalid API key"
    assert excinfo.value.status_code == 401


@pytest.mark.asyncio
async def test_compdfkit_error_without_json_body() -> None:
    client = _client(lambda request: httpx.Response(502, text="Bad gateway"))

    with pytest.raises(OcrFailure) as excinfo:
        await client.extract_text(b"img", "image/png", "scan.png")

    assert str(excinfo.value) == "ComPDFKit API Error: 502"


@pytest.mark.asyncio
async def test_compdfkit_transport_error_becomes_ocr_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(OcrFailure):
        await _client(handler).extract_text(b"img", "image/png", "scan.png")


@pytest.mark.parametrize(
    ("api_key", "endpoint"),
    [(None, ENDPOINT), ("", ENDPOINT), ("YOUR_COMPDFKIT_API_KEY_PLACEHOLDER", ENDPOINT), ("secret-key", None)],
)
def test_compdfkit_requires_configuration(api_key, endpoint) -> None:
    with pytest.raises(OcrFailure, match="not configured"):
        CompdfkitOcrClient(api_key=api_key, endpoint_url=endpoint)


@pytest.mark.asyncio
async def test_stub_client_is_deterministic() -> None:
    text = await StubOcrClient().extract_text(b"abc", "image/png", "page.png")

    assert text == "[stub-ocr] Extracted 3 bytes of image/png content from page.png"


def test_get_ocr_client_dispatches_by_name(monkeypatch) -> None:
    monkeypatch.setattr(settings, "compdfkit_api_key", "secret-key")
    monkeypatch.setattr(settings, "compdfkit_ocr_endpoint_url", ENDPOINT)

    assert isinstance(get_ocr_client("stub"), StubOcrClient)
    assert isinstance(get_ocr_client("COMPDFKIT"), CompdfkitOcrClient)
    with pytest.raises(ValueError):
        get_ocr_client("tesseract")


@pytest.mark.asyncio
async def test_markscheme_ocr_client_degrades_when_unconfigured(monkeypatch) -> None:
    monkeypatch.setattr(settings, "ocr_provider", "compdfkit")
    monkeypatch.setattr(settings, "compdfkit_api_key", None)

    client = get_markscheme_ocr_client()

    assert isinstance(client, UnavailableOcrClient)
    with pytest.raises(OcrFailure):
        await client.extract_text(b"%PDF", "application/pdf", "ms.pdf")
