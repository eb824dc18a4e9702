from __future__ import annotations

import pytest

pytest.importorskip("httpx")

from paperbuddy.settings import settings

FEEDBACK_BODY = {
    "paperContext": {
        "id": "econ-9708-22-mj-23",
        "subjectName": "Economics",
        "subjectCode": "9708",
        "paperNumber": "2",
        "variant": "2",
        "sessionLabel": "May/June",
        "year": "2023",
    },
    "userAnswer": "Price elasticity of demand measures responsiveness...",
    "paperTotalMarks": 60,
}


def test_ai_feedback_returns_normalized_camel_case_result(client) -> None:
    response = client.post("/api/ai-feedback", json=FEEDBACK_BODY)

    assert response.status_code == 200
    payload = response.json()
    assert payload["score"] == 42
    assert payload["totalMarks"] == 60
    assert payload["grade"] == "B"
    assert payload["highlightReferences"][0]["studentPhrase"] == "price elasticity of demand"
    assert payload["sectionScores"]["sectionA"] == {"score": 20, "max": 30}
    assert payload["degraded"] is True


def test_ai_feedback_uses_caller_total(client) -> None:
    response = client.post("/api/ai-feedback", json={**FEEDBACK_BODY, "paperTotalMarks": 40})

    payload = response.json()
    assert payload["totalMarks"] == 40
    assert payload["score"] == 40
    assert payload["grade"] == "A"


@pytest.mark.parametrize(
    ("body", "field"),
    [
        ({k: v for k, v in FEEDBACK_BODY.items() if k != "userAnswer"}, "userAnswer"),
        ({**FEEDBACK_BODY, "userAnswer": ""}, "userAnswer"),
        ({k: v for k, v in FEEDBACK_BODY.items() if k != "paperContext"}, "paperContext"),
        ({**FEEDBACK_BODY, "paperContext": {"subjectName": "Economics"}}, "paperContext.id"),
        ({**FEEDBACK_BODY, "paperTotalMarks": -1}, "paperTotalMarks"),
    ],
)
def test_ai_feedback_rejects_missing_fields(client, body, field) -> None:
    response = client.post("/api/ai-feedback", json=body)

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Missing or invalid fields:")
    assert field in response.json()["detail"]


def test_ai_feedback_unconfigured_returns_503(client, monkeypatch) -> None:
    monkeypatch.delenv("OPENAI_MOCK", raising=False)
    monkeypatch.setattr(settings, "openai_api_key", "YOUR_CHATGPT_API_KEY_PLACEHOLDER")

    response = client.post("/api/ai-feedback", json=FEEDBACK_BODY)

    assert response.status_code == 503
    assert response.json()["detail"] == "AI service is not configured."


def test_ocr_upload_with_stub_provider(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "ocr_provider", "stub")

    response = client.post("/api/ocr", files={"file": ("answer.png", b"\x89PNG....", "image/png")})

    assert response.status_code == 200
    assert response.json() == {"text": "[stub-ocr] Extracted 8 bytes of image/png content from answer.png"}


def test_ocr_upload_requires_file(client) -> None:
    response = client.post("/api/ocr", data={"note": "no file here"})

    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded."


def test_ocr_upload_rejects_unsupported_type(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "ocr_provider", "stub")

    response = client.post("/api/ocr", files={"file": ("run.sh", b"#!/bin/sh", "application/x-sh")})

    assert response.status_code == 400
    assert "Invalid file type" in response.json()["detail"]


def test_ocr_upload_rejects_oversized_file(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "ocr_provider", "stub")
    monkeypatch.setattr(settings, "max_upload_mb", 1)

    response = client.post("/api/ocr", files={"file": ("big.pdf", b"0" * (1024 * 1024 + 1), "application/pdf")})

    assert response.status_code == 413


def test_ocr_upload_unconfigured_returns_503(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "ocr_provider", "compdfkit")
    monkeypatch.setattr(settings, "compdfkit_api_key", "YOUR_COMPDFKIT_API_KEY_PLACEHOLDER")

    response = client.post("/api/ocr", files={"file": ("answer.pdf", b"%PDF", "application/pdf")})

    assert response.status_code == 503
