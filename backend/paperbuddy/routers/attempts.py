"""Exam attempt history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlmodel import Session, select

from paperbuddy.db import get_session
from paperbuddy.models import Attempt, Paper, User, encode_json
from paperbuddy.schemas import AttemptCreate, AttemptRead, GradeResult

router = APIRouter(prefix="/attempts", tags=["attempts"])


def _attempt_result(attempt: Attempt) -> GradeResult | None:
    if attempt.grade is None:
        return None
    return GradeResult.model_validate(
        {
            "score": attempt.score or 0,
            "totalMarks": attempt.total_marks or 0,
            "grade": attempt.grade,
            "feedback": attempt.feedback or "",
            "outline": attempt.outline or "",
            "highlightReferences": [item for item in attempt.highlight_references if isinstance(item, dict)],
            "sectionScores": {key: value for key, value in attempt.section_scores.items() if isinstance(value, dict)},
            "degraded": attempt.degraded,
        }
    )


def _attempt_read(attempt: Attempt) -> AttemptRead:
    return AttemptRead(
        id=attempt.id,
        attempt_id=attempt.attempt_id,
        user_id=attempt.user_id,
        paper_id=attempt.paper_id,
        duration=attempt.duration,
        answer_text=attempt.answer_text,
        file_name=attempt.file_name,
        result=_attempt_result(attempt),
        created_at=attempt.created_at,
    )


def _get_attempt_or_404(session: Session, attempt_id: str) -> Attempt:
    attempt = session.exec(select(Attempt).where(Attempt.attempt_id == attempt_id)).first()
    if not attempt:
        raise HTTPException(status_code=404, detail="Attempt not found")
    return attempt


@router.post("", response_model=AttemptRead, status_code=201)
def create_attempt(payload: AttemptCreate, session: Session = Depends(get_session)) -> AttemptRead:
    if not session.get(User, payload.user_id):
        raise HTTPException(status_code=404, detail="User not found")
    if not session.get(Paper, payload.paper_id):
        raise HTTPException(status_code=404, detail="Paper not found")
    if session.exec(select(Attempt).where(Attempt.attempt_id == payload.attempt_id)).first():
        raise HTTPException(status_code=409, detail="Attempt already exists")

    attempt = Attempt(
        attempt_id=payload.attempt_id,
        user_id=payload.user_id,
        paper_id=payload.paper_id,
        duration=payload.duration,
        answer_text=payload.answer_text,
        file_name=payload.file_name,
    )
    result = payload.result
    if result is not None:
        attempt.grade = result.grade.value
        attempt.score = result.score
        attempt.total_marks = result.total_marks
        attempt.feedback = result.feedback
        attempt.outline = result.outline
        attempt.degraded = result.degraded
        attempt.highlight_references_json = encode_json(
            [item.model_dump(by_alias=True) for item in result.highlight_references], []
        )
        attempt.section_scores_json = encode_json(
            {key: value.model_dump(by_alias=True) for key, value in result.section_scores.items()}, {}
        )

    session.add(attempt)
    session.commit()
    session.refresh(attempt)
    return _attempt_read(attempt)


@router.get("", response_model=list[AttemptRead])
def list_attempts(user_id: int = Query(alias="userId"), session: Session = Depends(get_session)) -> list[AttemptRead]:
    attempts = session.exec(
        select(Attempt).where(Attempt.user_id == user_id).order_by(Attempt.created_at.desc(), Attempt.id.desc())
    ).all()
    return [_attempt_read(attempt) for attempt in attempts]


@router.get("/{attempt_id}", response_model=AttemptRead)
def get_attempt(attempt_id: str, session: Session = Depends(get_session)) -> AttemptRead:
    return _attempt_read(_get_attempt_or_404(session, attempt_id))


@router.delete("/{attempt_id}", status_code=204)
def delete_attempt(attempt_id: str, session: Session = Depends(get_session)) -> Response:
    attempt = _get_attempt_or_404(session, attempt_id)
    session.delete(attempt)
    session.commit()
    return Response(status_code=204)
