"""Paper catalogue endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from paperbuddy.db import get_session
from paperbuddy.grading.paper_id import PaperIdError, parse_paper_id
from paperbuddy.grading.pipeline import GradingPipeline
from paperbuddy.models import Paper
from paperbuddy.pipeline.grade import get_grading_pipeline
from paperbuddy.schemas import GradeAnswerRequest, GradeResult, PaperCreate, PaperRead

router = APIRouter(prefix="/papers", tags=["papers"])


def _paper_read(paper: Paper) -> PaperRead:
    return PaperRead(**paper.model_dump())


def _get_paper_or_404(session: Session, paper_id: str) -> Paper:
    paper = session.get(Paper, paper_id)
    if not paper:
        raise HTTPException(status_code=404, detail="Paper not found")
    return paper


@router.get("", response_model=list[PaperRead])
def list_papers(
    subject_id: str | None = Query(default=None, alias="subjectId"),
    session: Session = Depends(get_session),
) -> list[PaperRead]:
    statement = select(Paper)
    if subject_id:
        statement = statement.where(Paper.subject_id == subject_id)
    papers = session.exec(statement.order_by(Paper.paper_id)).all()
    return [_paper_read(paper) for paper in papers]


@router.post("", response_model=PaperRead, status_code=201)
def create_paper(payload: PaperCreate, session: Session = Depends(get_session)) -> PaperRead:
    try:
        parse_paper_id(payload.paper_id)
    except PaperIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if session.get(Paper, payload.paper_id):
        raise HTTPException(status_code=409, detail="Paper already exists")

    paper = Paper(**payload.model_dump())
    session.add(paper)
    session.commit()
    session.refresh(paper)
    return _paper_read(paper)


@router.get("/{paper_id}", response_model=PaperRead)
def get_paper(paper_id: str, session: Session = Depends(get_session)) -> PaperRead:
    return _paper_read(_get_paper_or_404(session, paper_id))


@router.post("/{paper_id}/grade", response_model=GradeResult)
async def grade_paper_answer(
    paper_id: str,
    payload: GradeAnswerRequest,
    session: Session = Depends(get_session),
    pipeline: GradingPipeline = Depends(get_grading_pipeline),
) -> GradeResult:
    paper = _paper_read(_get_paper_or_404(session, paper_id))
    return await pipeline.run(paper.to_context(), payload.user_answer, paper.total_marks)
