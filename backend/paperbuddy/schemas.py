"""Request and response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from paperbuddy.grading.bands import Grade


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HighlightReference(CamelModel):
    student_phrase: str = ""
    significance: str = ""
    ms_match_level: str | None = None


class SectionScore(CamelModel):
    score: int = 0
    max: int = 0


class GradeResult(CamelModel):
    score: int = 0
    total_marks: int = 0
    grade: Grade = Grade.U
    feedback: str = ""
    outline: str = ""
    highlight_references: list[HighlightReference] = Field(default_factory=list)
    section_scores: dict[str, SectionScore] = Field(default_factory=dict)
    degraded: bool = False


class PaperContext(CamelModel):
    id: str = Field(min_length=1)
    subject_name: str | None = None
    subject_code: str | None = None
    paper_number: str | int | None = None
    variant: str | int | None = None
    session_label: str | None = None
    year: str | int | None = None


class AiFeedbackRequest(CamelModel):
    paper_context: PaperContext
    user_answer: str = Field(min_length=1)
    paper_total_marks: int = Field(ge=0)


class OcrResponse(BaseModel):
    text: str


class GradeAnswerRequest(CamelModel):
    user_answer: str = Field(min_length=1)


class PaperCreate(CamelModel):
    paper_id: str
    subject_id: str
    subject_code: str
    subject_name: str
    paper_number: str
    variant: str
    session_code: str
    year: int
    short_year: str | None = None
    session_label: str | None = None
    total_marks: int = Field(ge=0)
    pdf_path: str | None = None


class PaperRead(PaperCreate):
    created_at: datetime

    def to_context(self) -> PaperContext:
        return PaperContext(
            id=self.paper_id,
            subject_name=self.subject_name,
            subject_code=self.subject_code,
            paper_number=self.paper_number,
            variant=self.variant,
            session_label=self.session_label,
            year=self.year,
        )


class UserCreate(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    subjects: list[str] = Field(default_factory=list)


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    subjects: list[str] = Field(default_factory=list)
    created_at: datetime


class SubjectsUpdate(CamelModel):
    subjects: Any = None


class AttemptCreate(CamelModel):
    attempt_id: str = Field(min_length=1)
    user_id: int
    paper_id: str
    duration: int | None = Field(default=None, ge=0)
    answer_text: str | None = None
    file_name: str | None = None
    result: GradeResult | None = None


class AttemptRead(CamelModel):
    id: int
    attempt_id: str
    user_id: int
    paper_id: str
    duration: int | None
    answer_text: str | None
    file_name: str | None
    result: GradeResult | None
    created_at: datetime
