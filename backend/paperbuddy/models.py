"""SQLModel ORM models for PaperBuddy."""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return timezone-aware UTC now timestamp."""
    return datetime.now(timezone.utc)


def encode_json(value: Any, empty: Any) -> str:
    """Serialize a collection for a text column, storing `empty` for None."""
    return json.dumps(empty if value is None else value)


def decode_json_list(raw: str | None) -> list[Any]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []


def decode_json_object(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    subjects_json: str = "[]"
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def subjects(self) -> list[Any]:
        return decode_json_list(self.subjects_json)

    def set_subjects(self, value: Any) -> None:
        self.subjects_json = encode_json(value if isinstance(value, list) else [], [])


class Paper(SQLModel, table=True):
    paper_id: str = Field(primary_key=True)
    subject_id: str = Field(index=True)
    subject_code: str
    subject_name: str
    paper_number: str
    variant: str
    session_code: str
    year: int
    short_year: Optional[str] = None
    session_label: Optional[str] = None
    total_marks: int
    pdf_path: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Attempt(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    attempt_id: str = Field(index=True, unique=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    paper_id: str = Field(foreign_key="paper.paper_id", index=True)
    duration: Optional[int] = None
    answer_text: Optional[str] = None
    file_name: Optional[str] = None
    grade: Optional[str] = None
    score: Optional[int] = None
    total_marks: Optional[int] = None
    feedback: Optional[str] = None
    outline: Optional[str] = None
    degraded: bool = False
    highlight_references_json: str = "[]"
    section_scores_json: str = "{}"
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def highlight_references(self) -> list[Any]:
        return decode_json_list(self.highlight_references_json)

    @property
    def section_scores(self) -> dict[str, Any]:
        return decode_json_object(self.section_scores_json)
