"""Paper identifier parsing and mark scheme filename derivation.

A paper id looks like ``econ-9708-22-fm-24``:

    prefix - subject code - paper/variant - session - two digit year

The mark scheme for that paper is published as ``9708_m24_ms_22.pdf``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MIN_SEGMENTS = 5


class SessionCode(str, Enum):
    FM = "fm"  # February/March
    MJ = "mj"  # May/June
    ON = "on"  # October/November

    @property
    def letter(self) -> str:
        return _SESSION_LETTERS[self]


_SESSION_LETTERS = {
    SessionCode.FM: "m",
    SessionCode.MJ: "s",
    SessionCode.ON: "w",
}


class PaperIdError(ValueError):
    """Base class for paper id parse failures."""


class MalformedPaperIdError(PaperIdError):
    def __init__(self, raw: object) -> None:
        super().__init__(f"Invalid paper id format: {raw!r}")
        self.raw = raw


class UnknownSessionCodeError(PaperIdError):
    def __init__(self, session_raw: str) -> None:
        super().__init__(f"Unknown session code {session_raw!r}")
        self.session_raw = session_raw


def parse_session_code(session_raw: str) -> SessionCode:
    try:
        return SessionCode(session_raw.lower())
    except ValueError as exc:
        raise UnknownSessionCodeError(session_raw) from exc


def session_letter(session_raw: str) -> str:
    """Map a raw session segment (fm/mj/on, any case) to its mark scheme letter."""
    return parse_session_code(session_raw).letter


@dataclass(frozen=True)
class PaperId:
    raw: str
    subject_code: str
    paper_variant: str
    session: SessionCode
    year_short: str

    @property
    def markscheme_filename(self) -> str:
        return f"{self.subject_code}_{self.session.letter}{self.year_short}_ms_{self.paper_variant}.pdf"


def parse_paper_id(raw: str) -> PaperId:
    """Parse a paper id string.

    Raises MalformedPaperIdError when there are fewer than five hyphen
    separated segments and UnknownSessionCodeError when the session segment
    is not one of fm, mj or on. Segments past the fifth are ignored.
    """
    if not isinstance(raw, str):
        raise MalformedPaperIdError(raw)
    parts = raw.split("-")
    if len(parts) < MIN_SEGMENTS:
        raise MalformedPaperIdError(raw)

    return PaperId(
        raw=raw,
        subject_code=parts[1],
        paper_variant=parts[2],
        session=parse_session_code(parts[3]),
        year_short=parts[4],
    )


def to_markscheme_filename(paper_id: PaperId) -> str:
    return paper_id.markscheme_filename
