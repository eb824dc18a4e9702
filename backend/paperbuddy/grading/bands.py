"""Percentage to letter grade banding."""

from __future__ import annotations

from enum import Enum


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    U = "U"


# (minimum percentage, grade), highest band first. Anything below the last band is U.
GRADE_BANDS: tuple[tuple[int, Grade], ...] = (
    (80, Grade.A),
    (70, Grade.B),
    (60, Grade.C),
    (50, Grade.D),
    (40, Grade.E),
)


def grade_for_score(score: int, total_marks: int) -> Grade:
    if total_marks <= 0:
        return Grade.U
    # Integer comparison avoids float rounding at band edges (e.g. 56/70).
    for threshold, grade in GRADE_BANDS:
        if score * 100 >= threshold * total_marks:
            return grade
    return Grade.U


def describe_bands() -> str:
    """Render the banding rule for prompts, e.g. ``A >= 80%, B >= 70%, ... otherwise U``."""
    rules = ", ".join(f"{grade.value} >= {threshold}%" for threshold, grade in GRADE_BANDS)
    return f"{rules}, otherwise {Grade.U.value}"
