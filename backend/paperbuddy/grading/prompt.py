"""Grading prompt construction."""

from __future__ import annotations

from paperbuddy.grading.bands import describe_bands
from paperbuddy.schemas import PaperContext


def _or_na(value: object) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return "N/A"
    return str(value)


def _output_schema(total_marks: int) -> str:
    return (
        f'    * "score": (Integer, 0 to {total_marks}) The total mark awarded to the student out of {total_marks}.\n'
        f'    * "totalMarks": (Integer) Reiterate {total_marks}.\n'
        f'    * "grade": (String, one of A, B, C, D, E, U) A letter grade based on the percentage: {describe_bands()}.\n'
        '    * "feedback": (String, 200-400 words) Constructive, detailed feedback for the student covering:\n'
        "        - Strengths: what the student did well, referencing their answer and Mark Scheme criteria (if available).\n"
        "        - Weaknesses/Improvements: where the answer fell short, missed concepts or lacked depth.\n"
        "        - Illustrative Quotes: short, relevant phrases quoted from the student's answer.\n"
        "        - Actionable Advice: specific advice, ideally linked to Mark Scheme criteria.\n"
        "        - Tone: supportive and encouraging.\n"
        '    * "highlightReferences": (Array of objects, at most 7) Key phrases from the *student\'s answer* that are significant. '
        'Format: [{"studentPhrase": "...", "significance": "e.g., Correctly applied theory X.", '
        '"msMatchLevel": "e.g., Level 3 Descriptor (if Mark Scheme used)"}]. Use [] if none stand out.\n'
        '    * "outline": (String, 3-7 bullet points) A concise model answer outline for achieving high marks, '
        "based on the Mark Scheme (if available) or general best practice for this question type.\n"
        '    * "sectionScores": (Object) If the question or Mark Scheme implies distinct sections (e.g. Section A, B or Part a, b), '
        'give a score breakdown: {"sectionA": {"score": X, "max": Y}} with integer values and each score between 0 and its max. '
        f"Section maxima should add up to at most {total_marks}. Use {{}} if not applicable."
    )


def build_grading_prompt(
    context: PaperContext,
    markscheme_text: str,
    student_answer: str,
    total_marks: int,
) -> str:
    """Render the examiner prompt. The model must answer with a single JSON object."""
    subject_name = context.subject_name if context.subject_name and context.subject_name.strip() else "the relevant subject"
    header = (
        f"You are an expert A-Level examiner for {subject_name} ({_or_na(context.subject_code)}), "
        f"specifically marking Paper {_or_na(context.paper_number)} Variant {_or_na(context.variant)} "
        f"from the {_or_na(context.session_label)} {_or_na(context.year)} series. "
        f"The total marks for the question(s) answered by the student are {total_marks}."
    )
    return (
        f"{header}\n\n"
        "You will be provided with the official Mark Scheme (if available and legible) and the student's answer. "
        "Your task is to:\n\n"
        "1. **Understand the Mark Scheme:** If a Mark Scheme is provided and contains meaningful content, review it carefully. "
        "Identify key assessment objectives, content points, levels of response and specific mark allocations. "
        "If the Mark Scheme text says it could not be loaded, was not found, is inaccessible, failed extraction or is sparse, "
        "use your general A-Level marking expertise for this subject and paper type instead.\n"
        "2. **Evaluate the Student's Answer:** If a valid Mark Scheme is present, evaluate strictly against it. "
        "Otherwise, use general A-Level criteria.\n"
        "3. **Provide Detailed Feedback (JSON Output):** Output ONLY a single, valid JSON object with exactly these keys:\n\n"
        f"{_output_schema(total_marks)}\n\n"
        "MARK SCHEME TEXT (may be a generic message if the file was not found or processed):\n"
        "---\n"
        f"{markscheme_text}\n"
        "---\n\n"
        "STUDENT'S ANSWER TEXT:\n"
        "---\n"
        f"{student_answer}\n"
        "---\n\n"
        "Remember to output ONLY the JSON object. Do not include any prefatory text or explanations outside the JSON structure. "
        "Ensure all string values within the JSON are properly escaped."
    )
