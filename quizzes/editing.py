"""
Quiz Edit Validation
====================

Checks and normalizes the payload submitted when an author edits a quiz,
before it is written back to the quiz store.
"""

from typing import Any, Dict, Mapping

from models.quiz_models import parse_option_index


class QuizValidationError(ValueError):
    pass


def _clean_options(options) -> list:
    cleaned = []
    for option in options:
        text = option.strip() if isinstance(option, str) else str(option).strip()
        if text:
            cleaned.append(text)
    return cleaned


def validate_quiz_edit(edit_data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Returns ``{"title", "difficulty", "questions"}`` with trimmed text, empty
    options dropped and ``correct`` as an int. Raises QuizValidationError on
    the first problem found.
    """
    title = edit_data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise QuizValidationError("Quiz title is required")

    questions = edit_data.get("questions") or []
    if not questions:
        raise QuizValidationError("At least one question is required")

    validated = []
    for number, question in enumerate(questions, start=1):
        text = question.get("question")
        if not isinstance(text, str) or not text.strip():
            raise QuizValidationError(f"Question {number} text is required")

        options = question.get("options") or []
        if len(options) < 2:
            raise QuizValidationError(f"Question {number} must have at least 2 options")

        if question.get("correct") is None:
            raise QuizValidationError(f"Question {number} must have a correct answer selected")

        cleaned = _clean_options(options)
        if len(cleaned) < 2:
            raise QuizValidationError(f"Question {number} must have at least 2 non-empty options")

        correct = parse_option_index(question.get("correct"))
        if correct is None or not 0 <= correct < len(cleaned):
            raise QuizValidationError(
                f"Question {number} correct answer must reference an existing option")

        validated.append({
            "question": text.strip(),
            "options": cleaned,
            "correct": correct,
        })

    return {
        "title": title.strip(),
        "difficulty": edit_data.get("difficulty"),
        "questions": validated,
    }
