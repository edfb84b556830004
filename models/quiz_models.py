"""
Data Models for Quizzes and Attempts
====================================

This module defines the data structures used to represent quizzes and the
attempts submitted against them. All models are implemented as dataclasses.
Stored documents are loosely shaped, so every model offers a tolerant
``from_document`` constructor.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

ANONYMOUS = "Anonymous"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_option_index(value: Any) -> Optional[int]:
    """
    Interprets a stored answer or correct-option value as an integer index.
    Strings are read like ``parseInt``: leading integer digits, rest ignored.
    Returns None for empty or non-numeric values.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else None
    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accepts datetimes, ISO-8601 strings and epoch seconds/milliseconds."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if isinstance(value, Mapping) and "seconds" in value:
        # Firestore timestamps exported as {"seconds": ..., "nanoseconds": ...}
        return parse_timestamp(value.get("seconds"))
    return None


def _is_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass
class Question:
    text: str
    options: List[str] = field(default_factory=list)
    correct_option_index: Optional[int] = None
    explanation: Optional[str] = None

    @property
    def correct_option_text(self) -> Optional[str]:
        index = parse_option_index(self.correct_option_index)
        if index is None or not 0 <= index < len(self.options):
            return None
        return self.options[index]

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Question":
        correct = None
        for key in ("correct", "correctAnswer", "correctOptionIndex"):
            if doc.get(key) is not None:
                correct = parse_option_index(doc.get(key))
                break

        return cls(
            text=str(doc.get("question") or doc.get("text") or ""),
            options=[str(option) for option in (doc.get("options") or [])],
            correct_option_index=correct,
            explanation=doc.get("explanation"),
        )


@dataclass
class Quiz:
    id: str
    title: str
    questions: List[Question] = field(default_factory=list)
    access_code: Optional[str] = None
    difficulty: Optional[str] = None
    created_by: Optional[str] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], quiz_id: Optional[str] = None) -> "Quiz":
        return cls(
            id=str(quiz_id if quiz_id is not None else doc.get("id", "")),
            title=str(doc.get("title") or ""),
            questions=[Question.from_document(q) for q in (doc.get("questions") or [])
                       if isinstance(q, Mapping)],
            access_code=doc.get("accessCode"),
            difficulty=doc.get("difficulty"),
            created_by=doc.get("createdBy"),
        )


@dataclass
class AttemptRecord:
    id: str
    quiz_id: str
    participant_name: Optional[str] = None
    answers: List[Any] = field(default_factory=list)
    score: Optional[float] = None
    percentage: Optional[float] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        name = (self.participant_name or "").strip()
        return name or ANONYMOUS

    @property
    def timestamp(self) -> Optional[datetime]:
        return self.completed_at or self.submitted_at

    def is_analyzable(self) -> bool:
        """True when the record is complete enough to enter the statistics."""
        return (self.completed is True
                and _is_number(self.score)
                and _is_number(self.percentage)
                and isinstance(self.answers, (list, tuple))
                and len(self.answers) > 0)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], attempt_id: Optional[str] = None,
                      assume_completed: bool = False) -> "AttemptRecord":
        """
        Builds a record from a stored attempt document. With ``assume_completed``
        a missing ``completed`` flag reads as True, as the attempt store does;
        otherwise only a literal True marks the attempt as completed.
        """
        submitted_at = parse_timestamp(doc.get("submittedAt"))
        answers = doc.get("answers")

        return cls(
            id=str(attempt_id if attempt_id is not None else doc.get("id", "")),
            quiz_id=str(doc.get("quizId", "")),
            participant_name=doc.get("participantName"),
            answers=list(answers) if isinstance(answers, (list, tuple)) else [],
            score=doc.get("score") if _is_number(doc.get("score")) else None,
            percentage=doc.get("percentage") if _is_number(doc.get("percentage")) else None,
            completed=(doc.get("completed") is not False if assume_completed
                       else doc.get("completed") is True),
            completed_at=submitted_at or parse_timestamp(doc.get("completedAt")),
            submitted_at=submitted_at,
        )
