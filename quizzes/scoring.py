"""
Attempt Scoring
===============

Scores a participant's answers when a quiz is submitted and builds the
attempt record that the attempt store receives.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from models.quiz_models import (
    ANONYMOUS,
    AttemptRecord,
    Question,
    Quiz,
    parse_option_index,
    round_half_up,
)


@dataclass
class ScoreResult:
    score: int
    total_questions: int
    percentage: int
    answers_with_correctness: List[Dict[str, Any]] = field(default_factory=list)


def score_attempt(answers: Sequence[Any], questions: Sequence[Question]) -> ScoreResult:
    """
    Counts correct answers. Unanswered questions (None or missing positions)
    are never correct; answers beyond the last question are ignored.
    """
    correct = 0
    detailed = []

    for index, question in enumerate(questions):
        selected = answers[index] if index < len(answers) else None
        selected_index = None if selected == "" else parse_option_index(selected)
        correct_index = parse_option_index(question.correct_option_index)
        is_correct = (selected_index is not None
                      and correct_index is not None
                      and selected_index == correct_index)
        if is_correct:
            correct += 1

        detailed.append({
            "questionIndex": index,
            "selectedAnswer": selected_index,
            "correctAnswer": correct_index,
            "isCorrect": is_correct,
        })

    total = len(questions)
    percentage = round_half_up(correct * 100 / total) if total > 0 else 0

    return ScoreResult(score=correct, total_questions=total, percentage=percentage,
                       answers_with_correctness=detailed)


def build_attempt_record(quiz: Quiz, answers: Sequence[Any],
                         participant_name: Optional[str] = None,
                         now: Optional[datetime] = None) -> AttemptRecord:
    """Scores ``answers`` against ``quiz`` and returns a completed attempt."""
    result = score_attempt(answers, quiz.questions)
    stamp = now or datetime.now(timezone.utc)
    name = (participant_name or "").strip() or ANONYMOUS

    # Stored answers line up with the quiz questions, None marking a skipped one
    stored_answers = [entry["selectedAnswer"] for entry in result.answers_with_correctness]

    return AttemptRecord(
        id=uuid.uuid4().hex,
        quiz_id=quiz.id,
        participant_name=name,
        answers=stored_answers,
        score=result.score,
        percentage=result.percentage,
        completed=True,
        completed_at=stamp,
        submitted_at=stamp,
    )
