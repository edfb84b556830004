"""
Report Tables and Attempt Listings
==================================

Helpers that shape attempts and snapshots for display: recency ordering,
pagination, pandas tables, and the content fingerprint used to memoize
analytics between page reruns.
"""

import hashlib
import json
import math
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from models.analytics_models import AnalyticsSnapshot
from models.quiz_models import AttemptRecord, Quiz

ATTEMPTS_PER_PAGE = 20
RECENT_ATTEMPTS_LIMIT = 20


def _sort_key(attempt: AttemptRecord):
    stamp = attempt.timestamp
    if stamp is None:
        return (1, 0.0)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return (0, -stamp.timestamp())


def recent_attempts(attempts: Iterable[AttemptRecord],
                    limit: int = RECENT_ATTEMPTS_LIMIT) -> List[AttemptRecord]:
    """Most recent attempts first; attempts without a timestamp go last."""
    return sorted(attempts, key=_sort_key)[:max(limit, 0)]


def paginate_attempts(attempts: List[AttemptRecord], page: int,
                      per_page: int = ATTEMPTS_PER_PAGE) -> Tuple[List[AttemptRecord], int]:
    """
    Returns the attempts shown on ``page`` (1-based) and the page count.
    Out-of-range pages are clamped.
    """
    total_pages = math.ceil(len(attempts) / per_page) if per_page > 0 else 0
    if total_pages == 0:
        return [], 0

    page = min(max(page, 1), total_pages)
    start = (page - 1) * per_page
    return attempts[start:start + per_page], total_pages


def _format_timestamp(stamp: Optional[datetime]) -> str:
    return stamp.strftime("%d/%m/%Y %H:%M") if stamp else "Unknown"


def attempts_dataframe(attempts: Iterable[AttemptRecord]) -> pd.DataFrame:
    rows = [{
        "Participant": attempt.display_name,
        "Score": attempt.score,
        "Percentage": attempt.percentage,
        "Completed": attempt.completed,
        "Completed At": _format_timestamp(attempt.timestamp),
    } for attempt in attempts]
    return pd.DataFrame(rows, columns=["Participant", "Score", "Percentage", "Completed",
                                       "Completed At"])


def question_table(snapshot: AnalyticsSnapshot) -> pd.DataFrame:
    """One row per question with its headline item statistics."""
    rows = [{
        "Question": f"Q{entry.question_number}",
        "Correct (%)": entry.correct_percentage,
        "Responses": entry.total_responses,
        "Unattempted": entry.unattempted_count,
        "Difficulty": entry.difficulty_level,
        "Discrimination": entry.effectiveness.discrimination_index,
        "Distractors (%)": entry.effectiveness.distractor_effectiveness,
        "Reliability": entry.effectiveness.question_reliability,
    } for entry in snapshot.question_analytics]
    return pd.DataFrame(rows, columns=["Question", "Correct (%)", "Responses", "Unattempted",
                                       "Difficulty", "Discrimination", "Distractors (%)",
                                       "Reliability"])


def score_trend(attempts: Iterable[AttemptRecord],
                limit: int = RECENT_ATTEMPTS_LIMIT) -> pd.DataFrame:
    """Latest attempts in chronological order, for the score trend chart."""
    latest = list(reversed(recent_attempts(attempts, limit)))
    return pd.DataFrame([{
        "Attempt": position + 1,
        "Percentage": attempt.percentage or 0,
        "Participant": attempt.display_name,
    } for position, attempt in enumerate(latest)], columns=["Attempt", "Percentage", "Participant"])


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def snapshot_fingerprint(quiz: Optional[Quiz], attempts: Iterable[AttemptRecord]) -> str:
    """sha256 over everything the analytics depend on."""
    payload = {
        "quiz": None if quiz is None else {
            "id": quiz.id,
            "title": quiz.title,
            "questions": [[q.text, q.options, q.correct_option_index] for q in quiz.questions],
        },
        "attempts": [[a.id, a.completed, a.score, a.percentage, a.answers] for a in attempts],
    }
    encoded = json.dumps(payload, sort_keys=True, default=_jsonable).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
