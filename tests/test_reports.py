"""
Unit tests for report tables, attempt listings and fingerprints.
"""
from datetime import datetime, timedelta, timezone

from analytics.metrics import compute_analytics
from analytics.reports import (
    attempts_dataframe,
    paginate_attempts,
    question_table,
    recent_attempts,
    score_trend,
    snapshot_fingerprint,
)

BASE = datetime(2026, 3, 2, 10, tzinfo=timezone.utc)


def _dated(make_attempt, minutes, percentage=50, **overrides):
    return make_attempt([0], percentage, completed_at=BASE + timedelta(minutes=minutes), **overrides)


class TestRecentAttempts:

    def test_newest_first_and_undated_last(self, make_attempt):
        older = _dated(make_attempt, 1, id="older")
        newer = _dated(make_attempt, 5, id="newer")
        undated = make_attempt([0], 10, id="undated")
        assert [a.id for a in recent_attempts([undated, older, newer])] == ["newer", "older", "undated"]

    def test_mixes_naive_and_aware(self, make_attempt):
        naive = make_attempt([0], 10, id="naive", completed_at=datetime(2026, 3, 2, 11))
        aware = _dated(make_attempt, 0, id="aware")
        assert [a.id for a in recent_attempts([aware, naive])] == ["naive", "aware"]

    def test_limit(self, make_attempt):
        attempts = [_dated(make_attempt, minute) for minute in range(30)]
        assert len(recent_attempts(attempts)) == 20
        assert recent_attempts(attempts, limit=0) == []


class TestPagination:

    def test_pages(self, make_attempt):
        attempts = [make_attempt([0], 10) for _ in range(45)]
        page, total = paginate_attempts(attempts, 3)
        assert total == 3
        assert page == attempts[40:]

    def test_page_is_clamped(self, make_attempt):
        attempts = [make_attempt([0], 10) for _ in range(5)]
        assert paginate_attempts(attempts, 9) == (attempts, 1)
        assert paginate_attempts(attempts, 0) == (attempts, 1)

    def test_empty(self):
        assert paginate_attempts([], 1) == ([], 0)


class TestTables:

    def test_attempts_dataframe(self, make_attempt):
        attempts = [_dated(make_attempt, 0, percentage=80, participant_name=None, score=4)]
        df = attempts_dataframe(attempts)
        assert list(df.columns) == ["Participant", "Score", "Percentage", "Completed", "Completed At"]
        assert df.iloc[0]["Participant"] == "Anonymous"
        assert df.iloc[0]["Completed At"] == "02/03/2026 10:00"

    def test_question_table_has_row_per_question(self, export_doc):
        snapshot = compute_analytics(export_doc["quiz"], export_doc["attempts"][:7])
        df = question_table(snapshot)
        assert list(df["Question"]) == ["Q1", "Q2", "Q3"]
        assert list(df["Correct (%)"]) == [83, 50, 20]
        assert list(df["Unattempted"]) == [0, 0, 1]

    def test_question_table_empty_snapshot(self, four_option_quiz):
        assert question_table(compute_analytics(four_option_quiz, [])).empty

    def test_score_trend_is_chronological(self, make_attempt):
        attempts = [_dated(make_attempt, 2, percentage=20), _dated(make_attempt, 1, percentage=10)]
        assert list(score_trend(attempts)["Percentage"]) == [10, 20]


class TestFingerprint:

    def test_stable_for_equal_content(self, four_option_quiz, make_attempt):
        attempts = [make_attempt([2], 100, id="a")]
        assert snapshot_fingerprint(four_option_quiz, attempts) == snapshot_fingerprint(four_option_quiz, attempts)

    def test_changes_with_answers(self, four_option_quiz, make_attempt):
        first = snapshot_fingerprint(four_option_quiz, [make_attempt([2], 100, id="a")])
        second = snapshot_fingerprint(four_option_quiz, [make_attempt([1], 100, id="a")])
        assert first != second

    def test_handles_missing_quiz(self, make_attempt):
        assert len(snapshot_fingerprint(None, [])) == 64
