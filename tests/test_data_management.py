"""
Tests for loading quiz exports into the dashboard.
"""
import io
import json
from types import SimpleNamespace

import pytest

from analytics.metrics import compute_analytics
from dashboard import data_management
from dashboard.data_management import (
    ExportFormatError,
    get_analytics,
    load_export,
    parse_export,
    save_local_cache,
)


class TestParseExport:

    def test_filters_attempts_of_other_quizzes(self, export_doc):
        quiz, attempts = parse_export(export_doc)
        assert quiz.title == "World Capitals"
        assert [a.id for a in attempts] == ["a1", "a2", "a3", "a4", "a5", "a6", "a7"]

    def test_missing_completed_flag_reads_as_completed(self, export_doc):
        for doc in export_doc["attempts"]:
            doc.pop("completed", None)
        _, attempts = parse_export(export_doc)
        assert all(a.completed for a in attempts)

    @pytest.mark.parametrize("payload", [[], {"attempts": []}, {"quiz": {}, "attempts": {}}])
    def test_rejects_malformed_exports(self, payload):
        with pytest.raises(ExportFormatError):
            parse_export(payload)


class TestLoadExport:

    def test_from_path(self, export_doc, tmp_path):
        path = tmp_path / "export.json"
        path.write_text(json.dumps(export_doc), encoding="utf-8")
        quiz, attempts = load_export(str(path))
        assert quiz.id == "quiz-geo-01"
        assert len(attempts) == 7

    def test_from_uploaded_file(self, export_doc):
        quiz, _ = load_export(io.StringIO(json.dumps(export_doc)))
        assert quiz.access_code == "GEO7K2"

    def test_invalid_json(self):
        with pytest.raises(ExportFormatError):
            load_export(io.StringIO("{not json"))


def test_export_analytics(export_doc):
    quiz, attempts = parse_export(export_doc)
    snapshot = get_analytics(quiz, attempts)

    assert snapshot == compute_analytics(quiz, attempts)
    assert snapshot.total_attempts == 6
    assert snapshot.average_percentage == 50
    assert (snapshot.highest_score, snapshot.lowest_score) == (100, 0)
    assert snapshot.performance_metrics.pass_rate == 50
    assert snapshot.performance_metrics.excellent_rate == 17
    assert [q.option_stats for q in snapshot.question_analytics] == [[5, 1, 0, 0], [2, 1, 3, 0],
                                                                     [1, 2, 2, 0]]
    assert snapshot.question_analytics[2].effectiveness.distractor_effectiveness == 67


class _StopRerun(Exception):
    pass


class _FakeStreamlit:

    def __init__(self):
        self.session_state = SimpleNamespace(raw_data=None, last_sync=None, attempts_page=4)
        self.messages = []

    def success(self, message):
        self.messages.append(message)

    def error(self, message):
        self.messages.append(message)

    def rerun(self):
        raise _StopRerun()


def test_loading_cache_resets_attempts_page(export_doc, tmp_path, monkeypatch):
    cache_path = tmp_path / "cache.pkl"
    monkeypatch.setenv("QUIZ_CACHE_PATH", str(cache_path))
    save_local_cache(parse_export(export_doc))

    fake_st = _FakeStreamlit()
    monkeypatch.setattr(data_management, "st", fake_st)
    with pytest.raises(_StopRerun):
        data_management.load_local_cache()

    assert fake_st.session_state.attempts_page == 1
    quiz, attempts = fake_st.session_state.raw_data
    assert quiz.id == "quiz-geo-01"
    assert len(attempts) == 7
