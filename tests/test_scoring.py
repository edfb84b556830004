"""
Unit tests for scoring submitted attempts.
"""
from datetime import datetime, timezone

from analytics.metrics import compute_analytics
from models.quiz_models import Question, Quiz
from quizzes.scoring import build_attempt_record, score_attempt

QUESTIONS = [
    Question(text="1", options=["A", "B", "C"], correct_option_index=0),
    Question(text="2", options=["A", "B", "C"], correct_option_index=2),
    Question(text="3", options=["A", "B", "C"], correct_option_index=1),
]


class TestScoreAttempt:

    def test_counts_correct_answers(self):
        result = score_attempt([0, 2, 0], QUESTIONS)
        assert result.score == 2
        assert result.total_questions == 3
        assert result.percentage == 67

    def test_unanswered_is_never_correct(self):
        result = score_attempt([None, 2], QUESTIONS)
        assert result.score == 1
        assert [a["isCorrect"] for a in result.answers_with_correctness] == [False, True, False]
        assert result.answers_with_correctness[2]["selectedAnswer"] is None

    def test_no_questions(self):
        result = score_attempt([1, 2], [])
        assert (result.score, result.total_questions, result.percentage) == (0, 0, 0)


class TestBuildAttemptRecord:

    def test_record_is_ready_for_analytics(self):
        quiz = Quiz(id="quiz-9", title="Mini", questions=QUESTIONS)
        now = datetime(2026, 1, 5, 12, tzinfo=timezone.utc)
        record = build_attempt_record(quiz, [0, 2, 1], participant_name="  ", now=now)

        assert record.quiz_id == "quiz-9"
        assert record.participant_name == "Anonymous"
        assert record.answers == [0, 2, 1]
        assert (record.score, record.percentage) == (3, 100)
        assert record.completed is True
        assert record.completed_at == now

        snapshot = compute_analytics(quiz, [record])
        assert snapshot.total_attempts == 1
        assert snapshot.average_percentage == 100

    def test_short_submissions_are_padded(self):
        quiz = Quiz(id="quiz-9", title="Mini", questions=QUESTIONS)
        record = build_attempt_record(quiz, [1])
        assert record.answers == [1, None, None]
        assert record.score == 0


class TestRounding:

    def test_half_percentages_round_up(self):
        questions = [Question(text=str(i), options=["A", "B"], correct_option_index=0) for i in range(8)]
        result = score_attempt([0] + [1] * 7, questions)
        # 12.5% would be 12 under banker's rounding
        assert result.percentage == 13

    def test_string_correct_index_is_parsed(self):
        questions = [Question(text="1", options=["A", "B"], correct_option_index="1")]
        assert score_attempt([1], questions).score == 1
