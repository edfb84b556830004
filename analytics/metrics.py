"""
Analytics and Metrics Calculation Module
=========================================

This module turns a quiz definition and its attempt records into an
``AnalyticsSnapshot``:

1. Summary statistics over attempt percentages
2. Per-question response tabulation and difficulty classification
3. Item analysis (discrimination index, distractor effectiveness)
4. Qualitative insight and recommendations per question

The computation is pure. Malformed attempts are skipped, never reported.
"""

import math
from typing import Any, Iterable, List, Mapping, Optional

from loguru import logger

from models.analytics_models import (
    AnalyticsSnapshot,
    DifficultyDistribution,
    OptionAnalytics,
    PerformanceInsight,
    PerformanceMetrics,
    QuestionAnalytics,
    QuestionEffectiveness,
    QuestionEffectivenessSummary,
)
from models.quiz_models import (
    AttemptRecord,
    Question,
    Quiz,
    parse_option_index,
    round_half_up,
)

UNKNOWN_QUIZ_TITLE = "Unknown Quiz"

PASS_THRESHOLD = 60
EXCELLENT_THRESHOLD = 80

EASY_THRESHOLD = 80
MEDIUM_THRESHOLD = 60

MIN_ATTEMPTS_FOR_DISCRIMINATION = 6
DISCRIMINATION_GROUP_SHARE = 0.27
MIN_DISCRIMINATION_GROUP = 3
LOW_DISCRIMINATION = 0.2

# (lower bound, level, message), checked top to bottom
PERFORMANCE_LEVELS = [
    (90, "excellent", "Very high success rate - consider making it slightly more challenging"),
    (80, "good", "Good performance - well-balanced question"),
    (60, "moderate", "Moderate difficulty - review if content was covered adequately"),
    (40, "challenging", "Challenging question - ensure content clarity and distractors"),
    (None, "difficult", "Very challenging - review question clarity and teaching material"),
]


def _percent(part: int, whole: int) -> int:
    return round_half_up(part * 100 / whole) if whole > 0 else 0


def _coerce_quiz(quiz: Any) -> Optional[Quiz]:
    if isinstance(quiz, Quiz):
        return quiz
    if isinstance(quiz, Mapping):
        return Quiz.from_document(quiz)
    return None


def _coerce_attempts(attempts: Optional[Iterable[Any]]) -> List[AttemptRecord]:
    records = []
    for attempt in attempts or []:
        if isinstance(attempt, AttemptRecord):
            records.append(attempt)
        elif isinstance(attempt, Mapping):
            records.append(AttemptRecord.from_document(attempt))
    return records


def _answer_at(attempt: AttemptRecord, question_index: int) -> Any:
    if 0 <= question_index < len(attempt.answers):
        return attempt.answers[question_index]
    return None


def filter_completed_attempts(attempts: Optional[Iterable[Any]]) -> List[AttemptRecord]:
    """Keeps only completed attempts carrying a score, a percentage and answers."""
    records = _coerce_attempts(attempts)
    completed = [attempt for attempt in records if attempt.is_analyzable()]

    skipped = len(records) - len(completed)
    if skipped:
        logger.debug(f"Skipping {skipped} incomplete or malformed attempt(s)")
    return completed


def collect_responses(attempts: List[AttemptRecord], question_index: int,
                      option_count: int) -> List[int]:
    """
    Returns the option indices chosen for one question. Empty entries and
    values that do not resolve to one of the question's options are treated
    as no response.
    """
    responses = []
    for attempt in attempts:
        answer = _answer_at(attempt, question_index)
        if answer is None or answer == "":
            continue
        option_index = parse_option_index(answer)
        if option_index is not None and 0 <= option_index < option_count:
            responses.append(option_index)
    return responses


def classify_difficulty(correct_percentage: int):
    """Returns (difficulty_level, difficulty_score)."""
    if correct_percentage >= EASY_THRESHOLD:
        return "easy", 1
    if correct_percentage >= MEDIUM_THRESHOLD:
        return "medium", 2
    return "hard", 3


def classify_reliability(correct_percentage: int) -> str:
    if correct_percentage < 20:
        return "Too Hard"
    if correct_percentage > 90:
        return "Too Easy"
    return "Good"


def calculate_discrimination_index(attempts: List[AttemptRecord], question_index: int,
                                   correct_answer: Any) -> float:
    """
    Upper/lower 27% item discrimination. Returns 0 when fewer than six
    attempts are available. Groups may overlap on small samples.
    """
    if len(attempts) < MIN_ATTEMPTS_FOR_DISCRIMINATION:
        return 0

    ranked = sorted(attempts, key=lambda attempt: attempt.percentage or 0, reverse=True)
    group_size = max(MIN_DISCRIMINATION_GROUP,
                     int(math.floor(len(attempts) * DISCRIMINATION_GROUP_SHARE)))
    top_group = ranked[:group_size]
    bottom_group = ranked[-group_size:]

    correct = parse_option_index(correct_answer)
    if correct is None:
        return 0

    def count_correct(group):
        return sum(1 for attempt in group
                   if parse_option_index(_answer_at(attempt, question_index)) == correct)

    index = (count_correct(top_group) - count_correct(bottom_group)) / group_size
    return round_half_up(index * 100) / 100


def calculate_distractor_effectiveness(option_analytics: List[OptionAnalytics]) -> int:
    """Share of incorrect options picked at least once; 100 if there are none."""
    distractors = [option for option in option_analytics if not option.is_correct]
    if not distractors:
        return 100
    chosen = [option for option in distractors if option.count > 0]
    return _percent(len(chosen), len(distractors))


def get_performance_insight(correct_percentage: int) -> PerformanceInsight:
    for lower_bound, level, message in PERFORMANCE_LEVELS[:-1]:
        if correct_percentage >= lower_bound:
            return PerformanceInsight(level=level, message=message)
    _, level, message = PERFORMANCE_LEVELS[-1]
    return PerformanceInsight(level=level, message=message)


def get_question_recommendations(correct_percentage: int,
                                 option_analytics: List[OptionAnalytics],
                                 effectiveness: QuestionEffectiveness) -> List[str]:
    recommendations = []

    if correct_percentage < 40:
        recommendations.append("Consider revising question wording for clarity")
        recommendations.append("Review if this topic was adequately covered in learning materials")

    if correct_percentage > 90:
        recommendations.append("Question may be too easy - consider adding complexity")

    unused = [option for option in option_analytics if not option.is_correct and option.count == 0]
    if unused:
        recommendations.append(f"{len(unused)} distractor(s) were never selected - consider revising")

    if effectiveness.discrimination_index < LOW_DISCRIMINATION:
        recommendations.append("Low discrimination - question may not effectively distinguish "
                               "between high/low performers")

    return recommendations


def analyze_question(question: Question, question_index: int,
                     attempts: List[AttemptRecord]) -> QuestionAnalytics:
    """Builds the full analytics entry for the question at ``question_index``."""
    options = list(question.options)
    correct = parse_option_index(question.correct_option_index)

    responses = collect_responses(attempts, question_index, len(options))
    total_responses = len(responses)
    correct_count = sum(1 for response in responses if response == correct)
    correct_percentage = _percent(correct_count, total_responses)
    difficulty_level, difficulty_score = classify_difficulty(correct_percentage)

    option_stats = [0] * len(options)
    for response in responses:
        option_stats[response] += 1

    option_analytics = [
        OptionAnalytics(
            text=text,
            count=count,
            percentage=_percent(count, total_responses),
            is_correct=option_index == correct,
            is_distractor=option_index != correct and count > 0,
        )
        for option_index, (text, count) in enumerate(zip(options, option_stats))
    ]

    effectiveness = QuestionEffectiveness(
        discrimination_index=calculate_discrimination_index(attempts, question_index, correct),
        distractor_effectiveness=calculate_distractor_effectiveness(option_analytics),
        question_reliability=classify_reliability(correct_percentage),
    )

    return QuestionAnalytics(
        question_number=question_index + 1,
        question=question.text,
        options=options,
        correct_answer=correct,
        correct_answer_text=question.correct_option_text,
        correct_count=correct_count,
        total_responses=total_responses,
        correct_percentage=correct_percentage,
        difficulty_level=difficulty_level,
        difficulty_score=difficulty_score,
        option_stats=option_stats,
        option_analytics=option_analytics,
        effectiveness=effectiveness,
        unattempted_count=len(attempts) - total_responses,
        performance_insight=get_performance_insight(correct_percentage),
        recommendations=get_question_recommendations(correct_percentage, option_analytics,
                                                     effectiveness),
    )


def compute_analytics(quiz: Any, attempts: Optional[Iterable[Any]] = None) -> AnalyticsSnapshot:
    """
    Computes the analytics snapshot for ``quiz`` from its attempt records.

    ``quiz`` may be a Quiz, a stored quiz document or None; attempts may be
    AttemptRecord instances or stored attempt documents. Returns a zeroed
    snapshot when there is no quiz or no usable attempt.
    """
    quiz = _coerce_quiz(quiz)
    title = (quiz.title if quiz else None) or UNKNOWN_QUIZ_TITLE
    question_total = len(quiz.questions) if quiz else 0

    completed = filter_completed_attempts(attempts) if quiz else []
    if not completed:
        return AnalyticsSnapshot(quiz_title=title,
                                 performance_metrics=PerformanceMetrics(total_questions=question_total))

    percentages = [attempt.percentage for attempt in completed]
    total = len(completed)

    distribution = DifficultyDistribution()
    metrics = PerformanceMetrics(
        total_questions=question_total,
        pass_rate=_percent(sum(1 for p in percentages if p >= PASS_THRESHOLD), total),
        excellent_rate=_percent(sum(1 for p in percentages if p >= EXCELLENT_THRESHOLD), total),
        difficulty_distribution=distribution,
    )

    question_analytics = []
    for question_index, question in enumerate(quiz.questions):
        entry = analyze_question(question, question_index, completed)
        setattr(distribution, entry.difficulty_level,
                getattr(distribution, entry.difficulty_level) + 1)
        metrics.question_effectiveness.append(QuestionEffectivenessSummary(
            question_number=entry.question_number,
            difficulty=entry.difficulty_level,
            effectiveness=entry.effectiveness.question_reliability,
            discrimination_index=entry.effectiveness.discrimination_index,
        ))
        question_analytics.append(entry)

    logger.info(f"Computed analytics for '{title}': {total} attempt(s), "
                f"{len(question_analytics)} question(s)")

    return AnalyticsSnapshot(
        quiz_title=title,
        total_attempts=total,
        average_percentage=round_half_up(sum(percentages) / total),
        highest_score=max(percentages),
        lowest_score=min(percentages),
        performance_metrics=metrics,
        question_analytics=question_analytics,
    )
