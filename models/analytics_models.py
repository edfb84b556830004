"""
Data Models for Analytics Snapshots
===================================

Result structures produced by ``analytics.metrics.compute_analytics``. A
snapshot is rebuilt from scratch on every call and handed to the rendering
layer; nothing here is persisted.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class OptionAnalytics:
    text: str
    count: int
    percentage: int
    is_correct: bool
    is_distractor: bool


@dataclass
class PerformanceInsight:
    level: str
    message: str


@dataclass
class QuestionEffectiveness:
    discrimination_index: float
    distractor_effectiveness: int
    question_reliability: str


@dataclass
class QuestionAnalytics:
    question_number: int
    question: str
    options: List[str]
    correct_answer: Optional[int]
    correct_answer_text: Optional[str]
    correct_count: int
    total_responses: int
    correct_percentage: int
    difficulty_level: str
    difficulty_score: int
    option_stats: List[int]
    option_analytics: List[OptionAnalytics]
    effectiveness: QuestionEffectiveness
    unattempted_count: int
    performance_insight: PerformanceInsight
    recommendations: List[str] = field(default_factory=list)


@dataclass
class QuestionEffectivenessSummary:
    question_number: int
    difficulty: str
    effectiveness: str
    discrimination_index: float


@dataclass
class DifficultyDistribution:
    easy: int = 0
    medium: int = 0
    hard: int = 0


@dataclass
class PerformanceMetrics:
    total_questions: int = 0
    pass_rate: int = 0
    excellent_rate: int = 0
    difficulty_distribution: DifficultyDistribution = field(default_factory=DifficultyDistribution)
    question_effectiveness: List[QuestionEffectivenessSummary] = field(default_factory=list)


@dataclass
class AnalyticsSnapshot:
    quiz_title: str
    total_attempts: int = 0
    average_percentage: int = 0
    # Both extremes are percentages, not raw point scores
    highest_score: float = 0
    lowest_score: float = 0
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    question_analytics: List[QuestionAnalytics] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.total_attempts == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
