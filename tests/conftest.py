"""
Pytest Configuration and Fixtures.

Shared fixtures for the analytics, quiz and dashboard tests.
"""
import copy
import sys
from pathlib import Path

import pytest

# Add project root and tests dir to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(Path(__file__).parent))

from models.quiz_models import AttemptRecord, Question, Quiz
from save_mock_data import mock_export


@pytest.fixture
def export_doc():
    """A fresh copy of the mock quiz export."""
    return copy.deepcopy(mock_export)


@pytest.fixture
def four_option_quiz():
    return Quiz(
        id="quiz-1",
        title="Sample Quiz",
        questions=[
            Question(text="Pick C", options=["A", "B", "C", "D"], correct_option_index=2),
        ],
    )


@pytest.fixture
def make_attempt():
    """Factory for completed attempts; override any field by keyword."""
    counter = {"n": 0}

    def factory(answers, percentage, score=None, **overrides):
        counter["n"] += 1
        fields = dict(
            id=f"attempt-{counter['n']}",
            quiz_id="quiz-1",
            participant_name=f"Participant {counter['n']}",
            answers=list(answers),
            score=score if score is not None else 0,
            percentage=percentage,
            completed=True,
        )
        fields.update(overrides)
        return AttemptRecord(**fields)

    return factory
