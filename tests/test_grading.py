import random
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from doodle.application.assessment.adaptive_delivery import AdaptiveQuizEngine
from doodle.application.assessment.grading import (
    compute_attempt_stats,
    grade_answer,
    is_substantive_answer,
)


def _question(qid, qtype, correct_ids=(), option_ids=(), points=1.0, difficulty="MEDIUM"):
    options = [SimpleNamespace(id=oid, is_correct=oid in correct_ids) for oid in option_ids]
    return SimpleNamespace(id=qid, question_type=qtype, options=options, points=points, difficulty=difficulty)


MCQ_Q = _question(1, "MCQ", correct_ids={11}, option_ids=(11, 12, 13, 14))
MSQ_Q = _question(2, "MSQ", correct_ids={21, 22, 24}, option_ids=(21, 22, 23, 24, 25), points=2.0)
SUBJ_Q = _question(3, "SUBJECTIVE", points=5.0, difficulty="HARD")


def test_grade_mcq():
    assert grade_answer(MCQ_Q, [11]).is_correct
    assert grade_answer(MCQ_Q, [11]).points_earned == 1.0
    assert not grade_answer(MCQ_Q, [12]).is_correct
    assert not grade_answer(MCQ_Q, [11, 12]).is_correct
    assert grade_answer(MCQ_Q, []).points_earned == 0.0


def test_grade_msq_requires_exact_set():
    assert grade_answer(MSQ_Q, [24, 21, 22]).points_earned == 2.0
    assert not grade_answer(MSQ_Q, [21, 22]).is_correct
    assert not grade_answer(MSQ_Q, [21, 22, 23, 24]).is_correct
    assert not grade_answer(MSQ_Q, None).is_correct


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Elasticity lets capacity follow demand automatically.", True),
        ("", False),
        ("   N/A  ", False),
        ("too short", False),
        ("Honestly I don't know this one", False),
        ("I have no idea what this means", False),
        (None, False),
    ],
)
def test_subjective_heuristic(text, expected):
    assert is_substantive_answer(text) is expected
    assert grade_answer(SUBJ_Q, text_answer=text).points_earned == (5.0 if expected else 0.0)


def test_compute_attempt_stats_rounds_half_up():
    started = datetime(2024, 1, 1, 10, 0, 0)
    answers = [
        SimpleNamespace(points_earned=1.0, is_correct=True),
        SimpleNamespace(points_earned=0.0, is_correct=False),
    ]
    questions = [MCQ_Q, SimpleNamespace(points=1.0)]

    stats = compute_attempt_stats(answers, questions, started, now=started + timedelta(seconds=150))

    assert stats["score"] == 1.0
    assert stats["total_points"] == 2.0
    assert stats["percentage"] == 50
    assert stats["time_taken_minutes"] == 3
    assert stats["correct_count"] == 1
    assert stats["total_count"] == 2

    eighths = [SimpleNamespace(points=1.0) for _ in range(8)]
    partial = [SimpleNamespace(points_earned=1.0, is_correct=True)]
    assert compute_attempt_stats(partial, eighths, started, now=started)["percentage"] == 13


def test_compute_attempt_stats_without_points():
    stats = compute_attempt_stats([], [], datetime(2024, 1, 1), now=datetime(2024, 1, 1))
    assert stats["percentage"] == 0
    assert stats["score"] == 0


@pytest.mark.parametrize(
    "last, correct, expected",
    [
        ("EASY", True, "MEDIUM"),
        ("MEDIUM", True, "HARD"),
        ("HARD", True, "HARD"),
        ("HARD", False, "MEDIUM"),
        ("EASY", False, "EASY"),
        (None, False, "EASY"),
        ("weird", True, "HARD"),
    ],
)
def test_target_difficulty(last, correct, expected):
    assert AdaptiveQuizEngine.target_difficulty(last, correct) == expected


class _StubAttempts:
    def __init__(self, answered=(), last_answer=None):
        self.answered = set(answered)
        self.last_answer = last_answer

    def answered_question_ids(self, attempt_id):
        return self.answered

    def get_last_answer(self, attempt_id):
        return self.last_answer


def test_next_question_prefers_target_difficulty():
    easy = _question(10, "MCQ", difficulty="EASY")
    medium = _question(11, "MCQ", difficulty="MEDIUM")
    hard = _question(12, "MCQ", difficulty="HARD")
    assessment = SimpleNamespace(questions=[easy, medium, hard])
    attempt = SimpleNamespace(id=1)

    last = SimpleNamespace(question=medium, is_correct=True)
    engine = AdaptiveQuizEngine(_StubAttempts(answered={11}, last_answer=last), rng=random.Random(0))
    assert engine.next_question(attempt, assessment) is hard

    last = SimpleNamespace(question=hard, is_correct=True)
    engine = AdaptiveQuizEngine(_StubAttempts(answered={11, 12}, last_answer=last), rng=random.Random(0))
    assert engine.next_question(attempt, assessment) is easy

    engine = AdaptiveQuizEngine(_StubAttempts(answered={10, 11, 12}), rng=random.Random(0))
    assert engine.next_question(attempt, assessment) is None


def test_compute_attempt_stats_mixes_naive_and_aware_times():
    started = datetime(2024, 1, 1, 10, 0, 0)
    now = datetime(2024, 1, 1, 10, 20, 0, tzinfo=timezone.utc)

    stats = compute_attempt_stats([], [MCQ_Q], started, now=now)

    assert stats["time_taken_minutes"] == 20
    assert stats["submitted_at"].tzinfo is not None
