import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from doodle.infrastructure.constants import MCQ, MSQ, SUBJECTIVE

logger = logging.getLogger(__name__)

NON_ANSWERS = {"", "na", "n/a"}
NON_ANSWER_PHRASES = ("idk", "dont know", "don't know", "no idea", "blank", "nothing", "none")
MIN_SUBJECTIVE_LENGTH = 10


@dataclass
class GradeResult:
    is_correct: bool
    points_earned: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def correct_option_ids(question) -> set:
    return {opt.id for opt in question.options if opt.is_correct}


def grade_mcq(question, selected_option_ids: Optional[Iterable[int]]) -> bool:
    selected = list(selected_option_ids or [])
    if len(selected) != 1:
        return False
    return selected[0] in correct_option_ids(question)


def grade_msq(question, selected_option_ids: Optional[Iterable[int]]) -> bool:
    selected = set(selected_option_ids or [])
    return bool(selected) and selected == correct_option_ids(question)


def is_substantive_answer(text: Optional[str]) -> bool:
    """
    Heuristic check for subjective answers.

    Empty and placeholder answers, answers shorter than ten characters and
    answers admitting not knowing are rejected; anything else passes.
    """
    cleaned = (text or "").strip()
    if cleaned.lower() in NON_ANSWERS:
        return False
    if len(cleaned) < MIN_SUBJECTIVE_LENGTH:
        return False
    lowered = cleaned.lower()
    return not any(phrase in lowered for phrase in NON_ANSWER_PHRASES)


def grade_answer(question, selected_option_ids=None, text_answer: Optional[str] = None) -> GradeResult:
    if question.question_type == MCQ:
        is_correct = grade_mcq(question, selected_option_ids)
    elif question.question_type == MSQ:
        is_correct = grade_msq(question, selected_option_ids)
    elif question.question_type == SUBJECTIVE:
        is_correct = is_substantive_answer(text_answer)
    else:
        logger.warning(f"Unknown question type {question.question_type!r} for question {question.id}")
        is_correct = False

    points = float(question.points or 0) if is_correct else 0.0
    return GradeResult(is_correct=is_correct, points_earned=points)


def compute_attempt_stats(
    answers: List,
    questions: List,
    started_at: datetime,
    now: Optional[datetime] = None,
) -> Dict:
    """Score totals for an attempt, ready to be written by the repository."""
    now = _as_utc(now or datetime.now(timezone.utc))
    score = sum(float(a.points_earned or 0) for a in answers)
    total_points = sum(float(q.points or 0) for q in questions)
    percentage = _round_half_up(score / total_points * 100) if total_points > 0 else 0
    minutes = _round_half_up((now - _as_utc(started_at)).total_seconds() / 60) if started_at else 0

    return {
        "score": score,
        "total_points": total_points,
        "percentage": percentage,
        "time_taken_minutes": max(minutes, 0),
        "submitted_at": now,
        "correct_count": sum(1 for a in answers if a.is_correct),
        "total_count": len(questions),
    }
