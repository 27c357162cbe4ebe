import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from doodle.infrastructure.repositories.attempt_repository import AttemptRepository
from doodle.infrastructure.repositories.course_repo_impl import get_enrollment

from .grading import compute_attempt_stats, grade_answer

logger = logging.getLogger(__name__)


class AccessDenied(Exception):
    """Raised when a student may not act on an assessment or attempt."""


def ensure_available(assessment) -> None:
    if not assessment.is_published:
        raise AccessDenied("Assessment is not available for students")


def start_attempt(db: Session, assessment, student_id: int):
    ensure_available(assessment)

    enrollment = get_enrollment(db, student_id, assessment.course_id)
    if not enrollment:
        logger.warning(f"Student {student_id} not enrolled in course {assessment.course_id}")
        raise AccessDenied("Student enrollment not found for this course")

    return AttemptRepository(db).create_attempt(
        assessment_id=assessment.id,
        student_id=student_id,
        enrollment_id=enrollment.id,
    )


def check_attempt_access(attempt, assessment_id: int, student_id: int, denied_message: str = "Access denied to this attempt") -> None:
    if attempt.student_id != student_id:
        raise AccessDenied(denied_message)
    if attempt.assessment_id != assessment_id:
        raise ValueError("Attempt does not belong to this assessment")


def submit_attempt(db: Session, attempt, assessment, answers: List[Dict]) -> Dict:
    """
    Grade a whole submission in one go and finalize the attempt.

    Answers for questions outside the assessment are skipped. Answers already
    stored during adaptive delivery are replaced by the submitted ones.
    """
    if attempt.is_completed:
        raise ValueError("Assessment attempt is already completed")

    repo = AttemptRepository(db)
    questions = {q.id: q for q in assessment.questions}

    for item in answers:
        question = questions.get(item["question_id"])
        if question is None:
            logger.warning(f"Skipping answer for unknown question {item['question_id']} on attempt {attempt.id}")
            continue
        result = grade_answer(question, item.get("selected_option_ids"), item.get("answer_text"))
        repo.store_answer(
            attempt_id=attempt.id,
            question_id=question.id,
            selected_option_ids=item.get("selected_option_ids"),
            text_answer=item.get("answer_text"),
            is_correct=result.is_correct,
            points_earned=result.points_earned,
            time_taken_seconds=item.get("time_taken_seconds"),
            commit=False,
        )

    db.commit()
    db.refresh(attempt)
    stats = compute_attempt_stats(list(attempt.answers), list(assessment.questions), attempt.started_at)
    repo.finalize(attempt, stats)
    logger.info(f"Attempt {attempt.id} submitted with {len(answers)} answers")
    return stats
