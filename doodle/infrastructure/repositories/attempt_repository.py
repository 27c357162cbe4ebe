import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from doodle.infrastructure.db.models.attempt_model import StudentAnswerModel, StudentAttemptModel

logger = logging.getLogger(__name__)


class AttemptRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_attempt(self, *, assessment_id: int, student_id: int, enrollment_id: int) -> StudentAttemptModel:
        try:
            attempt = StudentAttemptModel(
                assessment_id=assessment_id,
                student_id=student_id,
                enrollment_id=enrollment_id,
                started_at=datetime.now(timezone.utc),
                is_completed=False,
            )
            self.db.add(attempt)
            self.db.commit()
            self.db.refresh(attempt)
            logger.info(f"Created attempt {attempt.id} for student {student_id} on assessment {assessment_id}")
            return attempt
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error creating attempt: {e}", exc_info=True)
            raise

    def get_attempt(self, attempt_id: int) -> StudentAttemptModel:
        attempt = self.db.query(StudentAttemptModel).filter(StudentAttemptModel.id == attempt_id).first()
        if not attempt:
            logger.warning(f"Attempt with id {attempt_id} not found")
            raise ValueError("Attempt not found")
        return attempt

    def list_attempts(self, assessment_id: int, student_id: int) -> List[StudentAttemptModel]:
        return (
            self.db.query(StudentAttemptModel)
            .filter(
                StudentAttemptModel.assessment_id == assessment_id,
                StudentAttemptModel.student_id == student_id,
            )
            .order_by(StudentAttemptModel.started_at.desc(), StudentAttemptModel.id.desc())
            .all()
        )

    def answered_question_ids(self, attempt_id: int) -> Set[int]:
        rows = (
            self.db.query(StudentAnswerModel.question_id)
            .filter(StudentAnswerModel.attempt_id == attempt_id)
            .all()
        )
        return {row[0] for row in rows}

    def get_last_answer(self, attempt_id: int) -> Optional[StudentAnswerModel]:
        return (
            self.db.query(StudentAnswerModel)
            .filter(StudentAnswerModel.attempt_id == attempt_id)
            .order_by(StudentAnswerModel.id.desc())
            .first()
        )

    def store_answer(
        self,
        *,
        attempt_id: int,
        question_id: int,
        selected_option_ids: Optional[List[int]],
        text_answer: Optional[str],
        is_correct: bool,
        points_earned: float,
        time_taken_seconds: Optional[int] = None,
        commit: bool = True,
    ) -> StudentAnswerModel:
        """
        Insert the answer for a question, replacing any earlier answer to the
        same question within the attempt.
        """
        try:
            answer = (
                self.db.query(StudentAnswerModel)
                .filter(
                    StudentAnswerModel.attempt_id == attempt_id,
                    StudentAnswerModel.question_id == question_id,
                )
                .first()
            )
            if answer is None:
                answer = StudentAnswerModel(attempt_id=attempt_id, question_id=question_id)
                self.db.add(answer)

            answer.selected_option_ids = list(selected_option_ids) if selected_option_ids else None
            answer.text_answer = text_answer
            answer.is_correct = is_correct
            answer.points_earned = points_earned
            answer.time_taken_seconds = time_taken_seconds

            if commit:
                self.db.commit()
                self.db.refresh(answer)
            else:
                self.db.flush()
            return answer
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Database integrity error storing answer: {e}")
            raise ValueError("Question already answered")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error storing answer: {e}", exc_info=True)
            raise

    def finalize(self, attempt: StudentAttemptModel, stats: Dict) -> StudentAttemptModel:
        try:
            attempt.score = stats["score"]
            attempt.total_points = stats["total_points"]
            attempt.percentage = stats["percentage"]
            attempt.time_taken_minutes = stats["time_taken_minutes"]
            attempt.submitted_at = stats["submitted_at"]
            attempt.is_completed = True
            self.db.commit()
            self.db.refresh(attempt)
            logger.info(
                f"Finalized attempt {attempt.id}: score={attempt.score}/{attempt.total_points} ({attempt.percentage}%)"
            )
            return attempt
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error finalizing attempt {attempt.id}: {e}", exc_info=True)
            raise
