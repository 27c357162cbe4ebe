import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from doodle.infrastructure.constants import BLOOM_LEVELS, DIFFICULTIES, QUESTION_TYPES
from doodle.infrastructure.db.models.question_bank_model import QuestionBankModel, QuestionBankOptionModel
from doodle.infrastructure.db.models.question_model import QuestionModel

logger = logging.getLogger(__name__)


class QuestionBankRepository:
    def __init__(self, db: Session):
        self.db = db

    def save_from_question(self, question: QuestionModel, course_id: int) -> QuestionBankModel:
        """Copy an assessment question and its options into the course bank."""
        try:
            entry = QuestionBankModel(
                course_id=course_id,
                topic_id=question.topic_id,
                subtopic_id=question.subtopic_id,
                question_type=question.question_type,
                question_text=question.question_text,
                points=question.points,
                explanation=question.explanation,
                difficulty=question.difficulty,
                bloom_level=question.bloom_level,
            )
            for opt in question.options:
                entry.options.append(
                    QuestionBankOptionModel(
                        option_text=opt.option_text,
                        option_label=opt.option_label,
                        is_correct=opt.is_correct,
                    )
                )
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            logger.info(f"Saved question {question.id} to bank as {entry.id}")
            return entry
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving question {question.id} to bank: {e}", exc_info=True)
            raise

    def list_for_course(self, course_id: int, filters: Optional[Dict] = None) -> List[QuestionBankModel]:
        """
        Newest-first bank entries for a course.

        Enum filters (difficulty, bloom_level, question_type) with unknown
        values are ignored rather than matching nothing.
        """
        filters = filters or {}
        query = self.db.query(QuestionBankModel).filter(QuestionBankModel.course_id == course_id)

        difficulty = (filters.get("difficulty") or "").upper()
        if difficulty in DIFFICULTIES:
            query = query.filter(QuestionBankModel.difficulty == difficulty)

        bloom_level = (filters.get("bloom_level") or "").upper()
        if bloom_level in BLOOM_LEVELS:
            query = query.filter(QuestionBankModel.bloom_level == bloom_level)

        question_type = (filters.get("question_type") or "").upper()
        if question_type in QUESTION_TYPES:
            query = query.filter(QuestionBankModel.question_type == question_type)

        if filters.get("topic_id") is not None:
            query = query.filter(QuestionBankModel.topic_id == filters["topic_id"])
        if filters.get("subtopic_id") is not None:
            query = query.filter(QuestionBankModel.subtopic_id == filters["subtopic_id"])

        questions = query.order_by(QuestionBankModel.created_at.desc(), QuestionBankModel.id.desc()).all()
        logger.info(f"Retrieved {len(questions)} bank questions for course {course_id}")
        return questions

    def get(self, question_id: int) -> QuestionBankModel:
        entry = self.db.query(QuestionBankModel).filter(QuestionBankModel.id == question_id).first()
        if not entry:
            raise ValueError("Question not found")
        return entry

    def delete(self, entry: QuestionBankModel) -> None:
        entry_id = entry.id
        try:
            self.db.delete(entry)
            self.db.commit()
            logger.info(f"Deleted bank question {entry_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting bank question {entry.id}: {e}", exc_info=True)
            raise
