import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from doodle.infrastructure.constants import MCQ, MSQ, SUBJECTIVE
from doodle.infrastructure.db.models.assessment_model import AssessmentModel, AssessmentTopicModel
from doodle.infrastructure.db.models.question_model import QuestionModel, QuestionOptionModel

logger = logging.getLogger(__name__)


class AssessmentRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        course_id: int,
        instructor_id: int,
        title: str,
        description: Optional[str] = None,
        time_limit_minutes: Optional[int] = None,
        passing_score: Optional[float] = None,
    ) -> AssessmentModel:
        try:
            assessment = AssessmentModel(
                course_id=course_id,
                instructor_id=instructor_id,
                title=title,
                description=description,
                time_limit_minutes=time_limit_minutes,
                passing_score=passing_score,
            )
            self.db.add(assessment)
            self.db.commit()
            self.db.refresh(assessment)
            logger.info(f"Created assessment {assessment.id} for course {course_id}")
            return assessment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error creating assessment: {e}", exc_info=True)
            raise

    def get(self, assessment_id: int) -> AssessmentModel:
        assessment = self.db.query(AssessmentModel).filter(AssessmentModel.id == assessment_id).first()
        if not assessment:
            logger.warning(f"Assessment with id {assessment_id} not found")
            raise ValueError("Assessment not found")
        return assessment

    def list_for_course(self, course_id: int, published_only: bool = False) -> List[AssessmentModel]:
        query = self.db.query(AssessmentModel).filter(AssessmentModel.course_id == course_id)
        if published_only:
            query = query.filter(AssessmentModel.is_published.is_(True))
        return query.order_by(AssessmentModel.created_at.desc(), AssessmentModel.id.desc()).all()

    def add_questions(self, assessment: AssessmentModel, questions: Iterable[Dict]) -> List[QuestionModel]:
        """
        Store generated questions with their options.

        Question numbers continue from the assessment's current highest number,
        starting at 1. Counts on the assessment are recomputed afterwards.
        """
        try:
            next_number = (
                self.db.query(func.max(QuestionModel.question_number))
                .filter(QuestionModel.assessment_id == assessment.id)
                .scalar()
                or 0
            ) + 1

            stored = []
            for data in questions:
                question = QuestionModel(
                    assessment_id=assessment.id,
                    topic_id=data.get("topic_id"),
                    subtopic_id=data.get("subtopic_id"),
                    question_type=data["question_type"],
                    question_text=data["question_text"],
                    question_number=next_number,
                    points=data.get("points", 1.0),
                    explanation=data.get("explanation"),
                    difficulty=data.get("difficulty"),
                    bloom_level=data.get("bloom_level"),
                )
                for opt in data.get("options") or []:
                    question.options.append(
                        QuestionOptionModel(
                            option_text=opt["text"],
                            option_label=opt["label"],
                            is_correct=bool(opt.get("is_correct")),
                        )
                    )
                self.db.add(question)
                stored.append(question)
                next_number += 1

            self.db.flush()
            self._recompute_counts(assessment)
            self.db.commit()
            for question in stored:
                self.db.refresh(question)
            logger.info(f"Stored {len(stored)} questions for assessment {assessment.id}")
            return stored
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Database integrity error storing questions: {e}")
            raise ValueError(f"Database error: {str(e)}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error storing questions: {e}", exc_info=True)
            raise

    def link_topics(self, assessment: AssessmentModel, topic_ids: Iterable[int]) -> None:
        existing = set(assessment.topic_ids)
        for topic_id in topic_ids:
            if topic_id is None or topic_id in existing:
                continue
            self.db.add(AssessmentTopicModel(assessment_id=assessment.id, topic_id=topic_id))
            existing.add(topic_id)
        self.db.commit()
        self.db.refresh(assessment)

    def update(self, assessment: AssessmentModel, fields: Dict) -> AssessmentModel:
        try:
            for key in ("title", "description", "time_limit_minutes", "passing_score"):
                if fields.get(key) is not None:
                    setattr(assessment, key, fields[key])
            self.db.commit()
            self.db.refresh(assessment)
            logger.info(f"Updated assessment {assessment.id}")
            return assessment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error updating assessment {assessment.id}: {e}", exc_info=True)
            raise

    def set_published(self, assessment: AssessmentModel, published: bool) -> AssessmentModel:
        if published and assessment.total_questions == 0:
            raise ValueError("Cannot publish assessment without questions")
        assessment.is_published = published
        assessment.published_at = datetime.now(timezone.utc) if published else None
        self.db.commit()
        self.db.refresh(assessment)
        logger.info(f"Assessment {assessment.id} {'published' if published else 'unpublished'}")
        return assessment

    def delete(self, assessment: AssessmentModel) -> None:
        try:
            assessment_id = assessment.id
            self.db.delete(assessment)
            self.db.commit()
            logger.info(f"Deleted assessment {assessment_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Unexpected error deleting assessment {assessment.id}: {e}", exc_info=True)
            raise

    def get_question(self, question_id: int) -> Optional[QuestionModel]:
        return self.db.query(QuestionModel).filter(QuestionModel.id == question_id).first()

    # ---------------------------
    # Internal Logic
    # ---------------------------

    def _recompute_counts(self, assessment: AssessmentModel) -> None:
        rows = (
            self.db.query(QuestionModel.question_type, func.count(QuestionModel.id))
            .filter(QuestionModel.assessment_id == assessment.id)
            .group_by(QuestionModel.question_type)
            .all()
        )
        counts = {qtype: count for qtype, count in rows}
        assessment.mcq_count = counts.get(MCQ, 0)
        assessment.msq_count = counts.get(MSQ, 0)
        assessment.subjective_count = counts.get(SUBJECTIVE, 0)
        assessment.total_questions = sum(counts.values())
