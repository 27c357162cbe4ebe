from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class QuestionModel(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True)
    subtopic_id = Column(Integer, ForeignKey("subtopics.id", ondelete="SET NULL"), nullable=True)
    question_type = Column(String(20), nullable=False)  # MCQ, MSQ, SUBJECTIVE
    question_text = Column(Text, nullable=False)
    question_number = Column(Integer, nullable=False)
    points = Column(Float, default=1.0, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String(20), nullable=True)  # EASY, MEDIUM, HARD
    bloom_level = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    assessment = relationship("AssessmentModel", back_populates="questions")
    options = relationship(
        "QuestionOptionModel",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionOptionModel.option_label",
    )

    __table_args__ = (
        UniqueConstraint("assessment_id", "question_number", name="uq_question_number"),
    )


class QuestionOptionModel(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_text = Column(Text, nullable=False)
    option_label = Column(String(10), nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)

    # Relationships
    question = relationship("QuestionModel", back_populates="options")

    __table_args__ = (
        UniqueConstraint("question_id", "option_label", name="uq_question_option_label"),
    )
