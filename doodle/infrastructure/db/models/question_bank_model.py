from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class QuestionBankModel(Base):
    """A question copied out of an assessment so it can be reused."""

    __tablename__ = "question_bank"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="SET NULL"), nullable=True, index=True)
    subtopic_id = Column(Integer, ForeignKey("subtopics.id", ondelete="SET NULL"), nullable=True, index=True)
    question_type = Column(String(20), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    points = Column(Float, default=1.0, nullable=False)
    explanation = Column(Text, nullable=True)
    difficulty = Column(String(20), nullable=True, index=True)
    bloom_level = Column(String(20), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("CourseModel", back_populates="bank_questions")
    options = relationship(
        "QuestionBankOptionModel",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="QuestionBankOptionModel.option_label",
    )


class QuestionBankOptionModel(Base):
    __tablename__ = "question_bank_options"

    id = Column(Integer, primary_key=True, index=True)
    question_bank_id = Column(Integer, ForeignKey("question_bank.id", ondelete="CASCADE"), nullable=False, index=True)
    option_text = Column(Text, nullable=False)
    option_label = Column(String(10), nullable=False)
    is_correct = Column(Boolean, default=False, nullable=False)

    question = relationship("QuestionBankModel", back_populates="options")

    __table_args__ = (
        UniqueConstraint("question_bank_id", "option_label", name="uq_bank_option_label"),
    )
