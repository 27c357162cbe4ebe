from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class AssessmentModel(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    # Maintained by the repository whenever questions change
    total_questions = Column(Integer, default=0, nullable=False)
    mcq_count = Column(Integer, default=0, nullable=False)
    msq_count = Column(Integer, default=0, nullable=False)
    subjective_count = Column(Integer, default=0, nullable=False)
    time_limit_minutes = Column(Integer, nullable=True)
    passing_score = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("CourseModel", back_populates="assessments")
    questions = relationship(
        "QuestionModel",
        back_populates="assessment",
        cascade="all, delete-orphan",
        order_by="QuestionModel.question_number",
    )
    topic_links = relationship("AssessmentTopicModel", back_populates="assessment", cascade="all, delete-orphan")
    attempts = relationship("StudentAttemptModel", back_populates="assessment", cascade="all, delete-orphan")

    @property
    def topic_ids(self):
        return [link.topic_id for link in self.topic_links]


class AssessmentTopicModel(Base):
    __tablename__ = "assessment_topics"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    assessment = relationship("AssessmentModel", back_populates="topic_links")

    __table_args__ = (
        UniqueConstraint("assessment_id", "topic_id", name="uq_assessment_topic"),
    )
