from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class TopicModel(Base):
    __tablename__ = "topics"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False, default=0)
    bloom_level = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("CourseModel", back_populates="topics")
    subtopics = relationship(
        "SubtopicModel",
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by="SubtopicModel.order_index",
    )


class SubtopicModel(Base):
    __tablename__ = "subtopics"

    id = Column(Integer, primary_key=True, index=True)
    topic_id = Column(Integer, ForeignKey("topics.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)
    bloom_level = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    topic = relationship("TopicModel", back_populates="subtopics")
