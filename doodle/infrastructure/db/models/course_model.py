from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..base import Base


class CourseModel(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # Legacy single-file reference, kept in sync with the latest upload
    file_url = Column(Text, nullable=True)
    file_name = Column(String(255), nullable=True)
    syllabus = Column(JSON, nullable=True)
    is_published = Column(Boolean, default=False, nullable=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    instructor = relationship("UserModel", back_populates="courses")
    files = relationship("CourseFileModel", back_populates="course", cascade="all, delete-orphan", order_by="CourseFileModel.id")
    enrollments = relationship("EnrollmentModel", back_populates="course", cascade="all, delete-orphan")
    topics = relationship("TopicModel", back_populates="course", cascade="all, delete-orphan", order_by="TopicModel.order_index")
    assessments = relationship("AssessmentModel", back_populates="course", cascade="all, delete-orphan")
    bank_questions = relationship("QuestionBankModel", back_populates="course", cascade="all, delete-orphan")


class CourseFileModel(Base):
    __tablename__ = "course_files"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_url = Column(Text, nullable=False)
    blob_name = Column(String(255), nullable=False)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("CourseModel", back_populates="files")


class EnrollmentModel(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.now())

    student = relationship("UserModel", back_populates="enrollments")
    course = relationship("CourseModel", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
    )
