#user_model.py
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from ..base import Base
from sqlalchemy.orm import relationship
from sqlalchemy import UniqueConstraint


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # "instructor" or "student"
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    courses = relationship("CourseModel", back_populates="instructor", cascade="all, delete-orphan", passive_deletes=True)
    enrollments = relationship("EnrollmentModel", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)
    attempts = relationship("StudentAttemptModel", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("email", name="uq_email_user"),
    )
