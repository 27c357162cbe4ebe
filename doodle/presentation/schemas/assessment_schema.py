from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel


class SubtopicSelection(BaseModel):
    topic_title: str
    subtopic: str
    mcq_count: int = 0
    msq_count: int = 0
    subjective_count: int = 0


class AssessmentCreate(BaseModel):
    course_id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    subtopics: List[SubtopicSelection] = []
    time_limit: Optional[int] = None
    passing_score: Optional[float] = None
    difficulty_distribution: Optional[Dict[str, int]] = None
    quiz_level: str = "UG"


class AssessmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    time_limit_minutes: Optional[int] = None
    passing_score: Optional[float] = None


class SaveToBankRequest(BaseModel):
    question_ids: Optional[List[int]] = None


class OptionOut(BaseModel):
    id: int
    option_label: str
    option_text: str
    is_correct: bool

    class Config:
        from_attributes = True


class QuestionOut(BaseModel):
    id: int
    assessment_id: int
    topic_id: Optional[int] = None
    subtopic_id: Optional[int] = None
    question_type: str
    question_text: str
    question_number: int
    points: float
    explanation: Optional[str] = None
    difficulty: Optional[str] = None
    bloom_level: Optional[str] = None
    options: List[OptionOut] = []

    class Config:
        from_attributes = True


class StudentOptionOut(BaseModel):
    id: int
    option_label: str
    option_text: str

    class Config:
        from_attributes = True


class StudentQuestionOut(BaseModel):
    """A question as served to a student: no correctness flags, no explanation."""

    id: int
    question_type: str
    question_text: str
    question_number: int
    points: float
    difficulty: Optional[str] = None
    bloom_level: Optional[str] = None
    options: List[StudentOptionOut] = []

    class Config:
        from_attributes = True


class AssessmentOut(BaseModel):
    id: int
    course_id: int
    instructor_id: int
    title: str
    description: Optional[str] = None
    is_published: bool
    published_at: Optional[datetime] = None
    total_questions: int
    mcq_count: int
    msq_count: int
    subjective_count: int
    time_limit_minutes: Optional[int] = None
    passing_score: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    topic_ids: List[int] = []

    class Config:
        from_attributes = True
