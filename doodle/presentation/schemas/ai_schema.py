from typing import List, Optional

from pydantic import BaseModel


class SyllabusRequest(BaseModel):
    course_id: int
    document_text: Optional[str] = None
    update_existing: bool = False


class LegacyAssessmentRequest(BaseModel):
    course_id: int
    topics: List[str] = []
    question_count: int = 10


class RecommendRequest(BaseModel):
    student_id: Optional[int] = None
    course_id: Optional[int] = None


class SearchRequest(BaseModel):
    query: str = ""
    course_id: Optional[int] = None


class FollowUpQuestionRequest(BaseModel):
    original_question: str = ""
    topic_title: str = ""
    subtopic: str = ""
    difficulty: Optional[str] = None


class PersonalizedFeedbackRequest(BaseModel):
    question_text: str
    user_answer: str = ""
    correct_answer: str = ""
    is_correct: bool
    topic_title: str = ""
    subtopic: str = ""


class QuestionFeedbackRequest(BaseModel):
    question: str
    question_type: str
    student_answer: str = ""
    correct_answer: str = ""
    is_correct: bool
    explanation: Optional[str] = None
