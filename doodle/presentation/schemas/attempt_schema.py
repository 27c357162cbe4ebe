from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class AnswerIn(BaseModel):
    question_id: int
    answer_text: Optional[str] = None
    selected_option_ids: Optional[List[int]] = None
    time_taken_seconds: Optional[int] = None


class SubmitAttemptRequest(BaseModel):
    attempt_id: int
    answers: List[AnswerIn] = []


class SubmitAnswerRequest(BaseModel):
    question_id: int
    answer_text: Optional[str] = None
    selected_option_ids: Optional[List[int]] = None
    time_taken_seconds: Optional[int] = None


class AttemptOut(BaseModel):
    id: int
    assessment_id: int
    student_id: int
    started_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    score: Optional[float] = None
    total_points: Optional[float] = None
    percentage: Optional[float] = None
    time_taken_minutes: Optional[int] = None
    is_completed: bool

    class Config:
        from_attributes = True


class AnswerOut(BaseModel):
    id: int
    question_id: int
    selected_option_ids: Optional[List[int]] = None
    text_answer: Optional[str] = None
    is_correct: Optional[bool] = None
    points_earned: float
    time_taken_seconds: Optional[int] = None
    feedback: Optional[str] = None

    class Config:
        from_attributes = True
