from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class BankOptionOut(BaseModel):
    id: int
    option_label: str
    option_text: str
    is_correct: bool

    class Config:
        from_attributes = True


class BankQuestionOut(BaseModel):
    id: int
    course_id: int
    topic_id: Optional[int] = None
    subtopic_id: Optional[int] = None
    question_type: str
    question_text: str
    points: float
    explanation: Optional[str] = None
    difficulty: Optional[str] = None
    bloom_level: Optional[str] = None
    created_at: Optional[datetime] = None
    options: List[BankOptionOut] = []

    class Config:
        from_attributes = True
