from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel


class CourseCreate(BaseModel):
    title: str = ""
    description: Optional[str] = None


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    # [{topic, bloom_level?, subtopics: [str | {subtopic, bloom_level?}]}]
    syllabus: Optional[List[Any]] = None


class SubtopicOut(BaseModel):
    id: int
    title: str
    order_index: int
    bloom_level: Optional[str] = None

    class Config:
        from_attributes = True


class TopicOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    order_index: int
    bloom_level: Optional[str] = None
    subtopics: List[SubtopicOut] = []

    class Config:
        from_attributes = True


class CourseOut(BaseModel):
    id: int
    instructor_id: int
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    syllabus: Optional[List[Any]] = None
    is_published: bool
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    topics: List[TopicOut] = []

    class Config:
        from_attributes = True


class CourseFileOut(BaseModel):
    id: Optional[int] = None
    name: str
    url: str
    uploaded_at: Optional[datetime] = None


class CourseFileInfo(BaseModel):
    name: str
    url: str
    size: int
    size_formatted: str
    mime_type: str
    uploaded_at: Optional[datetime] = None
