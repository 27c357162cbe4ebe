import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doodle.infrastructure.repositories.course_repo_impl import get_course_by_id
from doodle.infrastructure.repositories.question_bank_repository import QuestionBankRepository
from doodle.presentation.dependencies import get_db, instructor_required
from doodle.presentation.schemas.question_bank_schema import BankQuestionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/question-bank", tags=["Question Bank"])


@router.get("/{course_id}")
def list_bank_questions(
    course_id: int,
    difficulty: Optional[str] = None,
    bloom_level: Optional[str] = None,
    question_type: Optional[str] = None,
    topic_id: Optional[int] = None,
    subtopic_id: Optional[int] = None,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
):
    try:
        course = get_course_by_id(db, course_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if course.instructor_id != instructor["user_id"]:
        raise HTTPException(status_code=403, detail="You can only view question banks of your own courses")

    questions = QuestionBankRepository(db).list_for_course(
        course_id,
        {
            "difficulty": difficulty,
            "bloom_level": bloom_level,
            "question_type": question_type,
            "topic_id": topic_id,
            "subtopic_id": subtopic_id,
        },
    )
    return {"questions": [BankQuestionOut.model_validate(q) for q in questions], "count": len(questions)}


@router.delete("/{question_id}")
def remove_bank_question(
    question_id: int,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
):
    repo = QuestionBankRepository(db)
    try:
        entry = repo.get(question_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if entry.course.instructor_id != instructor["user_id"]:
        raise HTTPException(status_code=403, detail="You can only delete questions from your own courses")

    repo.delete(entry)
    return {"message": "Question deleted from question bank"}
