import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from doodle.application.assessment.create_assessment_usecase import create_assessment_with_questions
from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.constants import QUIZ_LEVELS, ROLE_INSTRUCTOR
from doodle.infrastructure.repositories.assessment_repository import AssessmentRepository
from doodle.infrastructure.repositories.course_repo_impl import get_course_by_id
from doodle.infrastructure.repositories.question_bank_repository import QuestionBankRepository
from doodle.presentation.dependencies import (
    get_ai_service,
    get_current_user,
    get_db,
    instructor_required,
)
from doodle.presentation.errors import ServiceError
from doodle.presentation.schemas.assessment_schema import (
    AssessmentCreate,
    AssessmentOut,
    AssessmentUpdate,
    QuestionOut,
    SaveToBankRequest,
    StudentQuestionOut,
)
from doodle.presentation.schemas.question_bank_schema import BankQuestionOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assessments", tags=["Assessments"])


# --------------------------------------------------
# Dependency injection factory
# --------------------------------------------------
def get_repository(db: Session = Depends(get_db)) -> AssessmentRepository:
    return AssessmentRepository(db)


def _load_assessment(repo: AssessmentRepository, assessment_id: int):
    try:
        return repo.get(assessment_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _owned_assessment(repo: AssessmentRepository, assessment_id: int, instructor: dict, verb: str):
    assessment = _load_assessment(repo, assessment_id)
    if assessment.instructor_id != instructor["user_id"]:
        logger.warning(f"User {instructor['user_id']} tried to {verb} assessment {assessment_id}")
        raise HTTPException(status_code=403, detail=f"You can only {verb} your own assessments")
    return assessment


@router.post("", status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentCreate,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    if payload.course_id is None or not payload.title.strip() or not payload.subtopics:
        raise HTTPException(status_code=400, detail="Missing required fields: course_id, title, subtopics")

    try:
        course = get_course_by_id(db, payload.course_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if course.instructor_id != instructor["user_id"]:
        raise HTTPException(status_code=403, detail="You can only create assessments for your own courses")

    quiz_level = payload.quiz_level.upper() if payload.quiz_level.upper() in QUIZ_LEVELS else "UG"
    try:
        assessment, questions = create_assessment_with_questions(
            db,
            ai_service,
            course=course,
            instructor_id=instructor["user_id"],
            title=payload.title.strip(),
            description=payload.description,
            subtopics=[s.model_dump() for s in payload.subtopics],
            time_limit_minutes=payload.time_limit,
            passing_score=payload.passing_score,
            difficulty_distribution=payload.difficulty_distribution,
            quiz_level=quiz_level,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating assessment for course {payload.course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to create assessment", e)

    return {
        "message": "Assessment created successfully",
        "assessment": AssessmentOut.model_validate(assessment),
        "questions_generated": len(questions),
    }


@router.get("/course/{course_id}")
def list_course_assessments(
    course_id: int,
    current_user: dict = Depends(get_current_user),
    repo: AssessmentRepository = Depends(get_repository),
):
    published_only = current_user["role"] != ROLE_INSTRUCTOR
    assessments = repo.list_for_course(course_id, published_only=published_only)
    return {"assessments": [AssessmentOut.model_validate(a) for a in assessments]}


@router.get("/{assessment_id}")
def get_assessment(
    assessment_id: int,
    current_user: dict = Depends(get_current_user),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _load_assessment(repo, assessment_id)
    if current_user["role"] == ROLE_INSTRUCTOR:
        questions = [QuestionOut.model_validate(q) for q in assessment.questions]
    else:
        if not assessment.is_published:
            raise HTTPException(status_code=403, detail="Assessment is not available for students")
        questions = [StudentQuestionOut.model_validate(q) for q in assessment.questions]
    return {"assessment": AssessmentOut.model_validate(assessment), "questions": questions}


@router.put("/{assessment_id}")
def modify_assessment(
    assessment_id: int,
    payload: AssessmentUpdate,
    instructor: dict = Depends(instructor_required),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _owned_assessment(repo, assessment_id, instructor, "update")
    try:
        assessment = repo.update(assessment, payload.model_dump())
        return {"message": "Assessment updated successfully", "assessment": AssessmentOut.model_validate(assessment)}
    except Exception as e:
        logger.error(f"Error updating assessment {assessment_id}: {e}", exc_info=True)
        raise ServiceError("Failed to update assessment", e)


@router.put("/{assessment_id}/publish")
def publish_assessment(
    assessment_id: int,
    instructor: dict = Depends(instructor_required),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _owned_assessment(repo, assessment_id, instructor, "publish")
    try:
        assessment = repo.set_published(assessment, True)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"message": "Assessment published successfully", "assessment": AssessmentOut.model_validate(assessment)}


@router.put("/{assessment_id}/unpublish")
def unpublish_assessment(
    assessment_id: int,
    instructor: dict = Depends(instructor_required),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _owned_assessment(repo, assessment_id, instructor, "unpublish")
    assessment = repo.set_published(assessment, False)
    return {"message": "Assessment unpublished successfully", "assessment": AssessmentOut.model_validate(assessment)}


@router.delete("/{assessment_id}")
def remove_assessment(
    assessment_id: int,
    instructor: dict = Depends(instructor_required),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _owned_assessment(repo, assessment_id, instructor, "delete")
    try:
        repo.delete(assessment)
    except Exception as e:
        logger.error(f"Error deleting assessment {assessment_id}: {e}", exc_info=True)
        raise ServiceError("Failed to delete assessment", e)
    return {"message": "Assessment deleted successfully"}


@router.post("/{assessment_id}/save-to-bank", status_code=status.HTTP_201_CREATED)
def save_to_bank(
    assessment_id: int,
    payload: SaveToBankRequest,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    repo: AssessmentRepository = Depends(get_repository),
):
    assessment = _owned_assessment(repo, assessment_id, instructor, "save questions from")
    if not payload.question_ids:
        raise HTTPException(status_code=400, detail="Missing or invalid question_ids array")

    bank = QuestionBankRepository(db)
    saved = []
    for question_id in payload.question_ids:
        question = repo.get_question(question_id)
        if question is None or question.assessment_id != assessment.id:
            logger.warning(f"Question {question_id} not found in assessment {assessment_id}, skipping")
            continue
        try:
            saved.append(bank.save_from_question(question, assessment.course_id))
        except Exception as e:
            logger.error(f"Failed to save question {question_id} to bank: {e}")
            continue

    return {
        "message": f"Saved {len(saved)} questions to question bank",
        "saved_questions": [BankQuestionOut.model_validate(q) for q in saved],
        "saved_count": len(saved),
        "total_requested": len(payload.question_ids),
    }
