import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doodle.application.course.syllabus_usecase import SyllabusUseCase
from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.constants import ROLE_STUDENT
from doodle.infrastructure.repositories.course_repo_impl import get_course_by_id
from doodle.infrastructure.search.search_service import CourseSearchService
from doodle.infrastructure.storage.file_storage import FileStorageService
from doodle.presentation.dependencies import (
    get_ai_service,
    get_current_user,
    get_db,
    get_search_service,
    get_storage,
    instructor_required,
)
from doodle.presentation.errors import ServiceError
from doodle.presentation.schemas.ai_schema import (
    LegacyAssessmentRequest,
    RecommendRequest,
    SearchRequest,
    SyllabusRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI"])


def _owned_course(db: Session, course_id: int, instructor: dict):
    try:
        course = get_course_by_id(db, course_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if course.instructor_id != instructor["user_id"]:
        raise HTTPException(status_code=403, detail="You can only generate content for your own courses")
    return course


@router.post("/syllabus")
def generate_syllabus(
    payload: SyllabusRequest,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    ai_service: CourseAIService = Depends(get_ai_service),
    storage: FileStorageService = Depends(get_storage),
    search: CourseSearchService = Depends(get_search_service),
):
    course = _owned_course(db, payload.course_id, instructor)
    try:
        result = SyllabusUseCase(db, ai_service, storage, search).generate(
            course,
            document_text=payload.document_text,
            update_existing=payload.update_existing,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Syllabus generation failed for course {payload.course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to generate syllabus", e)

    message = "Syllabus updated successfully" if result["is_update"] else "Syllabus generated successfully"
    return {"message": message, "syllabus": result["syllabus"], "is_update": result["is_update"]}


@router.post("/assessment")
def generate_legacy_assessment(
    payload: LegacyAssessmentRequest,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    """Deprecated: use POST /api/assessments, which stores the questions."""
    _owned_course(db, payload.course_id, instructor)
    if not payload.topics:
        raise HTTPException(status_code=400, detail="Topics are required")

    logger.warning(f"Deprecated direct assessment generation used for course {payload.course_id}")
    questions = ai_service.generate_assessment(payload.topics, payload.question_count)
    return {
        "message": "Assessment generated successfully",
        "questions": questions,
        "deprecation_warning": "This endpoint is deprecated. Use POST /api/assessments to create stored assessments.",
    }


@router.post("/recommend")
def recommend(payload: RecommendRequest, current_user: dict = Depends(get_current_user)):
    if (
        current_user["role"] == ROLE_STUDENT
        and payload.student_id is not None
        and payload.student_id != current_user["user_id"]
    ):
        raise HTTPException(status_code=403, detail="You can only view your own recommendations")

    return {
        "message": "Recommendations generated",
        "recommendations": [],
        "note": "Personalized recommendations will be available once enough assessment data is collected",
    }


@router.post("/search")
def search_materials(
    payload: SearchRequest,
    current_user: dict = Depends(get_current_user),
    search: CourseSearchService = Depends(get_search_service),
):
    if not payload.query or not payload.query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")

    results = search.search_similar(payload.query, payload.course_id)
    return {"message": "Search completed", "query": payload.query, "results": results}
