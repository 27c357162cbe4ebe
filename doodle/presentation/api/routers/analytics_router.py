import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from doodle.infrastructure.constants import ROLE_INSTRUCTOR, ROLE_STUDENT
from doodle.infrastructure.repositories.assessment_repository import AssessmentRepository
from doodle.infrastructure.repositories.course_repo_impl import get_course_by_id
from doodle.presentation.dependencies import get_current_user, get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

# Aggregates are placeholders until attempt data is rolled up
PHASE_2_MESSAGE = "Analytics feature coming in Phase 2"


def _course_for_viewer(db: Session, course_id: int, current_user: dict):
    try:
        course = get_course_by_id(db, course_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if current_user["role"] == ROLE_INSTRUCTOR and course.instructor_id != current_user["user_id"]:
        raise HTTPException(status_code=403, detail="You can only view analytics for your own courses")
    return course


@router.get("/overview/{course_id}")
def course_overview(course_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    course = _course_for_viewer(db, course_id, current_user)
    assessments = AssessmentRepository(db).list_for_course(course_id)
    return {
        "message": PHASE_2_MESSAGE,
        "analytics": {
            "course_id": course.id,
            "course_title": course.title,
            "total_assessments": len(assessments),
            "total_attempts": 0,
            "average_score": 0,
            "assessments": [
                {
                    "id": a.id,
                    "title": a.title,
                    "total_questions": a.total_questions,
                    "is_published": a.is_published,
                    "attempts": 0,
                    "average_score": 0,
                }
                for a in assessments
            ],
        },
    }


@router.get("/assessment/{assessment_id}")
def assessment_analytics(
    assessment_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    try:
        assessment = AssessmentRepository(db).get(assessment_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    _course_for_viewer(db, assessment.course_id, current_user)

    return {
        "message": PHASE_2_MESSAGE,
        "analytics": {
            "assessment_id": assessment.id,
            "title": assessment.title,
            "total_questions": assessment.total_questions,
            "total_attempts": 0,
            "average_score": 0,
            "question_analytics": [],
        },
    }


@router.get("/student/{student_id}")
def student_analytics(
    student_id: int,
    course_id: Optional[int] = None,
    current_user: dict = Depends(get_current_user),
):
    if current_user["role"] == ROLE_STUDENT and student_id != current_user["user_id"]:
        raise HTTPException(status_code=403, detail="You can only view your own analytics")

    return {
        "message": PHASE_2_MESSAGE,
        "analytics": {
            "student_id": student_id,
            "course_id": course_id,
            "total_attempts": 0,
            "average_score": 0,
            "assessment_results": [],
        },
    }


@router.get("/topics/{course_id}")
def topic_analytics(course_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    course = _course_for_viewer(db, course_id, current_user)
    return {
        "message": PHASE_2_MESSAGE,
        "analytics": {
            "course_id": course.id,
            "course_title": course.title,
            "topics": [],
        },
    }
