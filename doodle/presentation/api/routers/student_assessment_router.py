import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from doodle.application.assessment.adaptive_delivery import AdaptiveQuizEngine
from doodle.application.assessment.attempt_usecase import (
    AccessDenied,
    check_attempt_access,
    ensure_available,
    start_attempt,
    submit_attempt,
)
from doodle.infrastructure.repositories.assessment_repository import AssessmentRepository
from doodle.infrastructure.repositories.attempt_repository import AttemptRepository
from doodle.presentation.dependencies import get_db, student_required
from doodle.presentation.errors import ServiceError
from doodle.presentation.schemas.assessment_schema import QuestionOut, StudentQuestionOut
from doodle.presentation.schemas.attempt_schema import (
    AnswerOut,
    AttemptOut,
    SubmitAnswerRequest,
    SubmitAttemptRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/student/assessments", tags=["Student Assessments"])


# --------------------------------------------------
# Dependency injection factory
# --------------------------------------------------
def get_engine(db: Session = Depends(get_db)) -> AdaptiveQuizEngine:
    return AdaptiveQuizEngine(AttemptRepository(db))


def _load_assessment(db: Session, assessment_id: int):
    try:
        return AssessmentRepository(db).get(assessment_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _load_attempt(db: Session, assessment_id: int, attempt_id: int, student_id: int, denied: str = "Access denied to this attempt"):
    try:
        attempt = AttemptRepository(db).get_attempt(attempt_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    try:
        check_attempt_access(attempt, assessment_id, student_id, denied)
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return attempt


def _results(attempt, answers, questions) -> dict:
    return {
        "correct_count": sum(1 for a in answers if a.is_correct),
        "total_count": len(questions),
        "percentage": attempt.percentage or 0,
        "total_points": attempt.score or 0,
        "max_points": attempt.total_points or 0,
        "time_taken_minutes": attempt.time_taken_minutes or 0,
    }


# --------------------------------------------------
# 1. Start attempt
# --------------------------------------------------
@router.post("/{assessment_id}/start", status_code=status.HTTP_201_CREATED)
def start(assessment_id: int, db: Session = Depends(get_db), student: dict = Depends(student_required)):
    assessment = _load_assessment(db, assessment_id)
    try:
        attempt = start_attempt(db, assessment, student["user_id"])
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Error starting attempt on assessment {assessment_id}: {e}", exc_info=True)
        raise ServiceError("Failed to start assessment", e)

    return {
        "message": "Assessment started",
        "attempt_id": attempt.id,
        "assessment": {
            "id": assessment.id,
            "title": assessment.title,
            "total_questions": assessment.total_questions,
            "time_limit_minutes": assessment.time_limit_minutes,
        },
    }


# --------------------------------------------------
# 2. Submit whole attempt
# --------------------------------------------------
@router.post("/{assessment_id}/submit")
def submit(
    assessment_id: int,
    payload: SubmitAttemptRequest,
    db: Session = Depends(get_db),
    student: dict = Depends(student_required),
):
    assessment = _load_assessment(db, assessment_id)
    try:
        ensure_available(assessment)
    except AccessDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    attempt = _load_attempt(db, assessment_id, payload.attempt_id, student["user_id"])
    try:
        submit_attempt(db, attempt, assessment, [a.model_dump() for a in payload.answers])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error submitting attempt {payload.attempt_id}: {e}", exc_info=True)
        raise ServiceError("Failed to submit assessment", e)

    answers = list(attempt.answers)
    questions = list(assessment.questions)
    return {
        "message": "Assessment submitted successfully",
        "attempt_id": attempt.id,
        "results": _results(attempt, answers, questions),
        "answers": [AnswerOut.model_validate(a) for a in answers],
        "questions": [QuestionOut.model_validate(q) for q in questions],
    }


# --------------------------------------------------
# 3. Results and history
# --------------------------------------------------
@router.get("/{assessment_id}/results/{attempt_id}")
def results(
    assessment_id: int,
    attempt_id: int,
    db: Session = Depends(get_db),
    student: dict = Depends(student_required),
):
    assessment = _load_assessment(db, assessment_id)
    attempt = _load_attempt(db, assessment_id, attempt_id, student["user_id"])
    answers = list(attempt.answers)
    questions = list(assessment.questions)
    return {
        "attempt": AttemptOut.model_validate(attempt),
        "results": _results(attempt, answers, questions),
        "answers": [AnswerOut.model_validate(a) for a in answers],
        "questions": [QuestionOut.model_validate(q) for q in questions],
    }


@router.get("/{assessment_id}/attempts")
def attempts(assessment_id: int, db: Session = Depends(get_db), student: dict = Depends(student_required)):
    rows = AttemptRepository(db).list_attempts(assessment_id, student["user_id"])
    return {"attempts": [AttemptOut.model_validate(a) for a in rows]}


# --------------------------------------------------
# 4. Adaptive delivery
# --------------------------------------------------
@router.get("/{assessment_id}/attempts/{attempt_id}/next-question")
def next_question(
    assessment_id: int,
    attempt_id: int,
    db: Session = Depends(get_db),
    student: dict = Depends(student_required),
    engine: AdaptiveQuizEngine = Depends(get_engine),
):
    assessment = _load_assessment(db, assessment_id)
    attempt = _load_attempt(db, assessment_id, attempt_id, student["user_id"], "Access denied")

    question = None if attempt.is_completed else engine.next_question(attempt, assessment)
    if question is None:
        return {"question": None, "is_complete": True, "message": "All questions have been answered"}

    return {
        "question": StudentQuestionOut.model_validate(question),
        "is_complete": False,
        "total_questions": len(assessment.questions),
    }


@router.post("/{assessment_id}/attempts/{attempt_id}/submit-answer")
def submit_answer(
    assessment_id: int,
    attempt_id: int,
    payload: SubmitAnswerRequest,
    db: Session = Depends(get_db),
    student: dict = Depends(student_required),
    engine: AdaptiveQuizEngine = Depends(get_engine),
):
    assessment = _load_assessment(db, assessment_id)
    attempt = _load_attempt(db, assessment_id, attempt_id, student["user_id"], "Access denied")
    try:
        result = engine.submit_answer(
            attempt,
            assessment,
            question_id=payload.question_id,
            selected_option_ids=payload.selected_option_ids,
            answer_text=payload.answer_text,
            time_taken_seconds=payload.time_taken_seconds,
        )
    except ValueError as e:
        logger.warning(f"Rejected answer on attempt {attempt_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error submitting answer on attempt {attempt_id}: {e}", exc_info=True)
        raise ServiceError("Failed to submit answer", e)

    next_q = result["next_question"]
    return {
        **result,
        "next_question": StudentQuestionOut.model_validate(next_q) if next_q is not None else None,
    }
