import logging

from fastapi import APIRouter, Depends, HTTPException

from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.presentation.dependencies import get_ai_service, get_current_user
from doodle.presentation.schemas.ai_schema import (
    FollowUpQuestionRequest,
    PersonalizedFeedbackRequest,
    QuestionFeedbackRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai/feedback", tags=["AI Feedback"])

MISSING_FOLLOW_UP_FIELDS = "Missing required fields: original_question, topic_title, subtopic"


def _require_follow_up_fields(payload: FollowUpQuestionRequest) -> None:
    if not (payload.original_question and payload.topic_title and payload.subtopic):
        raise HTTPException(status_code=400, detail=MISSING_FOLLOW_UP_FIELDS)


@router.post("/challenge-question")
def challenge_question(
    payload: FollowUpQuestionRequest,
    current_user: dict = Depends(get_current_user),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    _require_follow_up_fields(payload)
    logger.info(f"User {current_user['user_id']} requested a challenge question on {payload.subtopic}")
    question = ai_service.generate_challenge_question(
        original_question=payload.original_question,
        topic_title=payload.topic_title,
        subtopic=payload.subtopic,
    )
    return {"message": "Challenge question generated successfully", "question": question}


@router.post("/practice-question")
def practice_question(
    payload: FollowUpQuestionRequest,
    current_user: dict = Depends(get_current_user),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    _require_follow_up_fields(payload)
    logger.info(f"User {current_user['user_id']} requested a practice question on {payload.subtopic}")
    question = ai_service.generate_practice_question(
        original_question=payload.original_question,
        topic_title=payload.topic_title,
        subtopic=payload.subtopic,
    )
    return {"message": "Practice question generated successfully", "question": question}


@router.post("/personalized")
def personalized_feedback(
    payload: PersonalizedFeedbackRequest,
    current_user: dict = Depends(get_current_user),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    feedback = ai_service.generate_personalized_feedback(
        question_text=payload.question_text,
        user_answer=payload.user_answer,
        correct_answer=payload.correct_answer,
        is_correct=payload.is_correct,
        topic_title=payload.topic_title,
        subtopic=payload.subtopic,
    )
    return {"message": "Personalized feedback generated successfully", "feedback": feedback}


@router.post("/question")
def question_feedback(
    payload: QuestionFeedbackRequest,
    current_user: dict = Depends(get_current_user),
    ai_service: CourseAIService = Depends(get_ai_service),
):
    feedback = ai_service.generate_question_feedback(
        question=payload.question,
        question_type=payload.question_type,
        student_answer=payload.student_answer,
        correct_answer=payload.correct_answer,
        is_correct=payload.is_correct,
        explanation=payload.explanation or "",
    )
    return {"message": "Feedback generated successfully", "feedback": feedback}
