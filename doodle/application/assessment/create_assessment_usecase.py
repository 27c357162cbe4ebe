import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.repositories.assessment_repository import AssessmentRepository
from doodle.infrastructure.repositories.course_repo_impl import find_subtopic, find_topic

logger = logging.getLogger(__name__)


def enrich_subtopics(db: Session, course_id: int, selections: List[Dict]) -> List[Dict]:
    """
    Attach topic/subtopic ids and a Bloom level to each selected subtopic.

    Lookups are by title within the course; the subtopic's Bloom level wins
    over the topic's. Unknown titles keep None ids.
    """
    enriched = []
    for sel in selections:
        topic = find_topic(db, course_id, sel["topic_title"])
        subtopic = find_subtopic(db, topic.id, sel["subtopic"]) if topic else None
        bloom = (subtopic.bloom_level if subtopic else None) or (topic.bloom_level if topic else None)
        enriched.append(
            {
                **sel,
                "topic_id": topic.id if topic else None,
                "subtopic_id": subtopic.id if subtopic else None,
                "bloom_level": bloom,
            }
        )
    return enriched


def create_assessment_with_questions(
    db: Session,
    ai_service: CourseAIService,
    *,
    course,
    instructor_id: int,
    title: str,
    description: Optional[str],
    subtopics: List[Dict],
    time_limit_minutes: Optional[int] = None,
    passing_score: Optional[float] = None,
    difficulty_distribution: Optional[Dict] = None,
    quiz_level: str = "UG",
) -> Tuple[object, List]:
    repo = AssessmentRepository(db)
    assessment = repo.create(
        course_id=course.id,
        instructor_id=instructor_id,
        title=title,
        description=description,
        time_limit_minutes=time_limit_minutes,
        passing_score=passing_score,
    )

    try:
        enriched = enrich_subtopics(db, course.id, subtopics)
        ids_by_title = {(s["topic_title"], s["subtopic"]): s for s in enriched}

        generated = ai_service.generate_questions_for_assessment(
            enriched,
            course_context=course.description,
            difficulty_distribution=difficulty_distribution,
            quiz_level=quiz_level,
        )
        logger.info(f"Generated {len(generated)} questions for assessment {assessment.id}")

        for question in generated:
            source = ids_by_title.get((question.get("topic_title"), question.get("subtopic")), {})
            question["topic_id"] = source.get("topic_id")
            question["subtopic_id"] = source.get("subtopic_id")

        stored = repo.add_questions(assessment, generated)
        repo.link_topics(assessment, [s["topic_id"] for s in enriched])
    except Exception:
        logger.error(f"Rolling back assessment {assessment.id} after generation failure", exc_info=True)
        repo.delete(assessment)
        raise

    return assessment, stored
