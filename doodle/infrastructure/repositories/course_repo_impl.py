import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from doodle.infrastructure.db.models.assessment_model import AssessmentTopicModel
from doodle.infrastructure.db.models.course_model import CourseFileModel, CourseModel, EnrollmentModel
from doodle.infrastructure.db.models.question_bank_model import QuestionBankModel
from doodle.infrastructure.db.models.question_model import QuestionModel
from doodle.infrastructure.db.models.topic_model import SubtopicModel, TopicModel

logger = logging.getLogger(__name__)


# --------------------------------------------------
# Courses
# --------------------------------------------------

def create_course(db: Session, instructor_id: int, title: str, description: Optional[str] = None) -> CourseModel:
    """Create a new course"""
    try:
        course = CourseModel(instructor_id=instructor_id, title=title, description=description)
        db.add(course)
        db.commit()
        db.refresh(course)
        logger.info(f"Created course: {course.title} (ID: {course.id})")
        return course
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating course: {e}", exc_info=True)
        raise


def get_course_by_id(db: Session, course_id: int) -> CourseModel:
    course = db.query(CourseModel).filter(CourseModel.id == course_id).first()
    if not course:
        logger.warning(f"Course with id {course_id} not found")
        raise ValueError("Course not found")
    return course


def list_instructor_courses(db: Session, instructor_id: int) -> List[CourseModel]:
    return (
        db.query(CourseModel)
        .filter(CourseModel.instructor_id == instructor_id)
        .order_by(CourseModel.created_at.desc(), CourseModel.id.desc())
        .all()
    )


def list_enrolled_courses(db: Session, student_id: int) -> List[CourseModel]:
    return (
        db.query(CourseModel)
        .join(EnrollmentModel, EnrollmentModel.course_id == CourseModel.id)
        .filter(EnrollmentModel.student_id == student_id)
        .order_by(EnrollmentModel.enrolled_at.desc(), EnrollmentModel.id.desc())
        .all()
    )


def list_all_courses(db: Session, published_only: bool) -> List[CourseModel]:
    query = db.query(CourseModel)
    if published_only:
        query = query.filter(CourseModel.is_published.is_(True))
    return query.order_by(CourseModel.created_at.desc(), CourseModel.id.desc()).all()


def update_course(
    db: Session,
    course: CourseModel,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    syllabus: Optional[List[Dict]] = None,
) -> CourseModel:
    """Update course fields; a new syllabus also rebuilds the topic tree"""
    try:
        if title is not None:
            course.title = title
        if description is not None:
            course.description = description
        if syllabus is not None:
            course.syllabus = syllabus
            _rebuild_topics(db, course, syllabus)
        db.commit()
        db.refresh(course)
        logger.info(f"Updated course {course.id}")
        return course
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating course {course.id}: {e}", exc_info=True)
        raise


def delete_course(db: Session, course: CourseModel) -> List[str]:
    """Delete a course and return the blob names of its stored files"""
    try:
        course_id = course.id
        blob_names = [f.blob_name for f in course.files]
        if course.file_url and not blob_names:
            blob_names.append(course.file_url.rstrip("/").split("/")[-1])
        db.delete(course)
        db.commit()
        logger.info(f"Deleted course {course_id}")
        return blob_names
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting course {course.id}: {e}", exc_info=True)
        raise


def set_course_published(db: Session, course: CourseModel, published: bool) -> CourseModel:
    try:
        if published and not course.syllabus:
            raise ValueError("Cannot publish course without a syllabus. Generate a syllabus first.")
        course.is_published = published
        course.published_at = datetime.now(timezone.utc) if published else None
        db.commit()
        db.refresh(course)
        logger.info(f"Course {course.id} {'published' if published else 'unpublished'}")
        return course
    except ValueError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error publishing course {course.id}: {e}", exc_info=True)
        raise


# --------------------------------------------------
# Enrollments
# --------------------------------------------------

def get_enrollment(db: Session, student_id: int, course_id: int) -> Optional[EnrollmentModel]:
    return (
        db.query(EnrollmentModel)
        .filter(EnrollmentModel.student_id == student_id, EnrollmentModel.course_id == course_id)
        .first()
    )


def enroll_student(db: Session, course: CourseModel, student_id: int) -> EnrollmentModel:
    try:
        if not course.is_published:
            raise ValueError("Course is not published yet. Please wait for the instructor to publish it.")
        if get_enrollment(db, student_id, course.id):
            raise ValueError("Already enrolled in this course")

        enrollment = EnrollmentModel(student_id=student_id, course_id=course.id)
        db.add(enrollment)
        db.commit()
        db.refresh(enrollment)
        logger.info(f"Student {student_id} enrolled in course {course.id}")
        return enrollment
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error enrolling student {student_id}: {e}")
        raise ValueError("Already enrolled in this course")
    except ValueError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error enrolling student {student_id}: {e}", exc_info=True)
        raise


def unenroll_student(db: Session, course_id: int, student_id: int) -> None:
    try:
        enrollment = get_enrollment(db, student_id, course_id)
        if not enrollment:
            raise ValueError("Not enrolled in this course")
        db.delete(enrollment)
        db.commit()
        logger.info(f"Student {student_id} unenrolled from course {course_id}")
    except ValueError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error unenrolling student {student_id}: {e}", exc_info=True)
        raise


# --------------------------------------------------
# Files
# --------------------------------------------------

def add_course_file(
    db: Session,
    course: CourseModel,
    *,
    file_name: str,
    file_url: str,
    blob_name: str,
    uploaded_by: int,
) -> CourseFileModel:
    """Record an uploaded file and point the legacy course columns at it"""
    try:
        course_file = CourseFileModel(
            course_id=course.id,
            file_name=file_name,
            file_url=file_url,
            blob_name=blob_name,
            uploaded_by=uploaded_by,
        )
        db.add(course_file)
        course.file_url = file_url
        course.file_name = file_name
        db.commit()
        db.refresh(course_file)
        db.refresh(course)
        logger.info(f"Added file {file_name} to course {course.id}")
        return course_file
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error adding file to course {course.id}: {e}", exc_info=True)
        raise


def get_course_file(db: Session, course_id: int, file_name: str) -> Optional[CourseFileModel]:
    """Find a course file by its original name or blob name, newest first"""
    return (
        db.query(CourseFileModel)
        .filter(CourseFileModel.course_id == course_id)
        .filter((CourseFileModel.file_name == file_name) | (CourseFileModel.blob_name == file_name))
        .order_by(CourseFileModel.id.desc())
        .first()
    )


def get_latest_course_file(db: Session, course_id: int) -> Optional[CourseFileModel]:
    return (
        db.query(CourseFileModel)
        .filter(CourseFileModel.course_id == course_id)
        .order_by(CourseFileModel.id.desc())
        .first()
    )


def delete_course_file(db: Session, course: CourseModel, course_file: CourseFileModel) -> None:
    try:
        if course.file_url == course_file.file_url:
            course.file_url = None
            course.file_name = None
        file_name = course_file.file_name
        db.delete(course_file)
        db.commit()
        logger.info(f"Deleted file record {file_name} from course {course.id}")
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error deleting file from course {course.id}: {e}", exc_info=True)
        raise


def clear_legacy_file(db: Session, course: CourseModel) -> None:
    course.file_url = None
    course.file_name = None
    db.commit()


# --------------------------------------------------
# Topics
# --------------------------------------------------

def find_topic(db: Session, course_id: int, title: str) -> Optional[TopicModel]:
    return (
        db.query(TopicModel)
        .filter(TopicModel.course_id == course_id, TopicModel.title == title)
        .first()
    )


def find_subtopic(db: Session, topic_id: int, title: str) -> Optional[SubtopicModel]:
    return (
        db.query(SubtopicModel)
        .filter(SubtopicModel.topic_id == topic_id, SubtopicModel.title == title)
        .first()
    )


def _rebuild_topics(db: Session, course: CourseModel, syllabus: List[Dict]) -> None:
    """Replace the course's Topic/Subtopic rows with the given syllabus (caller commits)"""
    old_topic_ids = [t.id for t in course.topics]
    if old_topic_ids:
        old_subtopic_ids = [
            s.id for s in db.query(SubtopicModel).filter(SubtopicModel.topic_id.in_(old_topic_ids)).all()
        ]
        for model in (QuestionModel, QuestionBankModel):
            db.query(model).filter(model.topic_id.in_(old_topic_ids)).update(
                {model.topic_id: None}, synchronize_session=False
            )
            if old_subtopic_ids:
                db.query(model).filter(model.subtopic_id.in_(old_subtopic_ids)).update(
                    {model.subtopic_id: None}, synchronize_session=False
                )
        db.query(AssessmentTopicModel).filter(AssessmentTopicModel.topic_id.in_(old_topic_ids)).delete(
            synchronize_session=False
        )
        course.topics.clear()
        db.flush()

    for index, item in enumerate(syllabus):
        topic = TopicModel(
            course_id=course.id,
            title=item["topic"],
            order_index=index,
            bloom_level=item.get("bloom_level"),
        )
        for st_index, st in enumerate(item.get("subtopics") or []):
            if isinstance(st, dict):
                title, bloom = st.get("subtopic"), st.get("bloom_level")
            else:
                title, bloom = st, None
            if not title:
                continue
            topic.subtopics.append(SubtopicModel(title=title, order_index=st_index, bloom_level=bloom))
        course.topics.append(topic)

    logger.info(f"Rebuilt {len(syllabus)} topics for course {course.id}")
