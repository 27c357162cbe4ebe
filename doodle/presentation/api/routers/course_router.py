import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from doodle.infrastructure import settings
from doodle.infrastructure.ai.ai_service import normalize_syllabus
from doodle.infrastructure.constants import ROLE_INSTRUCTOR
from doodle.infrastructure.documents.document_parser import ALLOWED_MIME_TYPES, mime_type_for
from doodle.infrastructure.repositories.course_repo_impl import (
    add_course_file,
    clear_legacy_file,
    create_course,
    delete_course,
    delete_course_file,
    enroll_student,
    get_course_by_id,
    get_course_file,
    list_all_courses,
    list_enrolled_courses,
    list_instructor_courses,
    set_course_published,
    unenroll_student,
    update_course,
)
from doodle.infrastructure.search.search_service import CourseSearchService
from doodle.infrastructure.storage.file_storage import FileStorageService, format_file_size
from doodle.presentation.dependencies import (
    get_current_user,
    get_db,
    get_search_service,
    get_storage,
    instructor_required,
    student_required,
)
from doodle.presentation.errors import ServiceError
from doodle.presentation.schemas.course_schema import (
    CourseCreate,
    CourseFileInfo,
    CourseFileOut,
    CourseOut,
    CourseUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["Courses"])

ALLOWED_EXTENSIONS = {".pdf", ".doc", ".docx"}


def _load_course(db: Session, course_id: int):
    try:
        return get_course_by_id(db, course_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _owned_course(db: Session, course_id: int, user: dict, verb: str):
    course = _load_course(db, course_id)
    if course.instructor_id != user["user_id"]:
        logger.warning(f"User {user['user_id']} tried to {verb} course {course_id} they do not own")
        raise HTTPException(status_code=403, detail=f"You can only {verb} your own courses")
    return course


# --------------------------------------------------
# Course CRUD
# --------------------------------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
def add_course(
    payload: CourseCreate,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
):
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=400, detail="Course title is required")
    try:
        course = create_course(db, instructor["user_id"], payload.title.strip(), payload.description)
        return {"message": "Course created successfully", "course": CourseOut.model_validate(course)}
    except Exception as e:
        logger.error(f"Error creating course: {e}", exc_info=True)
        raise ServiceError("Failed to create course", e)


@router.get("")
def list_my_courses(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    if current_user["role"] == ROLE_INSTRUCTOR:
        courses = list_instructor_courses(db, current_user["user_id"])
    else:
        courses = list_enrolled_courses(db, current_user["user_id"])
    return {"courses": [CourseOut.model_validate(c) for c in courses]}


@router.get("/all")
def list_every_course(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    courses = list_all_courses(db, published_only=current_user["role"] != ROLE_INSTRUCTOR)
    return {"courses": [CourseOut.model_validate(c) for c in courses]}


@router.get("/{course_id}")
def get_course(course_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    return {"course": CourseOut.model_validate(_load_course(db, course_id))}


@router.put("/{course_id}")
def modify_course(
    course_id: int,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
):
    course = _owned_course(db, course_id, instructor, "update")
    try:
        syllabus = normalize_syllabus(payload.syllabus) if payload.syllabus is not None else None
        course = update_course(
            db,
            course,
            title=payload.title,
            description=payload.description,
            syllabus=syllabus,
        )
        return {"message": "Course updated successfully", "course": CourseOut.model_validate(course)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating course {course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to update course", e)


@router.delete("/{course_id}")
def remove_course(
    course_id: int,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    storage: FileStorageService = Depends(get_storage),
    search: CourseSearchService = Depends(get_search_service),
):
    course = _owned_course(db, course_id, instructor, "delete")
    try:
        blob_names = delete_course(db, course)
    except Exception as e:
        logger.error(f"Error deleting course {course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to delete course", e)

    for blob_name in blob_names:
        storage.delete(blob_name)
    search.delete_course_documents(course_id)
    return {"message": "Course deleted successfully"}


# --------------------------------------------------
# Publishing
# --------------------------------------------------

@router.put("/{course_id}/publish")
def publish_course(course_id: int, db: Session = Depends(get_db), instructor: dict = Depends(instructor_required)):
    course = _owned_course(db, course_id, instructor, "publish")
    try:
        course = set_course_published(db, course, True)
        return {"message": "Course published successfully", "course": CourseOut.model_validate(course)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{course_id}/unpublish")
def unpublish_course(course_id: int, db: Session = Depends(get_db), instructor: dict = Depends(instructor_required)):
    course = _owned_course(db, course_id, instructor, "unpublish")
    course = set_course_published(db, course, False)
    return {"message": "Course unpublished successfully", "course": CourseOut.model_validate(course)}


# --------------------------------------------------
# Enrollment
# --------------------------------------------------

@router.post("/{course_id}/enroll", status_code=status.HTTP_201_CREATED)
def enroll(course_id: int, db: Session = Depends(get_db), student: dict = Depends(student_required)):
    course = _load_course(db, course_id)
    try:
        enrollment = enroll_student(db, course, student["user_id"])
        return {
            "message": "Successfully enrolled in course",
            "enrollment": {
                "id": enrollment.id,
                "course_id": enrollment.course_id,
                "student_id": enrollment.student_id,
                "enrolled_at": enrollment.enrolled_at,
            },
        }
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{course_id}/enroll")
def unenroll(course_id: int, db: Session = Depends(get_db), student: dict = Depends(student_required)):
    try:
        unenroll_student(db, course_id, student["user_id"])
        return {"message": "Successfully unenrolled from course"}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --------------------------------------------------
# Files
# --------------------------------------------------

@router.post("/{course_id}/upload")
async def upload_course_file(
    course_id: int,
    file: UploadFile = File(None),
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    storage: FileStorageService = Depends(get_storage),
):
    course = _owned_course(db, course_id, instructor, "upload files to")
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    extension = os.path.splitext(file.filename)[1].lower()
    if file.content_type not in ALLOWED_MIME_TYPES and extension not in ALLOWED_EXTENSIONS:
        logger.warning(f"Rejected upload {file.filename} with type {file.content_type}")
        raise HTTPException(status_code=400, detail="Invalid file type. Only PDF, DOC, and DOCX files are allowed.")

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File too large. Maximum size is 10MB")

    try:
        stored = storage.upload(content, file.filename)
        course_file = add_course_file(
            db,
            course,
            file_name=file.filename,
            file_url=stored["url"],
            blob_name=stored["blob_name"],
            uploaded_by=instructor["user_id"],
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error uploading file to course {course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to upload file", e)

    return {
        "message": "File uploaded successfully",
        "course": CourseOut.model_validate(course),
        "file": CourseFileOut(
            id=course_file.id,
            name=course_file.file_name,
            url=course_file.file_url,
            uploaded_at=course_file.uploaded_at,
        ),
    }


@router.get("/{course_id}/files")
def list_course_files(course_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    course = _load_course(db, course_id)
    files = [
        CourseFileOut(id=f.id, name=f.file_name, url=f.file_url, uploaded_at=f.uploaded_at)
        for f in course.files
    ]
    if not files and course.file_url:
        files.append(
            CourseFileOut(
                name=course.file_name or FileStorageService.blob_name_from_url(course.file_url),
                url=course.file_url,
                uploaded_at=course.updated_at,
            )
        )
    return {"files": files}


@router.get("/{course_id}/files/{file_name}/info")
def course_file_info(
    course_id: int,
    file_name: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
    storage: FileStorageService = Depends(get_storage),
):
    course = _load_course(db, course_id)
    course_file = get_course_file(db, course_id, file_name)
    if course_file:
        name, url, blob_name, uploaded_at = (
            course_file.file_name,
            course_file.file_url,
            course_file.blob_name,
            course_file.uploaded_at,
        )
    elif course.file_url and file_name in (course.file_name, FileStorageService.blob_name_from_url(course.file_url)):
        name, url, uploaded_at = course.file_name or file_name, course.file_url, course.updated_at
        blob_name = FileStorageService.blob_name_from_url(course.file_url)
    else:
        raise HTTPException(status_code=404, detail="File not found")

    size = storage.size(blob_name)
    return CourseFileInfo(
        name=name,
        url=url,
        size=size,
        size_formatted=format_file_size(size),
        mime_type=mime_type_for(name),
        uploaded_at=uploaded_at,
    )


@router.delete("/{course_id}/files/{file_name}")
def remove_course_file(
    course_id: int,
    file_name: str,
    db: Session = Depends(get_db),
    instructor: dict = Depends(instructor_required),
    storage: FileStorageService = Depends(get_storage),
):
    course = _owned_course(db, course_id, instructor, "delete files from")
    course_file = get_course_file(db, course_id, file_name)
    try:
        if course_file:
            blob_name = course_file.blob_name
            delete_course_file(db, course, course_file)
        elif course.file_url and file_name in (course.file_name, FileStorageService.blob_name_from_url(course.file_url)):
            blob_name = FileStorageService.blob_name_from_url(course.file_url)
            clear_legacy_file(db, course)
        else:
            raise HTTPException(status_code=404, detail="File not found in this course")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting file {file_name} from course {course_id}: {e}", exc_info=True)
        raise ServiceError("Failed to delete file", e)

    storage.delete(blob_name)
    return {"message": "File deleted successfully"}
