import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.documents.document_parser import chunk_text, mime_type_for, parse_document
from doodle.infrastructure.repositories.course_repo_impl import get_latest_course_file, update_course
from doodle.infrastructure.search.search_service import CourseSearchService
from doodle.infrastructure.storage.file_storage import FileStorageService

logger = logging.getLogger(__name__)


class SyllabusUseCase:
    """
    Turns a course's uploaded material (or pasted text) into a stored syllabus
    and indexes the material for keyword search.
    """

    def __init__(
        self,
        db: Session,
        ai_service: CourseAIService,
        storage: FileStorageService,
        search: CourseSearchService,
    ):
        self.db = db
        self._ai = ai_service
        self._storage = storage
        self._search = search

    def extract_course_text(self, course) -> str:
        """Read and parse the most recently uploaded file of the course."""
        latest = get_latest_course_file(self.db, course.id)
        if latest:
            blob_name, file_name = latest.blob_name, latest.file_name
        elif course.file_url:
            blob_name = FileStorageService.blob_name_from_url(course.file_url)
            file_name = course.file_name or blob_name
        else:
            return ""

        logger.info(f"Extracting text from {file_name} for course {course.id}")
        content = self._storage.read(blob_name)
        return parse_document(content, mime_type_for(file_name))

    def generate(self, course, *, document_text: Optional[str] = None, update_existing: bool = False) -> Dict:
        text = document_text
        if not text:
            try:
                text = self.extract_course_text(course)
            except (OSError, ValueError) as e:
                logger.error(f"Text extraction failed for course {course.id}: {e}", exc_info=True)
                raise ValueError("Failed to extract text from uploaded file. Please try uploading again.")

        if not text or not text.strip():
            raise ValueError("No content to analyze. Please upload a file or provide text.")

        existing: List[Dict] = course.syllabus or []
        is_update = bool(update_existing and existing)
        if is_update:
            syllabus = self._ai.update_syllabus(text, existing)
        else:
            syllabus = self._ai.generate_syllabus(text)

        update_course(self.db, course, syllabus=syllabus)
        self._index(course.id, text)

        logger.info(f"{'Updated' if is_update else 'Generated'} syllabus for course {course.id}")
        return {"syllabus": syllabus, "is_update": is_update}

    def _index(self, course_id: int, text: str) -> None:
        chunks = [
            {
                "id": f"{course_id}-chunk-{i}",
                "course_id": course_id,
                "content": chunk,
                "metadata": {"chunk_index": i},
            }
            for i, chunk in enumerate(chunk_text(text))
        ]
        self._search.index_document(chunks)
