import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class CourseSearchService:
    """
    Keyword search over indexed course-material chunks, held in process memory.

    Each chunk is a dict with ``id``, ``course_id``, ``content`` and
    ``metadata``. Re-indexing a chunk id replaces the previous chunk.
    """

    def __init__(self):
        self._documents: Dict[int, Dict[str, Dict]] = {}

    def index_document(self, chunks: List[Dict]) -> bool:
        for chunk in chunks:
            course_docs = self._documents.setdefault(chunk["course_id"], {})
            course_docs[chunk["id"]] = chunk
        logger.info(f"Indexed {len(chunks)} document chunks")
        return True

    def search_similar(self, query: str, course_id: Optional[int] = None, top_k: int = 5) -> List[Dict]:
        if course_id is not None:
            candidates = list(self._documents.get(course_id, {}).values())
        else:
            candidates = [c for docs in self._documents.values() for c in docs.values()]

        words = [w for w in query.lower().split(" ") if len(w) > 3]
        results = []
        for chunk in candidates:
            content = chunk["content"].lower()
            matches = sum(1 for w in words if w in content)
            if matches > 0:
                results.append(
                    {
                        "id": chunk["id"],
                        "content": chunk["content"],
                        "score": round(matches * 0.2, 4),
                        "metadata": chunk.get("metadata", {}),
                    }
                )

        results.sort(key=lambda r: r["score"], reverse=True)
        logger.debug(f"Search for {query!r} matched {len(results)} chunks")
        return results[:top_k]

    def delete_course_documents(self, course_id: int) -> bool:
        self._documents.pop(course_id, None)
        return True
