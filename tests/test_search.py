from conftest import SAMPLE_SYLLABUS, create_course
from doodle.infrastructure.search.search_service import CourseSearchService


def _chunk(chunk_id, course_id, content):
    return {"id": chunk_id, "course_id": course_id, "content": content, "metadata": {"source": "test"}}


def test_search_scores_by_matching_words():
    search = CourseSearchService()
    search.index_document(
        [
            _chunk("1-chunk-0", 1, "Virtual machines run on hypervisors."),
            _chunk("1-chunk-1", 1, "Containers share the host kernel, unlike virtual machines."),
            _chunk("2-chunk-0", 2, "Serverless functions scale to zero."),
        ]
    )

    results = search.search_similar("containers versus virtual machines", course_id=1)
    assert [r["id"] for r in results] == ["1-chunk-1", "1-chunk-0"]
    assert results[0]["score"] == 0.6
    assert results[1]["score"] == 0.4
    assert results[0]["metadata"] == {"source": "test"}


def test_search_ignores_short_words_and_respects_top_k():
    search = CourseSearchService()
    search.index_document([_chunk(f"1-chunk-{i}", 1, f"Cloud storage note {i}") for i in range(8)])

    assert search.search_similar("the of and", course_id=1) == []
    assert len(search.search_similar("cloud storage")) == 5
    assert len(search.search_similar("cloud storage", top_k=3)) == 3


def test_delete_course_documents():
    search = CourseSearchService()
    search.index_document([_chunk("3-chunk-0", 3, "Load balancers distribute traffic")])
    search.delete_course_documents(3)
    assert search.search_similar("balancers traffic", course_id=3) == []


def test_search_endpoint(client, instructor, student, search_service):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    search_service.index_document([_chunk(f"{course['id']}-chunk-0", course["id"], "Elastic scaling of compute")])

    resp = client.post("/api/ai/search", json={"query": "elastic compute", "course_id": course["id"]}, headers=student["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["query"] == "elastic compute"
    assert body["results"][0]["score"] == 0.4

    resp = client.post("/api/ai/search", json={"query": "  "}, headers=student["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Search query is required"
