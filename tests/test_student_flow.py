import pytest

from conftest import SAMPLE_SYLLABUS, create_assessment, create_course, register, auth_headers

GOOD_ESSAY = "Abstraction lets teams reason about systems without every detail in view."


@pytest.fixture
def published(client, instructor, student):
    """A published assessment in a course the student is enrolled in."""
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS, publish=True)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]
    client.put(f"/api/assessments/{assessment['id']}/publish", headers=instructor["headers"])
    assert client.post(f"/api/courses/{course['id']}/enroll", headers=student["headers"]).status_code == 201

    questions = client.get(f"/api/assessments/{assessment['id']}", headers=instructor["headers"]).json()["questions"]
    answer_key = {
        q["id"]: {
            "type": q["question_type"],
            "correct": [o["id"] for o in q["options"] if o["is_correct"]],
            "wrong": [o["id"] for o in q["options"] if not o["is_correct"]],
        }
        for q in questions
    }
    return {"course": course, "assessment": assessment, "key": answer_key}


def _start(client, student, assessment_id):
    resp = client.post(f"/api/student/assessments/{assessment_id}/start", headers=student["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()["attempt_id"]


def _correct_payload(question_id, key):
    entry = key[question_id]
    if entry["type"] == "SUBJECTIVE":
        return {"question_id": question_id, "answer_text": GOOD_ESSAY}
    return {"question_id": question_id, "selected_option_ids": entry["correct"]}


def test_start_requires_published_and_enrollment(client, instructor, student):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS, publish=True)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]

    resp = client.post(f"/api/student/assessments/{assessment['id']}/start", headers=student["headers"])
    assert resp.status_code == 403
    assert resp.json()["error"] == "Assessment is not available for students"

    client.put(f"/api/assessments/{assessment['id']}/publish", headers=instructor["headers"])
    resp = client.post(f"/api/student/assessments/{assessment['id']}/start", headers=student["headers"])
    assert resp.status_code == 403
    assert resp.json()["error"] == "Student enrollment not found for this course"

    resp = client.post(f"/api/student/assessments/{assessment['id']}/start", headers=instructor["headers"])
    assert resp.status_code == 403

    resp = client.post("/api/student/assessments/9999/start", headers=student["headers"])
    assert resp.status_code == 404


def test_adaptive_attempt_until_complete(client, student, published):
    assessment_id = published["assessment"]["id"]
    key = published["key"]
    attempt_id = _start(client, student, assessment_id)
    base = f"/api/student/assessments/{assessment_id}/attempts/{attempt_id}"

    resp = client.get(f"{base}/next-question", headers=student["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_complete"] is False
    assert body["total_questions"] == 4
    question = body["question"]
    assert "is_correct" not in (question["options"] or [{}])[0]

    seen = []
    while question is not None:
        seen.append(question["id"])
        resp = client.post(f"{base}/submit-answer", json=_correct_payload(question["id"], key), headers=student["headers"])
        assert resp.status_code == 200, resp.text
        result = resp.json()
        assert result["is_correct"] is True
        assert result["is_pending_evaluation"] is False
        question = result["next_question"]
        assert result["is_complete"] is (question is None)

    assert sorted(seen) == sorted(key)

    resp = client.get(f"{base}/next-question", headers=student["headers"])
    assert resp.json() == {"question": None, "is_complete": True, "message": "All questions have been answered"}

    resp = client.post(f"{base}/submit-answer", json=_correct_payload(seen[0], key), headers=student["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Assessment attempt is already completed"

    results = client.get(f"/api/student/assessments/{assessment_id}/results/{attempt_id}", headers=student["headers"]).json()
    assert results["attempt"]["is_completed"] is True
    assert results["results"]["percentage"] == 100
    assert results["results"]["max_points"] == 9.0
    assert results["results"]["correct_count"] == 4


def test_submit_answer_rejections(client, instructor, student, published):
    assessment_id = published["assessment"]["id"]
    key = published["key"]
    attempt_id = _start(client, student, assessment_id)
    base = f"/api/student/assessments/{assessment_id}/attempts/{attempt_id}"
    first_id = next(iter(key))

    resp = client.post(f"{base}/submit-answer", json={"question_id": 99999}, headers=student["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Question does not belong to this assessment"

    assert client.post(f"{base}/submit-answer", json=_correct_payload(first_id, key), headers=student["headers"]).status_code == 200
    resp = client.post(f"{base}/submit-answer", json=_correct_payload(first_id, key), headers=student["headers"])
    assert resp.status_code == 400

    intruder = register(client, "intruder@example.com", "student")
    resp = client.get(f"{base}/next-question", headers=auth_headers(intruder["token"]))
    assert resp.status_code == 403
    assert resp.json()["error"] == "Access denied"


def test_bulk_submit_and_history(client, student, published):
    assessment_id = published["assessment"]["id"]
    key = published["key"]
    attempt_id = _start(client, student, assessment_id)

    mcq_ids = [qid for qid, entry in key.items() if entry["type"] == "MCQ"]
    answers = [
        {"question_id": mcq_ids[0], "selected_option_ids": key[mcq_ids[0]]["correct"]},
        {"question_id": mcq_ids[1], "selected_option_ids": key[mcq_ids[1]]["wrong"][:1]},
        {"question_id": 99999, "selected_option_ids": [1]},
    ]
    resp = client.post(
        f"/api/student/assessments/{assessment_id}/submit",
        json={"attempt_id": attempt_id, "answers": answers},
        headers=student["headers"],
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["results"]["correct_count"] == 1
    assert body["results"]["total_count"] == 4
    assert body["results"]["total_points"] == 1.0
    assert body["results"]["percentage"] == 11
    assert len(body["answers"]) == 2
    assert "is_correct" in body["questions"][0]["options"][0]

    resp = client.post(
        f"/api/student/assessments/{assessment_id}/submit",
        json={"attempt_id": attempt_id, "answers": answers},
        headers=student["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Assessment attempt is already completed"

    second = _start(client, student, assessment_id)
    history = client.get(f"/api/student/assessments/{assessment_id}/attempts", headers=student["headers"]).json()["attempts"]
    assert {a["id"] for a in history} == {attempt_id, second}


def test_results_of_another_student_are_hidden(client, student, published):
    assessment_id = published["assessment"]["id"]
    attempt_id = _start(client, student, assessment_id)

    intruder = register(client, "intruder@example.com", "student")
    resp = client.get(
        f"/api/student/assessments/{assessment_id}/results/{attempt_id}",
        headers=auth_headers(intruder["token"]),
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Access denied to this attempt"

    resp = client.get(f"/api/student/assessments/{assessment_id}/results/99999", headers=student["headers"])
    assert resp.status_code == 404
    assert resp.json()["error"] == "Attempt not found"


def test_submit_rejected_once_unpublished(client, instructor, student, published):
    assessment_id = published["assessment"]["id"]
    attempt_id = _start(client, student, assessment_id)
    client.put(f"/api/assessments/{assessment_id}/unpublish", headers=instructor["headers"])

    resp = client.post(
        f"/api/student/assessments/{assessment_id}/submit",
        json={"attempt_id": attempt_id, "answers": []},
        headers=student["headers"],
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Assessment is not available for students"

    history = client.get(f"/api/student/assessments/{assessment_id}/attempts", headers=student["headers"]).json()["attempts"]
    assert history[0]["is_completed"] is False
