from conftest import SAMPLE_SYLLABUS, create_assessment, create_course


def test_create_assessment_with_mock_questions(client, instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    core_topic_id = course["topics"][0]["id"]

    body = create_assessment(client, instructor, course["id"], time_limit=30, passing_score=60)

    assert body["questions_generated"] == 4
    assessment = body["assessment"]
    assert assessment["total_questions"] == 4
    assert (assessment["mcq_count"], assessment["msq_count"], assessment["subjective_count"]) == (2, 1, 1)
    assert assessment["time_limit_minutes"] == 30
    assert assessment["passing_score"] == 60
    assert assessment["topic_ids"] == [core_topic_id]

    detail = client.get(f"/api/assessments/{assessment['id']}", headers=instructor["headers"]).json()
    questions = detail["questions"]
    assert [q["question_number"] for q in questions] == [1, 2, 3, 4]
    assert all(q["topic_id"] == core_topic_id for q in questions)
    key_terms = course["topics"][0]["subtopics"][1]
    assert all(q["subtopic_id"] == key_terms["id"] for q in questions)
    assert len(questions[0]["options"]) == 4
    assert sum(o["is_correct"] for o in questions[0]["options"]) == 1
    assert questions[3]["options"] == []


def test_create_assessment_validation(client, instructor, other_instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)

    resp = client.post(
        "/api/assessments",
        json={"course_id": course["id"], "title": "Quiz", "subtopics": []},
        headers=instructor["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: course_id, title, subtopics"

    resp = client.post(
        "/api/assessments",
        json={"course_id": course["id"], "title": "Quiz", "subtopics": [{"topic_title": "Core Concepts", "subtopic": "Key terminology", "mcq_count": 1}]},
        headers=other_instructor["headers"],
    )
    assert resp.status_code == 403

    resp = client.post(
        "/api/assessments",
        json={"title": "Quiz", "subtopics": [{"topic_title": "Core Concepts", "subtopic": "Key terminology"}]},
        headers=instructor["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: course_id, title, subtopics"

    resp = client.post("/api/assessments", json={"course_id": "not-a-number", "title": "Quiz"}, headers=instructor["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"
    assert resp.json()["details"]


def test_unknown_titles_keep_null_topic_ids(client, instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    body = create_assessment(
        client,
        instructor,
        course["id"],
        subtopics=[{"topic_title": "Nowhere", "subtopic": "Nothing", "mcq_count": 1}],
    )
    assert body["assessment"]["topic_ids"] == []
    detail = client.get(f"/api/assessments/{body['assessment']['id']}", headers=instructor["headers"]).json()
    assert detail["questions"][0]["topic_id"] is None


def test_publish_requires_questions(client, instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    empty = create_assessment(
        client,
        instructor,
        course["id"],
        subtopics=[{"topic_title": "Core Concepts", "subtopic": "Key terminology"}],
    )["assessment"]
    assert empty["total_questions"] == 0

    resp = client.put(f"/api/assessments/{empty['id']}/publish", headers=instructor["headers"])
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cannot publish assessment without questions"

    full = create_assessment(client, instructor, course["id"])["assessment"]
    resp = client.put(f"/api/assessments/{full['id']}/publish", headers=instructor["headers"])
    assert resp.status_code == 200
    assert resp.json()["assessment"]["is_published"] is True


def test_students_only_see_published(client, instructor, student):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS, publish=True)
    draft = create_assessment(client, instructor, course["id"])["assessment"]
    live = create_assessment(client, instructor, course["id"])["assessment"]
    client.put(f"/api/assessments/{live['id']}/publish", headers=instructor["headers"])

    listed = client.get(f"/api/assessments/course/{course['id']}", headers=student["headers"]).json()["assessments"]
    assert [a["id"] for a in listed] == [live["id"]]

    all_listed = client.get(f"/api/assessments/course/{course['id']}", headers=instructor["headers"]).json()["assessments"]
    assert {a["id"] for a in all_listed} == {draft["id"], live["id"]}

    resp = client.get(f"/api/assessments/{live['id']}", headers=student["headers"])
    assert resp.status_code == 200
    option = resp.json()["questions"][0]["options"][0]
    assert "is_correct" not in option
    assert "explanation" not in resp.json()["questions"][0]

    assert client.get(f"/api/assessments/{draft['id']}", headers=student["headers"]).status_code == 403


def test_update_and_delete(client, instructor, other_instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]

    resp = client.put(
        f"/api/assessments/{assessment['id']}",
        json={"title": "Renamed", "time_limit_minutes": 45},
        headers=instructor["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["assessment"]["title"] == "Renamed"
    assert resp.json()["assessment"]["time_limit_minutes"] == 45

    resp = client.delete(f"/api/assessments/{assessment['id']}", headers=other_instructor["headers"])
    assert resp.status_code == 403

    assert client.delete(f"/api/assessments/{assessment['id']}", headers=instructor["headers"]).status_code == 200
    resp = client.get(f"/api/assessments/{assessment['id']}", headers=instructor["headers"])
    assert resp.status_code == 404
    assert resp.json()["error"] == "Assessment not found"


def test_save_to_bank(client, instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]
    questions = client.get(f"/api/assessments/{assessment['id']}", headers=instructor["headers"]).json()["questions"]

    resp = client.post(
        f"/api/assessments/{assessment['id']}/save-to-bank",
        json={"question_ids": []},
        headers=instructor["headers"],
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing or invalid question_ids array"

    resp = client.post(
        f"/api/assessments/{assessment['id']}/save-to-bank",
        json={"question_ids": [questions[0]["id"], questions[2]["id"], 99999]},
        headers=instructor["headers"],
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["saved_count"] == 2
    assert body["total_requested"] == 3
    saved = body["saved_questions"]
    assert saved[0]["question_text"] == questions[0]["question_text"]
    assert len(saved[1]["options"]) == 5
