from conftest import SAMPLE_SYLLABUS, create_assessment, create_course

PHASE_2 = "Analytics feature coming in Phase 2"


def test_course_overview(client, instructor, other_instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]

    resp = client.get(f"/api/analytics/overview/{course['id']}", headers=instructor["headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == PHASE_2
    analytics = body["analytics"]
    assert analytics["total_assessments"] == 1
    assert analytics["total_attempts"] == 0
    assert analytics["assessments"][0]["id"] == assessment["id"]
    assert analytics["assessments"][0]["total_questions"] == 4

    resp = client.get(f"/api/analytics/overview/{course['id']}", headers=other_instructor["headers"])
    assert resp.status_code == 403

    assert client.get("/api/analytics/overview/9999", headers=instructor["headers"]).status_code == 404


def test_assessment_and_topic_analytics(client, instructor):
    course = create_course(client, instructor, syllabus=SAMPLE_SYLLABUS)
    assessment = create_assessment(client, instructor, course["id"])["assessment"]

    body = client.get(f"/api/analytics/assessment/{assessment['id']}", headers=instructor["headers"]).json()
    assert body["analytics"]["assessment_id"] == assessment["id"]
    assert body["analytics"]["question_analytics"] == []

    body = client.get(f"/api/analytics/topics/{course['id']}", headers=instructor["headers"]).json()
    assert body["message"] == PHASE_2
    assert body["analytics"]["course_title"] == "Cloud Computing"

    resp = client.get("/api/analytics/assessment/9999", headers=instructor["headers"])
    assert resp.status_code == 404


def test_student_analytics_only_for_self(client, student, instructor):
    resp = client.get(f"/api/analytics/student/{student['id']}", headers=student["headers"])
    assert resp.status_code == 200
    assert resp.json()["analytics"]["student_id"] == student["id"]

    resp = client.get(f"/api/analytics/student/{student['id'] + 100}", headers=student["headers"])
    assert resp.status_code == 403

    resp = client.get(f"/api/analytics/student/{student['id']}", params={"course_id": 3}, headers=instructor["headers"])
    assert resp.status_code == 200
    assert resp.json()["analytics"]["course_id"] == 3
