import json

import pytest

from conftest import FakeLLM
from doodle.infrastructure.ai.ai_service import CourseAIService, normalize_syllabus
from doodle.infrastructure.ai.json_extraction import extract_json_array, extract_json_object
from doodle.infrastructure.ai.question_generation import AssessmentQuestionGenerator

SUBTOPIC = {
    "topic_title": "Core Concepts",
    "subtopic": "Key terminology",
    "mcq_count": 2,
    "msq_count": 1,
    "subjective_count": 1,
    "bloom_level": "REMEMBER",
}


def _mcq(text="What is IaaS?", correct=0):
    return {
        "question_type": "MCQ",
        "question_text": text,
        "difficulty": "easy",
        "options": [{"label": "X", "text": f"opt {i}", "is_correct": i == correct} for i in range(4)],
        "explanation": "Because.",
    }


# --------------------------------------------------
# JSON extraction
# --------------------------------------------------

def test_extract_array_from_prose_and_fences():
    assert extract_json_array('Sure! Here it is: [{"a": 1}] Hope that helps.') == [{"a": 1}]
    assert extract_json_array('```json\n[1, 2, 3]\n```') == [1, 2, 3]
    with pytest.raises(ValueError):
        extract_json_array("no json here")


def test_extract_object_escapes_raw_newlines():
    raw = '{"explanation": "line one\nline two", "study_tips": []}'
    assert extract_json_object(raw)["explanation"] == "line one\nline two"
    assert extract_json_object('noise {"a": 1} noise') == {"a": 1}
    with pytest.raises(ValueError):
        extract_json_object("[1, 2]")


# --------------------------------------------------
# Question normalization
# --------------------------------------------------

def test_normalize_question_relabels_and_assigns_points():
    question = AssessmentQuestionGenerator.normalize_question(_mcq(), default_bloom="remember")
    assert [o["label"] for o in question["options"]] == ["A", "B", "C", "D"]
    assert question["difficulty"] == "EASY"
    assert question["bloom_level"] == "REMEMBER"
    assert question["points"] == 1.0


def test_normalize_question_accepts_camel_case_and_defaults():
    question = AssessmentQuestionGenerator.normalize_question(
        {"questionType": "subjective", "questionText": "Discuss elasticity.", "difficulty": "extreme"}
    )
    assert question["question_type"] == "SUBJECTIVE"
    assert question["options"] == []
    assert question["difficulty"] == "MEDIUM"
    assert question["bloom_level"] == "UNDERSTAND"
    assert question["points"] == 5.0


@pytest.mark.parametrize(
    "payload",
    [
        {"question_type": "MCQ", "question_text": "Two correct?", "options": [{"text": "a", "is_correct": True}] * 4},
        {"question_type": "MCQ", "question_text": "Three options", "options": [{"text": "a", "is_correct": True}, {"text": "b"}, {"text": "c"}]},
        {"question_type": "MSQ", "question_text": "One correct", "options": [{"text": "a", "is_correct": True}, {"text": "b"}, {"text": "c"}, {"text": "d"}]},
        {"question_type": "ESSAY", "question_text": "Unknown type"},
        {"question_type": "MCQ", "question_text": ""},
    ],
)
def test_normalize_question_rejects_invalid(payload):
    with pytest.raises(ValueError):
        AssessmentQuestionGenerator.normalize_question(payload)


# --------------------------------------------------
# Mock mode
# --------------------------------------------------

def test_mock_syllabus_depends_on_introduction():
    service = CourseAIService()
    assert service.mock_mode
    with_intro = service.generate_syllabus("An Introduction to networking")
    without_intro = service.generate_syllabus("Networking basics")

    assert len(with_intro) == 5
    assert with_intro[0]["topic"] == "Introduction"
    assert without_intro[0]["topic"] == "Course Overview"
    assert [t["topic"] for t in with_intro[1:]] == [
        "Core Concepts",
        "Advanced Topics",
        "Practical Applications",
        "Assessment & Review",
    ]
    assert all(len(t["subtopics"]) == 3 for t in with_intro)


def test_mock_update_appends_to_existing():
    existing = [{"topic": "Existing", "subtopics": ["Kept"]}]
    merged = CourseAIService().update_syllabus("more material", existing)
    assert merged[0] == existing[0]
    assert len(merged) == 6


def test_mock_questions_follow_counts_and_points():
    questions = CourseAIService().generate_questions_for_assessment([SUBTOPIC])
    types = [q["question_type"] for q in questions]
    assert types == ["MCQ", "MCQ", "MSQ", "SUBJECTIVE"]
    assert questions[0]["question_text"] == "[Mock MCQ 1] What is a key concept in Key terminology?"
    assert [q["difficulty"] for q in questions[:2]] == ["EASY", "MEDIUM"]
    assert [q["points"] for q in questions] == [1.0, 1.0, 2.0, 5.0]
    assert all(q["topic_title"] == "Core Concepts" for q in questions)


# --------------------------------------------------
# LLM-backed mode
# --------------------------------------------------

def test_generate_syllabus_parses_llm_output():
    payload = [
        {"topic": "Networking", "bloom_level": "apply", "subtopics": ["TCP", {"subtopic": "UDP", "bloom_level": "ANALYZE"}, {"bloom_level": "X"}]},
        {"subtopics": ["orphan"]},
    ]
    llm = FakeLLM([f"Here you go:\n{json.dumps(payload)}"])
    service = CourseAIService(llm)

    syllabus = service.generate_syllabus("x" * 5000)

    assert syllabus == [
        {"topic": "Networking", "bloom_level": "APPLY", "subtopics": ["TCP", {"subtopic": "UDP", "bloom_level": "ANALYZE"}]}
    ]
    prompt = llm.calls[0]["user_prompt"]
    assert "x" * 3000 in prompt
    assert "x" * 3001 not in prompt


def test_generate_syllabus_falls_back_on_failure():
    service = CourseAIService(FakeLLM(error=RuntimeError("endpoint down")))
    syllabus = service.generate_syllabus("introduction")
    assert syllabus[0]["topic"] == "Introduction"


def test_update_syllabus_keeps_existing_when_unparsable():
    existing = [{"topic": "Existing", "subtopics": []}]
    service = CourseAIService(FakeLLM(["I could not merge that, sorry."]))
    assert service.update_syllabus("new text", existing) == existing


def test_questions_generated_per_subtopic_and_invalid_dropped():
    second = dict(SUBTOPIC, subtopic="Service models", bloom_level=None)
    llm = FakeLLM(
        [
            json.dumps([_mcq(), {"question_type": "MCQ", "question_text": "broken", "options": []}]),
            "```json\n" + json.dumps([_mcq("What is SaaS?", correct=2)]) + "\n```",
        ]
    )
    questions = CourseAIService(llm).generate_questions_for_assessment(
        [SUBTOPIC, second], course_context="Cloud course", quiz_level="PG"
    )

    assert len(llm.calls) == 2
    assert "Postgraduate" in llm.calls[0]["user_prompt"]
    assert [q["question_text"] for q in questions] == ["What is IaaS?", "What is SaaS?"]
    assert questions[0]["bloom_level"] == "REMEMBER"
    assert questions[1]["bloom_level"] == "UNDERSTAND"
    assert questions[1]["subtopic"] == "Service models"
    assert questions[1]["options"][2]["is_correct"] is True


def test_feedback_parsing_and_fallback():
    llm = FakeLLM(['{"explanation": "Close!", "subtopic_recommendations": ["VPCs"], "study_tips": ["Draw it"]}'])
    feedback = CourseAIService(llm).generate_personalized_feedback(
        question_text="q", user_answer="a", correct_answer="b", is_correct=False, topic_title="Networking", subtopic="VPC"
    )
    assert feedback == {"explanation": "Close!", "subtopic_recommendations": ["VPCs"], "study_tips": ["Draw it"]}

    fallback = CourseAIService(FakeLLM(["not json"])).generate_question_feedback(
        question="q", question_type="MCQ", student_answer="a", correct_answer="b", is_correct=True
    )
    assert fallback["explanation"].startswith("[Mock Analysis] Your answer was correct.")
    assert len(fallback["improvement_tips"]) == 3


def test_follow_up_questions():
    llm = FakeLLM([json.dumps(_mcq("Harder one?", correct=1))])
    challenge = CourseAIService(llm).generate_challenge_question(
        original_question="What is IaaS?", topic_title="Core Concepts", subtopic="Key terminology"
    )
    assert challenge["question_text"] == "Harder one?"
    assert challenge["topic_title"] == "Core Concepts"
    assert "MORE DIFFICULT" in llm.calls[0]["user_prompt"]

    practice = CourseAIService().generate_practice_question(
        original_question="What is IaaS?", topic_title="Core Concepts", subtopic="Key terminology"
    )
    assert practice["difficulty"] == "EASY"
    assert practice["question_text"].startswith("[Mock Practice]")


def test_normalize_syllabus_rejects_non_list():
    with pytest.raises(ValueError):
        normalize_syllabus({"topic": "x"})


def test_no_token_means_mock_mode(monkeypatch):
    from doodle.infrastructure.ai.llm_client import create_llm_client

    monkeypatch.setattr("doodle.infrastructure.settings.HF_TOKEN", None)
    assert create_llm_client() is None
    assert CourseAIService(create_llm_client()).mock_mode
