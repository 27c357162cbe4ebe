"""Canned AI output used when no LLM is configured or a call fails."""

from typing import Dict, List

from doodle.infrastructure.constants import DIFFICULTIES, HARD, MCQ, MSQ, SUBJECTIVE, EASY, POINTS_BY_TYPE


def mock_syllabus(document_text: str) -> List[Dict]:
    has_intro = "introduction" in (document_text or "").lower()
    return [
        {
            "topic": "Introduction" if has_intro else "Course Overview",
            "bloom_level": "REMEMBER",
            "subtopics": [
                "Course objectives",
                {"subtopic": "Prerequisites", "bloom_level": "UNDERSTAND"},
                "Learning outcomes",
            ],
        },
        {
            "topic": "Core Concepts",
            "bloom_level": "UNDERSTAND",
            "subtopics": [
                "Fundamental principles",
                {"subtopic": "Key terminology", "bloom_level": "REMEMBER"},
                {"subtopic": "Basic operations", "bloom_level": "APPLY"},
            ],
        },
        {
            "topic": "Advanced Topics",
            "bloom_level": "ANALYZE",
            "subtopics": [
                {"subtopic": "Complex applications", "bloom_level": "APPLY"},
                {"subtopic": "Best practices", "bloom_level": "EVALUATE"},
                "Case studies",
            ],
        },
        {
            "topic": "Practical Applications",
            "bloom_level": "APPLY",
            "subtopics": [
                {"subtopic": "Hands-on exercises", "bloom_level": "APPLY"},
                {"subtopic": "Project work", "bloom_level": "CREATE"},
                "Real-world scenarios",
            ],
        },
        {
            "topic": "Assessment & Review",
            "bloom_level": "EVALUATE",
            "subtopics": [
                "Review sessions",
                {"subtopic": "Practice tests", "bloom_level": "ANALYZE"},
                "Final assessment",
            ],
        },
    ]


def mock_legacy_questions(topics: List[str], count: int) -> List[Dict]:
    types = ["mcq", "short-answer", "true-false"]
    difficulties = ["easy", "medium", "hard"]
    questions = []
    for i in range(count):
        qtype = types[i % len(types)]
        topic = topics[i % len(topics)] if topics else "General"
        if qtype == "mcq":
            correct = "Option A"
        elif qtype == "true-false":
            correct = "True"
        else:
            correct = "Sample answer"
        questions.append(
            {
                "id": f"q{i + 1}",
                "type": qtype,
                "question": f"Sample {qtype} question about {topic}?",
                "options": ["Option A", "Option B", "Option C", "Option D"] if qtype == "mcq" else None,
                "correct_answer": correct,
                "difficulty": difficulties[i % len(difficulties)],
                "topic": topic,
            }
        )
    return questions


def mock_assessment_questions(subtopics: List[Dict]) -> List[Dict]:
    questions: List[Dict] = []

    for st in subtopics:
        name = st["subtopic"]
        base = {"topic_title": st["topic_title"], "subtopic": name}

        for i in range(st.get("mcq_count", 0)):
            questions.append(
                {
                    **base,
                    "question_type": MCQ,
                    "question_text": f"[Mock MCQ {i + 1}] What is a key concept in {name}?",
                    "difficulty": DIFFICULTIES[i % 3],
                    "bloom_level": ["REMEMBER", "UNDERSTAND", "APPLY"][i % 3],
                    "options": [
                        {"label": "A", "text": "Correct answer for this concept", "is_correct": True},
                        {"label": "B", "text": "Incorrect option 1", "is_correct": False},
                        {"label": "C", "text": "Incorrect option 2", "is_correct": False},
                        {"label": "D", "text": "Incorrect option 3", "is_correct": False},
                    ],
                    "explanation": f"This tests understanding of {name}",
                    "points": POINTS_BY_TYPE[MCQ],
                }
            )

        for i in range(st.get("msq_count", 0)):
            questions.append(
                {
                    **base,
                    "question_type": MSQ,
                    "question_text": f"[Mock MSQ {i + 1}] Which of the following are true about {name}? (Select all that apply)",
                    "difficulty": DIFFICULTIES[(i + 1) % 3],
                    "bloom_level": ["ANALYZE", "EVALUATE", "APPLY"][(i + 1) % 3],
                    "options": [
                        {"label": "A", "text": "First correct statement", "is_correct": True},
                        {"label": "B", "text": "Second correct statement", "is_correct": True},
                        {"label": "C", "text": "Incorrect statement", "is_correct": False},
                        {"label": "D", "text": "Third correct statement", "is_correct": True},
                        {"label": "E", "text": "Another incorrect statement", "is_correct": False},
                    ],
                    "explanation": f"Multiple concepts from {name} are tested here",
                    "points": POINTS_BY_TYPE[MSQ],
                }
            )

        for i in range(st.get("subjective_count", 0)):
            questions.append(
                {
                    **base,
                    "question_type": SUBJECTIVE,
                    "question_text": (
                        f"[Mock Subjective {i + 1}] Explain the importance of {name} "
                        "in modern software development. Provide examples."
                    ),
                    "difficulty": HARD,
                    "bloom_level": ["EVALUATE", "CREATE", "ANALYZE"][i % 3],
                    "options": [],
                    "explanation": (
                        "Look for clear explanations, practical examples, and understanding "
                        f"of core concepts in {name}"
                    ),
                    "points": POINTS_BY_TYPE[SUBJECTIVE],
                }
            )

    return questions


def mock_challenge_question(topic_title: str, subtopic: str) -> Dict:
    return {
        "question_type": MCQ,
        "question_text": f"[Mock Challenge] Advanced application question related to: {subtopic}",
        "topic_title": topic_title,
        "subtopic": subtopic,
        "difficulty": HARD,
        "options": [
            {"label": "A", "text": "Advanced option A", "is_correct": True},
            {"label": "B", "text": "Advanced option B", "is_correct": False},
            {"label": "C", "text": "Advanced option C", "is_correct": False},
            {"label": "D", "text": "Advanced option D", "is_correct": False},
        ],
        "explanation": "This challenge question tests deeper understanding of advanced concepts.",
        "points": 2.0,
    }


def mock_practice_question(topic_title: str, subtopic: str) -> Dict:
    return {
        "question_type": MCQ,
        "question_text": f"[Mock Practice] Basic reinforcement question for: {subtopic}",
        "topic_title": topic_title,
        "subtopic": subtopic,
        "difficulty": EASY,
        "options": [
            {"label": "A", "text": "Basic option A", "is_correct": False},
            {"label": "B", "text": "Basic option B", "is_correct": True},
            {"label": "C", "text": "Basic option C", "is_correct": False},
            {"label": "D", "text": "Basic option D", "is_correct": False},
        ],
        "explanation": "This practice question helps reinforce basic understanding.",
        "points": 1.0,
    }


def mock_personalized_feedback(is_correct: bool, topic_title: str, subtopic: str) -> Dict:
    opener = "Great job!" if is_correct else "Here's what to focus on:"
    return {
        "explanation": f"[Mock Feedback] {opener} This question tests understanding of {subtopic}.",
        "subtopic_recommendations": [
            f"{subtopic} Fundamentals",
            f"{topic_title} Basics",
            "Related Concepts",
        ],
        "study_tips": [
            "Review the course materials",
            "Practice with similar problems",
            "Ask questions if unclear",
        ],
    }


def mock_question_feedback(is_correct: bool) -> Dict:
    if is_correct:
        detail = "Great job! You demonstrated good understanding of this concept."
    else:
        detail = "Let's review the key concepts to help you understand this better."
    return {
        "explanation": f"[Mock Analysis] Your answer was {'correct' if is_correct else 'incorrect'}. {detail}",
        "improvement_tips": [
            "Review the fundamental concepts",
            "Practice similar problems",
            "Focus on understanding the underlying principles",
        ],
        "related_concepts": [
            "Basic Concepts",
            "Fundamental Principles",
            "Core Knowledge Areas",
        ],
    }


def mock_recommendations() -> List[Dict]:
    return [
        {
            "topic": "Data Structures",
            "reason": "Performance analysis shows this area needs improvement (score: 65%)",
            "resources": [
                "Review linked lists and trees",
                "Complete practice problems",
                "Watch visualization videos",
            ],
            "priority": "high",
        },
        {
            "topic": "Algorithm Complexity",
            "reason": "Good understanding but could benefit from more practice (score: 78%)",
            "resources": [
                "Study Big O notation examples",
                "Practice time complexity analysis",
                "Read recommended textbook chapters",
            ],
            "priority": "medium",
        },
        {
            "topic": "System Design",
            "reason": "Strong performance, continue building on this foundation (score: 92%)",
            "resources": [
                "Explore advanced patterns",
                "Read case studies",
                "Attempt design challenges",
            ],
            "priority": "low",
        },
    ]
