from __future__ import annotations

import json
import logging
from typing import Dict, List, Optional

from doodle.infrastructure.constants import BLOOM_LEVELS, DEFAULT_DIFFICULTY_DISTRIBUTION

from . import mock_content
from .json_extraction import extract_json_array, extract_json_object
from .llm_client import LLMClient
from .question_generation import AssessmentQuestionGenerator

logger = logging.getLogger(__name__)

SYLLABUS_SOURCE_LIMIT = 3000

BLOOM_GUIDE = """Bloom's Taxonomy Levels (optional suggestions):
- REMEMBER: Recalling facts, concepts
- UNDERSTAND: Explaining ideas or concepts
- APPLY: Using information in new situations
- ANALYZE: Drawing connections among ideas
- EVALUATE: Justifying a stand or decision
- CREATE: Producing new or original work"""

SYLLABUS_SHAPE = """[
  {
    "topic": "Topic Name",
    "bloom_level": "REMEMBER|UNDERSTAND|APPLY|ANALYZE|EVALUATE|CREATE",
    "subtopics": [
      "Subtopic 1",
      {"subtopic": "Subtopic 2", "bloom_level": "APPLY"}
    ]
  }
]"""


def normalize_syllabus(items) -> List[Dict]:
    """
    Keep only well-formed syllabus entries.

    Each entry is ``{"topic": str, "bloom_level"?: str, "subtopics": [str | {"subtopic": str, "bloom_level"?: str}]}``;
    unknown Bloom levels are dropped rather than rejected.
    """
    if not isinstance(items, list):
        raise ValueError("Syllabus must be a list")

    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            continue
        topic = str(item.get("topic") or item.get("title") or "").strip()
        if not topic:
            continue

        entry: Dict = {"topic": topic}
        bloom = str(item.get("bloom_level") or "").upper()
        if bloom in BLOOM_LEVELS:
            entry["bloom_level"] = bloom

        subtopics = []
        for st in item.get("subtopics") or []:
            if isinstance(st, str) and st.strip():
                subtopics.append(st.strip())
            elif isinstance(st, dict):
                title = str(st.get("subtopic") or st.get("title") or "").strip()
                if not title:
                    continue
                st_bloom = str(st.get("bloom_level") or "").upper()
                subtopics.append({"subtopic": title, "bloom_level": st_bloom} if st_bloom in BLOOM_LEVELS else title)
        entry["subtopics"] = subtopics
        cleaned.append(entry)

    return cleaned


class CourseAIService:
    """
    Facade over the LLM for syllabus, question and feedback generation.

    With no LLM client configured every operation returns canned content, and
    any LLM or parsing failure falls back to the same canned content.
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self._llm = llm_client
        self._questions = AssessmentQuestionGenerator(llm_client) if llm_client else None

    @property
    def mock_mode(self) -> bool:
        return self._llm is None

    # ---------------------------
    # Syllabus
    # ---------------------------

    def generate_syllabus(self, document_text: str) -> List[Dict]:
        if self.mock_mode:
            logger.info("Using MOCK syllabus generation")
            return mock_content.mock_syllabus(document_text)

        content = document_text[:SYLLABUS_SOURCE_LIMIT]
        logger.info(f"Generating syllabus from {len(content)} characters")
        prompt = f"""Analyze the following course document and create a structured syllabus with topics and subtopics. You may optionally suggest Bloom's Taxonomy levels, but they will be set by the instructor.

Document:
{content}

Return a JSON array of syllabus items with this structure:
{SYLLABUS_SHAPE}

{BLOOM_GUIDE}

Important: Return ONLY the JSON array, no additional text."""

        try:
            raw = self._llm.generate(
                system_prompt="You are an expert curriculum designer. Return only valid JSON.",
                user_prompt=prompt,
            )
            syllabus = normalize_syllabus(extract_json_array(raw))
            logger.info(f"Generated {len(syllabus)} syllabus items")
            return syllabus
        except Exception as e:
            logger.error(f"Syllabus generation failed, using mock syllabus: {e}", exc_info=True)
            return mock_content.mock_syllabus(document_text)

    def update_syllabus(self, new_document_text: str, existing_syllabus: List[Dict]) -> List[Dict]:
        if self.mock_mode:
            logger.info("Using MOCK syllabus update")
            return list(existing_syllabus) + mock_content.mock_syllabus(new_document_text)

        content = new_document_text[:SYLLABUS_SOURCE_LIMIT]
        prompt = f"""You are updating an existing course syllabus with new material. Analyze the new document content and intelligently merge it with the existing syllabus.

Existing Syllabus:
{json.dumps(existing_syllabus, indent=2)}

New Document Content:
{content}

Instructions:
1. Preserve existing topics that are still relevant
2. Add new topics from the new content
3. Update subtopics within existing topics if new information is provided
4. Remove or mark outdated content if replaced by new material
5. Maintain the same structure and Bloom's taxonomy levels
6. Ensure topics flow logically and don't duplicate

Return a JSON array with the updated syllabus structure:
{SYLLABUS_SHAPE}

Important: Return ONLY the JSON array, no additional text."""

        try:
            raw = self._llm.generate(
                system_prompt=(
                    "You are an expert curriculum designer. Intelligently merge existing and new "
                    "syllabus content. Return only valid JSON."
                ),
                user_prompt=prompt,
            )
        except Exception as e:
            logger.error(f"Syllabus update failed, appending mock syllabus: {e}", exc_info=True)
            return list(existing_syllabus) + mock_content.mock_syllabus(new_document_text)

        try:
            merged = normalize_syllabus(extract_json_array(raw))
        except ValueError as e:
            logger.warning(f"Could not parse merged syllabus, keeping existing one: {e}")
            return list(existing_syllabus)

        logger.info(f"Updated syllabus with {len(merged)} items (was {len(existing_syllabus)})")
        return merged or list(existing_syllabus)

    # ---------------------------
    # Questions
    # ---------------------------

    def generate_questions_for_assessment(
        self,
        subtopics: List[Dict],
        *,
        course_context: Optional[str] = None,
        difficulty_distribution: Optional[Dict] = None,
        quiz_level: str = "UG",
    ) -> List[Dict]:
        if self.mock_mode:
            logger.info("Using MOCK question generation")
            return mock_content.mock_assessment_questions(subtopics)

        distribution = difficulty_distribution or DEFAULT_DIFFICULTY_DISTRIBUTION
        questions: List[Dict] = []
        try:
            for subtopic in subtopics:
                questions.extend(
                    self._questions.generate_for_subtopic(
                        subtopic,
                        course_context=course_context,
                        difficulty_distribution=distribution,
                        quiz_level=quiz_level,
                    )
                )
        except Exception as e:
            logger.error(f"Question generation failed, using mock questions: {e}", exc_info=True)
            return mock_content.mock_assessment_questions(subtopics)

        return questions

    def generate_assessment(self, topics: List[str], question_count: int = 10) -> List[Dict]:
        """Legacy free-form question generation kept for the deprecated endpoint."""
        if self.mock_mode:
            logger.info("Using MOCK assessment generation")
            return mock_content.mock_legacy_questions(topics, question_count)

        prompt = f"""Generate {question_count} assessment questions covering these topics: {', '.join(topics)}.

Create a mix of question types (mcq, short-answer, true-false) with varying difficulty levels.

Return a JSON array with this structure:
[
  {{
    "id": "q1",
    "type": "mcq",
    "question": "Question text?",
    "options": ["A", "B", "C", "D"],
    "correct_answer": "A",
    "difficulty": "medium",
    "topic": "Topic Name"
  }}
]"""
        try:
            raw = self._llm.generate(
                system_prompt="You are an expert educator creating assessment questions. Return only valid JSON.",
                user_prompt=prompt,
            )
            return extract_json_array(raw)
        except Exception as e:
            logger.error(f"Legacy assessment generation failed: {e}", exc_info=True)
            return mock_content.mock_legacy_questions(topics, question_count)

    def generate_challenge_question(self, *, original_question: str, topic_title: str, subtopic: str) -> Dict:
        return self._follow_up("challenge", original_question, topic_title, subtopic)

    def generate_practice_question(self, *, original_question: str, topic_title: str, subtopic: str) -> Dict:
        return self._follow_up("practice", original_question, topic_title, subtopic)

    def _follow_up(self, kind: str, original_question: str, topic_title: str, subtopic: str) -> Dict:
        fallback = (
            mock_content.mock_challenge_question if kind == "challenge" else mock_content.mock_practice_question
        )
        if self.mock_mode:
            logger.info(f"Using MOCK {kind} question generation")
            return fallback(topic_title, subtopic)

        try:
            return self._questions.generate_follow_up(
                kind=kind,
                original_question=original_question,
                topic_title=topic_title,
                subtopic=subtopic,
            )
        except Exception as e:
            logger.error(f"{kind.title()} question generation failed: {e}", exc_info=True)
            return fallback(topic_title, subtopic)

    # ---------------------------
    # Feedback
    # ---------------------------

    def generate_personalized_feedback(
        self,
        *,
        question_text: str,
        user_answer: str,
        correct_answer: str,
        is_correct: bool,
        topic_title: str,
        subtopic: str,
    ) -> Dict:
        if self.mock_mode:
            logger.info("Using MOCK personalized feedback generation")
            return mock_content.mock_personalized_feedback(is_correct, topic_title, subtopic)

        prompt = f"""You are an expert educational tutor. Generate personalized feedback for a student.

Question: {question_text}
Student Answer: {user_answer}
Correct Answer: {correct_answer}
Was Correct: {is_correct}
Topic: {topic_title}
Subtopic: {subtopic}

Generate personalized feedback that includes:
1. A clear explanation of why the answer is correct/incorrect
2. Specific subtopics to review for improvement
3. Study tips for better understanding

Return ONLY a valid JSON object with this exact structure:
{{
  "explanation": "Your answer was incorrect because... Here's the correct approach...",
  "subtopic_recommendations": ["Subtopic 1", "Subtopic 2", "Subtopic 3"],
  "study_tips": ["Study tip 1", "Study tip 2", "Study tip 3"]
}}

Be encouraging and constructive. Return ONLY the JSON object, no markdown, no extra text."""

        try:
            raw = self._llm.generate(
                system_prompt="You are an expert educational tutor. Always return valid JSON objects.",
                user_prompt=prompt,
            )
            data = extract_json_object(raw)
            return {
                "explanation": str(data.get("explanation") or ""),
                "subtopic_recommendations": _string_list(data.get("subtopic_recommendations")),
                "study_tips": _string_list(data.get("study_tips")),
            }
        except Exception as e:
            logger.error(f"Personalized feedback generation failed: {e}", exc_info=True)
            return mock_content.mock_personalized_feedback(is_correct, topic_title, subtopic)

    def generate_question_feedback(
        self,
        *,
        question: str,
        question_type: str,
        student_answer: str,
        correct_answer: str,
        is_correct: bool,
        explanation: str = "",
    ) -> Dict:
        if self.mock_mode:
            logger.info("Using MOCK question feedback generation")
            return mock_content.mock_question_feedback(is_correct)

        prompt = f"""You are an AI tutor analyzing a student's answer to an assessment question. Provide detailed feedback to help the student learn.

Question: "{question}"
Question Type: {question_type}
Student's Answer: "{student_answer}"
Correct Answer: "{correct_answer}"
Was the student's answer correct? {'Yes' if is_correct else 'No'}
Original Explanation: "{explanation}"

Please provide feedback in the following JSON format:
{{
  "explanation": "Why the answer was correct or incorrect, including the correct reasoning",
  "improvement_tips": ["Tip 1", "Tip 2", "Tip 3"],
  "related_concepts": ["Concept 1", "Concept 2", "Concept 3"]
}}

Return ONLY the JSON object, no markdown, no extra text."""

        try:
            raw = self._llm.generate(
                system_prompt="You are an expert AI tutor providing educational feedback. Always respond with valid JSON only.",
                user_prompt=prompt,
            )
            data = extract_json_object(raw)
            return {
                "explanation": str(data.get("explanation") or "No explanation provided"),
                "improvement_tips": _string_list(data.get("improvement_tips")),
                "related_concepts": _string_list(data.get("related_concepts")),
            }
        except Exception as e:
            logger.error(f"Question feedback generation failed: {e}", exc_info=True)
            return mock_content.mock_question_feedback(is_correct)

    def generate_recommendations(self, performance_data: Dict) -> List[Dict]:
        if self.mock_mode:
            return mock_content.mock_recommendations()

        prompt = f"""Analyze this student performance data and provide personalized learning recommendations:

{json.dumps(performance_data, indent=2, default=str)}

Return a JSON array with this structure:
[
  {{"topic": "Topic Name", "reason": "Why this topic needs attention", "resources": ["Resource 1"], "priority": "high"}}
]"""
        try:
            raw = self._llm.generate(
                system_prompt="You are an AI learning advisor. Return only valid JSON.",
                user_prompt=prompt,
            )
            return extract_json_array(raw)
        except Exception as e:
            logger.error(f"Recommendation generation failed: {e}", exc_info=True)
            return mock_content.mock_recommendations()


def _string_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]
