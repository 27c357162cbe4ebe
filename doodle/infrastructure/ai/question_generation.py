# question_generation.py

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from doodle.infrastructure.constants import (
    BLOOM_LEVELS,
    DEFAULT_BLOOM_LEVEL,
    DEFAULT_DIFFICULTY_DISTRIBUTION,
    DIFFICULTIES,
    MCQ,
    MEDIUM,
    MSQ,
    POINTS_BY_TYPE,
    QUESTION_TYPES,
    SUBJECTIVE,
)

from .json_extraction import extract_json_array, extract_json_object
from .llm_client import LLMClient


logger = logging.getLogger(__name__)

OPTION_LABELS = "ABCDE"

UG_GUIDANCE = """ACADEMIC LEVEL: Undergraduate (UG)
- Focus on fundamental concepts, basic understanding, and foundational knowledge
- Questions should test recall, comprehension, and basic application
- Use clear, straightforward language appropriate for undergraduate students
- Emphasize understanding core concepts rather than advanced analysis"""

PG_GUIDANCE = """ACADEMIC LEVEL: Postgraduate (PG)
- Focus on advanced concepts, critical thinking, and deep analysis
- Questions should test higher-order thinking: analysis, evaluation, and creation
- Use more sophisticated language and complex scenarios
- Emphasize critical analysis, synthesis, and original problem-solving"""


# LLM Question Generator

class AssessmentQuestionGenerator:
    """
    Domain service that turns syllabus subtopics into typed quiz questions.
    """

    SYSTEM_PROMPT = "You are an expert educational assessment designer. Always return valid JSON arrays."
    FOLLOW_UP_SYSTEM_PROMPT = "You are an expert educational assessment designer. Always return valid JSON objects."

    def __init__(self, llm_client: LLMClient):
        self._llm = llm_client

    def generate_for_subtopic(
        self,
        subtopic: Dict,
        *,
        course_context: Optional[str] = None,
        difficulty_distribution: Optional[Dict] = None,
        quiz_level: str = "UG",
    ) -> List[Dict]:
        requested = subtopic.get("mcq_count", 0) + subtopic.get("msq_count", 0) + subtopic.get("subjective_count", 0)
        logger.info(
            f"Generating {requested} questions for: {subtopic['topic_title']} -> {subtopic['subtopic']}"
        )
        if requested == 0:
            return []

        prompt = self._build_prompt(
            subtopic,
            course_context=course_context,
            difficulty_distribution=difficulty_distribution or DEFAULT_DIFFICULTY_DISTRIBUTION,
            quiz_level=quiz_level,
        )
        logger.debug(f"Built question prompt, length={len(prompt)} chars")

        raw_output = self._llm.generate(system_prompt=self.SYSTEM_PROMPT, user_prompt=prompt)
        logger.debug(f"LLM response received, length={len(raw_output)} chars")

        questions = []
        for item in extract_json_array(raw_output):
            try:
                question = self.normalize_question(item, default_bloom=subtopic.get("bloom_level"))
            except ValueError as e:
                logger.warning(f"Dropping invalid generated question: {e}")
                continue
            question["topic_title"] = subtopic["topic_title"]
            question["subtopic"] = subtopic["subtopic"]
            questions.append(question)

        logger.info(f"Generated {len(questions)} questions for {subtopic['subtopic']}")
        return questions

    def generate_follow_up(
        self,
        *,
        kind: str,
        original_question: str,
        topic_title: str,
        subtopic: str,
    ) -> Dict:
        """Generate a harder ("challenge") or easier ("practice") single MCQ."""
        prompt = self._build_follow_up_prompt(kind, original_question, topic_title, subtopic)
        raw_output = self._llm.generate(system_prompt=self.FOLLOW_UP_SYSTEM_PROMPT, user_prompt=prompt)

        question = self.normalize_question(extract_json_object(raw_output))
        question["topic_title"] = topic_title
        question["subtopic"] = subtopic
        return question

    # ---------------------------
    # Prompt Construction
    # ---------------------------

    def _build_prompt(
        self,
        subtopic: Dict,
        *,
        course_context: Optional[str],
        difficulty_distribution: Dict,
        quiz_level: str,
    ) -> str:
        guidance = PG_GUIDANCE if quiz_level == "PG" else UG_GUIDANCE
        easy = difficulty_distribution.get("easy", 30)
        medium = difficulty_distribution.get("medium", 50)
        hard = difficulty_distribution.get("hard", 20)
        context_line = f"Course Context: {course_context[:500]}" if course_context else ""
        bloom_hint = (
            f"Preferred Bloom's level for this subtopic: {subtopic['bloom_level']}"
            if subtopic.get("bloom_level")
            else ""
        )

        return f"""You are an expert assessment designer. Generate questions for a course assessment with Bloom's Taxonomy levels and difficulty distribution.

{guidance}

Topic: {subtopic['topic_title']}
Subtopic: {subtopic['subtopic']}
{context_line}
{bloom_hint}

Generate the following questions:
- {subtopic.get('mcq_count', 0)} Multiple Choice Questions (MCQ) with 4 options each, only ONE correct answer
- {subtopic.get('msq_count', 0)} Multiple Select Questions (MSQ) with 4-5 options each, MULTIPLE correct answers
- {subtopic.get('subjective_count', 0)} Subjective/Open-ended questions

Difficulty Distribution: {easy}% EASY, {medium}% MEDIUM, {hard}% HARD

Bloom's Taxonomy Levels:
- REMEMBER: Recalling facts, basic concepts
- UNDERSTAND: Explaining ideas or concepts
- APPLY: Using information in new situations
- ANALYZE: Drawing connections among ideas
- EVALUATE: Justifying a stand or decision
- CREATE: Producing new or original work

Return ONLY a valid JSON array with this exact structure:
[
  {{
    "question_type": "MCQ",
    "question_text": "What is the primary purpose of CI/CD?",
    "difficulty": "MEDIUM",
    "bloom_level": "REMEMBER",
    "options": [
      {{"label": "A", "text": "To automate testing and deployment", "is_correct": true}},
      {{"label": "B", "text": "To write better code", "is_correct": false}},
      {{"label": "C", "text": "To manage databases", "is_correct": false}},
      {{"label": "D", "text": "To design user interfaces", "is_correct": false}}
    ],
    "explanation": "CI/CD automates the software delivery process",
    "points": 1
  }},
  {{
    "question_type": "SUBJECTIVE",
    "question_text": "Explain the benefits of using Terraform for infrastructure management.",
    "difficulty": "HARD",
    "bloom_level": "EVALUATE",
    "explanation": "Look for declarative syntax, state management and automation",
    "points": 5
  }}
]

Important rules:
1. For MCQ: Exactly 4 options, ONLY ONE with is_correct: true
2. For MSQ: 4-5 options, AT LEAST TWO with is_correct: true
3. For SUBJECTIVE: No options array needed
4. Difficulty: Follow the distribution ({easy}% EASY, {medium}% MEDIUM, {hard}% HARD)
5. Bloom Level: Assign one of REMEMBER, UNDERSTAND, APPLY, ANALYZE, EVALUATE, CREATE
6. Points: MCQ=1, MSQ=2, SUBJECTIVE=5
7. Return ONLY the JSON array, no markdown, no extra text""".strip()

    def _build_follow_up_prompt(self, kind: str, original_question: str, topic_title: str, subtopic: str) -> str:
        if kind == "challenge":
            goal = """Create a MORE DIFFICULT question that:
- Tests deeper understanding of the same concept
- Requires advanced knowledge or application
- Builds upon the original question's knowledge
Difficulty should be HARD or MEDIUM."""
        else:
            goal = """Create a similar but EASIER question that:
- Reinforces the same core concept
- Uses simpler language or scenarios
- Helps build confidence and understanding
Difficulty should be EASY or MEDIUM."""

        return f"""You are an expert assessment designer. Generate a single follow-up question.

Original Question: {original_question}
Topic: {topic_title}
Subtopic: {subtopic}

{goal}

Return ONLY a valid JSON object with this exact structure:
{{
  "question_type": "MCQ",
  "question_text": "Question stem",
  "difficulty": "MEDIUM",
  "options": [
    {{"label": "A", "text": "Option A", "is_correct": true}},
    {{"label": "B", "text": "Option B", "is_correct": false}},
    {{"label": "C", "text": "Option C", "is_correct": false}},
    {{"label": "D", "text": "Option D", "is_correct": false}}
  ],
  "explanation": "Why the correct option is right",
  "points": 1
}}

Exactly 4 options, ONLY ONE correct answer. Return ONLY the JSON object, no markdown, no extra text.""".strip()

    # ---------------------------
    # Response Validation
    # ---------------------------

    @staticmethod
    def normalize_question(data: Dict, default_bloom: Optional[str] = None) -> Dict:
        """
        Coerce an LLM question payload into the stored shape, raising
        ValueError when it breaks the per-type option rules.
        """
        if not isinstance(data, dict):
            raise ValueError("Question payload must be an object")

        question_type = str(data.get("question_type") or data.get("questionType") or "").upper()
        if question_type not in QUESTION_TYPES:
            raise ValueError(f"Unknown question type: {question_type!r}")

        text = str(data.get("question_text") or data.get("questionText") or "").strip()
        if not text:
            raise ValueError("Question text is empty")

        difficulty = str(data.get("difficulty") or "").upper()
        if difficulty not in DIFFICULTIES:
            difficulty = MEDIUM

        bloom = str(data.get("bloom_level") or default_bloom or "").upper()
        if bloom not in BLOOM_LEVELS:
            bloom = DEFAULT_BLOOM_LEVEL

        options: List[Dict] = []
        if question_type != SUBJECTIVE:
            raw_options = data.get("options") or []
            if not isinstance(raw_options, list):
                raise ValueError("Options must be a list")
            for idx, opt in enumerate(raw_options[: len(OPTION_LABELS)]):
                if not isinstance(opt, dict):
                    raise ValueError("Each option must be an object")
                is_correct = opt.get("is_correct", opt.get("isCorrect", False))
                options.append(
                    {
                        "label": OPTION_LABELS[idx],
                        "text": str(opt.get("text", "")).strip(),
                        "is_correct": bool(is_correct),
                    }
                )

            correct = sum(1 for o in options if o["is_correct"])
            if question_type == MCQ and (len(options) != 4 or correct != 1):
                raise ValueError("MCQ needs exactly 4 options with one correct answer")
            if question_type == MSQ and (not 4 <= len(options) <= 5 or correct < 2):
                raise ValueError("MSQ needs 4-5 options with at least two correct answers")

        explanation = data.get("explanation") or ""
        if isinstance(explanation, dict):
            explanation = str(explanation)

        return {
            "question_type": question_type,
            "question_text": text,
            "difficulty": difficulty,
            "bloom_level": bloom,
            "options": options,
            "explanation": explanation,
            "points": POINTS_BY_TYPE[question_type],
        }
