from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from doodle.infrastructure.constants import DIFFICULTIES, MEDIUM
from doodle.infrastructure.repositories.attempt_repository import AttemptRepository

from .grading import compute_attempt_stats, grade_answer

logger = logging.getLogger(__name__)


# ---------------------------
# Adaptive Quiz Engine
# ---------------------------

class AdaptiveQuizEngine:
    """
    Serves an assessment's questions one at a time.

    The first question is picked at random. After that the target difficulty
    moves one step up after a correct answer and one step down after a wrong
    one, clamped to EASY..HARD. Among unanswered questions one at the target
    difficulty is picked at random, falling back to any unanswered question.
    """

    def __init__(self, attempt_repo: AttemptRepository, rng: Optional[random.Random] = None):
        self._attempts = attempt_repo
        self._rng = rng or random.Random()

    # ---------------------------
    # Public API
    # ---------------------------

    def next_question(self, attempt, assessment):
        """Return the next question model, or None once every question is answered."""
        answered = self._attempts.answered_question_ids(attempt.id)
        remaining = [q for q in assessment.questions if q.id not in answered]
        logger.info(
            f"Attempt {attempt.id}: {len(answered)} answered, {len(remaining)} remaining"
        )
        if not remaining:
            return None

        last_answer = self._attempts.get_last_answer(attempt.id)
        if last_answer is None:
            return self._rng.choice(remaining)

        target = self.target_difficulty(last_answer.question.difficulty, bool(last_answer.is_correct))
        at_target = [q for q in remaining if (q.difficulty or MEDIUM).upper() == target]
        logger.debug(f"Attempt {attempt.id}: target difficulty {target}, {len(at_target)} candidates")
        return self._rng.choice(at_target or remaining)

    def submit_answer(
        self,
        attempt,
        assessment,
        *,
        question_id: int,
        selected_option_ids: Optional[List[int]] = None,
        answer_text: Optional[str] = None,
        time_taken_seconds: Optional[int] = None,
    ) -> Dict:
        """
        Grade and store one answer, then pick the next question.

        The attempt is finalized as soon as no unanswered question remains.
        """
        if attempt.is_completed:
            raise ValueError("Assessment attempt is already completed")

        question = next((q for q in assessment.questions if q.id == question_id), None)
        if question is None:
            raise ValueError("Question does not belong to this assessment")

        if question_id in self._attempts.answered_question_ids(attempt.id):
            raise ValueError("Question has already been answered in this attempt")

        result = grade_answer(question, selected_option_ids, answer_text)
        self._attempts.store_answer(
            attempt_id=attempt.id,
            question_id=question_id,
            selected_option_ids=selected_option_ids,
            text_answer=answer_text,
            is_correct=result.is_correct,
            points_earned=result.points_earned,
            time_taken_seconds=time_taken_seconds,
        )
        logger.info(
            f"Attempt {attempt.id}: question {question_id} answered, correct={result.is_correct}"
        )

        next_question = self.next_question(attempt, assessment)
        is_complete = next_question is None
        if is_complete:
            self.finalize(attempt, assessment)

        return {
            "is_correct": result.is_correct,
            "points_earned": result.points_earned,
            "next_question": next_question,
            "is_complete": is_complete,
            "is_pending_evaluation": False,
        }

    def finalize(self, attempt, assessment) -> Dict:
        stats = compute_attempt_stats(list(attempt.answers), list(assessment.questions), attempt.started_at)
        self._attempts.finalize(attempt, stats)
        return stats

    # ---------------------------
    # Internal Logic
    # ---------------------------

    @staticmethod
    def target_difficulty(last_difficulty: Optional[str], was_correct: bool) -> str:
        current = (last_difficulty or MEDIUM).upper()
        if current not in DIFFICULTIES:
            current = MEDIUM
        index = DIFFICULTIES.index(current) + (1 if was_correct else -1)
        return DIFFICULTIES[max(0, min(index, len(DIFFICULTIES) - 1))]
