"""
Quiz analytics counters maintained after each recorded attempt
"""
import logging
from typing import Dict, Any
from uuid import UUID

from sqlalchemy.orm import Session

from quizrank.models import Quiz

logger = logging.getLogger(__name__)


class AnalyticsService:
    """Service for the running per-quiz statistics"""

    def update_quiz_analytics(
        self,
        db: Session,
        quiz_id: UUID,
        score: int,
        passed: bool
    ) -> Dict[str, Any]:
        """
        Fold one attempt into the quiz's counters

        Args:
            db: Database session
            quiz_id: Quiz UUID
            score: Display score of the attempt (0-100)
            passed: Whether the attempt met the passing score

        Returns:
            Updated counters
        """
        quiz = (
            db.query(Quiz)
            .filter(Quiz.id == quiz_id)
            .with_for_update()
            .first()
        )
        if not quiz:
            raise LookupError(f"Quiz {quiz_id} disappeared before analytics update")

        previous_attempts = quiz.attempts or 0
        attempts = previous_attempts + 1
        total_score = (quiz.average_score or 0) * previous_attempts + score

        quiz.attempts = attempts
        quiz.pass_count = (quiz.pass_count or 0) + (1 if passed else 0)
        quiz.average_score = round(total_score / attempts)
        quiz.completion_rate = round(quiz.pass_count / attempts * 100)

        db.commit()

        logger.debug(
            f"Quiz {quiz_id} analytics: attempts={quiz.attempts}, "
            f"avg={quiz.average_score}, pass_rate={quiz.completion_rate}%"
        )

        return {
            "attempts": quiz.attempts,
            "pass_count": quiz.pass_count,
            "average_score": quiz.average_score,
            "completion_rate": quiz.completion_rate
        }


# Global instance
analytics_service = AnalyticsService()
