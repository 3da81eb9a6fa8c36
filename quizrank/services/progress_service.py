"""
Module progress tracking service
Folds quiz results into the learner's per-module progress record
"""
import logging
from typing import Dict, Any
from uuid import UUID

from sqlalchemy.orm import Session

from quizrank.database import utcnow
from quizrank.models import UserProgress

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Service for updating module progress after a quiz submission

    - Percentage follows the latest quiz score (clamped to 0-100)
    - Status: 100% = completed, anything above 0 = in-progress,
      a 0% result leaves the previous status
    - One progress point per full 10% of score
    - Per-quiz best score and attempt count are kept in quiz_stats
    """

    POINTS_PER_SCORE_STEP = 10

    def status_for(self, percentage: int, current: str = "not-started") -> str:
        if percentage >= 100:
            return "completed"
        if percentage > 0:
            return "in-progress"
        return current

    def record_quiz_result(
        self,
        db: Session,
        user_id: UUID,
        module_id: UUID,
        quiz_id: UUID,
        score: int,
        time_spent: int = 0
    ) -> UserProgress:
        """
        Update (or create) the user's progress for the quiz's module

        Args:
            db: Database session
            user_id: Learner UUID
            module_id: Module the quiz belongs to
            quiz_id: Quiz UUID
            score: Display score of the attempt
            time_spent: Seconds spent on the attempt

        Returns:
            The saved progress record
        """
        progress = db.query(UserProgress).filter(
            UserProgress.user_id == user_id,
            UserProgress.module_id == module_id
        ).first()

        if not progress:
            progress = UserProgress(
                user_id=user_id,
                module_id=module_id,
                percentage=0,
                status="not-started",
                time_spent=0,
                points=0,
                quiz_stats={}
            )
            db.add(progress)

        now = utcnow()

        # JSON columns only persist on reassignment
        quiz_stats: Dict[str, Any] = dict(progress.quiz_stats or {})
        key = str(quiz_id)
        previous = quiz_stats.get(key)
        if previous:
            quiz_stats[key] = {
                "bestScore": max(previous.get("bestScore", 0), score),
                "totalAttempts": previous.get("totalAttempts", 0) + 1,
                "lastAttempt": now.isoformat()
            }
        else:
            quiz_stats[key] = {
                "bestScore": score,
                "totalAttempts": 1,
                "lastAttempt": now.isoformat()
            }
        progress.quiz_stats = quiz_stats

        progress.points = (progress.points or 0) + score // self.POINTS_PER_SCORE_STEP
        progress.percentage = min(max(score, 0), 100)
        progress.status = self.status_for(progress.percentage, progress.status or "not-started")
        progress.time_spent = (progress.time_spent or 0) + max(time_spent or 0, 0)
        progress.last_activity = now

        db.commit()

        logger.info(
            f"Progress updated: user={user_id}, module={module_id}, "
            f"percentage={progress.percentage}, status={progress.status}, points={progress.points}"
        )

        return progress


# Global instance
progress_service = ProgressService()
