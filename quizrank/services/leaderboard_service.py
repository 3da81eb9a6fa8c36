"""
Leaderboard aggregation service
Ranks users by points from their latest attempt on each quiz
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from quizrank.config import settings
from quizrank.models import User
from quizrank.services import attempt_log
from quizrank.utils.cache import cache_service

logger = logging.getLogger(__name__)


class LeaderboardService:
    """
    Service for computing rankings from the attempt log

    Algorithm:
    1. Every registered user is part of the ranking, with or without attempts
    2. Per (user, quiz) only the attempt with the highest attempt_number counts
    3. Per user: total points, distinct quizzes, most recent activity
    4. Sort by points desc, then last activity desc
    5. Rank = position + 1, no shared ranks
    """

    def __init__(self, size: int = 50):
        self.size = size

    def get_leaderboard(self, db: Session, use_cache: bool = True) -> List[Dict[str, Any]]:
        """
        Top users by total points

        Args:
            db: Database session
            use_cache: Serve a cached snapshot when one exists

        Returns:
            Ranked entries, at most `size` of them
        """
        cache_key = cache_service.leaderboard_key(self.size)

        if use_cache:
            cached = cache_service.get(cache_key)
            if cached is not None:
                return cached

        users = db.query(
            User.id, User.name, User.email, User.profile_picture, User.created_at
        ).all()

        totals = {
            row.user_id: row
            for row in attempt_log.user_totals_query(db).all()
        }

        entries = []
        for user in users:
            stats = totals.get(user.id)

            entries.append({
                "user_id": str(user.id),
                "name": user.name,
                "email": user.email,
                "profile_picture": user.profile_picture or "",
                "total_points": int(stats.total_points) if stats else 0,
                "total_topics": int(stats.total_topics) if stats else 0,
                "last_activity": stats.last_activity if stats else user.created_at
            })

        entries.sort(
            key=lambda e: (e["total_points"], self._activity_key(e["last_activity"])),
            reverse=True
        )

        ranked = [
            {**entry, "rank": index + 1}
            for index, entry in enumerate(entries[:self.size])
        ]

        logger.info(f"Leaderboard computed: {len(ranked)} of {len(users)} users")

        if use_cache:
            cache_service.set(cache_key, jsonable_encoder(ranked))

        return ranked

    @staticmethod
    def _activity_key(value: Optional[datetime]) -> float:
        # Naive values come back from SQLite; ordering only needs consistency
        return value.timestamp() if value else float("-inf")

    def get_user_stats(self, db: Session, user_id: UUID) -> Optional[Dict[str, Any]]:
        """Deduplicated totals for one user, or None without attempts"""
        row = attempt_log.user_totals_query(db, user_id).first()
        if row is None:
            return None

        return {
            "total_points": int(row.total_points or 0),
            "total_topics": int(row.total_topics or 0),
            "last_activity": row.last_activity
        }

    def get_user_rank(self, db: Session, user_id: UUID) -> Dict[str, Any]:
        """
        Rank and stats of a single user

        The rank counts every user with a strictly higher total, so it is
        correct even outside the top of the leaderboard.

        Returns:
            {"user_stats": {...} | None, "rank": int | None}
        """
        user_stats = self.get_user_stats(db, user_id)

        if user_stats is None:
            return {"user_stats": None, "rank": None}

        users_above = attempt_log.count_users_above(db, user_stats["total_points"])

        logger.info(
            f"User {user_id}: {user_stats['total_points']} points, "
            f"{users_above} users ahead"
        )

        return {"user_stats": user_stats, "rank": users_above + 1}


# Global instance
leaderboard_service = LeaderboardService(size=settings.LEADERBOARD_SIZE)
