"""
Leaderboard API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from quizrank.auth import Principal, get_current_principal
from quizrank.database import get_db
from quizrank.schemas.leaderboard import (
    Leaderboard,
    LeaderboardResponse,
    UserRank,
    UserRankResponse,
)
from quizrank.services.leaderboard_service import leaderboard_service

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])
logger = logging.getLogger(__name__)


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """
    Global leaderboard (top 50)

    - Every registered user is ranked, users without attempts have 0 points
    - Only the latest attempt per quiz counts toward totalPoints
    - Ties on points are broken by most recent activity
    """

    try:
        logger.info(f"Leaderboard requested by {principal.user_id}")

        entries = leaderboard_service.get_leaderboard(db)

        return LeaderboardResponse(
            data=Leaderboard(leaderboard=entries, total_users=len(entries))
        )

    except Exception as e:
        logger.error(f"Failed to fetch leaderboard: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Server error while fetching leaderboard"
        )


@router.get("/user/{user_id}", response_model=UserRankResponse)
async def get_user_rank(
    user_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db)
):
    """
    Rank and stats for one user

    Returns userStats and rank as null when the user has no attempts.
    """

    try:
        result = leaderboard_service.get_user_rank(db, user_id)

        return UserRankResponse(data=UserRank(**result))

    except Exception as e:
        logger.error(f"Failed to fetch user stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Server error while fetching user stats"
        )
