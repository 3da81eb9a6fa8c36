"""
Pydantic schemas for leaderboard endpoints
"""
from typing import List, Optional
from datetime import datetime

from quizrank.schemas.common import CamelModel


class LeaderboardEntry(CamelModel):
    """One ranked user"""
    user_id: str
    name: str
    email: str
    profile_picture: str = ""
    total_points: int
    total_topics: int
    last_activity: Optional[datetime] = None
    rank: int


class Leaderboard(CamelModel):
    leaderboard: List[LeaderboardEntry]
    total_users: int


class LeaderboardResponse(CamelModel):
    success: bool = True
    data: Leaderboard


class UserStats(CamelModel):
    """Deduplicated totals for one user"""
    total_points: int
    total_topics: int
    last_activity: Optional[datetime] = None


class UserRank(CamelModel):
    user_stats: Optional[UserStats] = None
    rank: Optional[int] = None


class UserRankResponse(CamelModel):
    success: bool = True
    data: UserRank
