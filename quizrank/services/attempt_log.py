"""
Attempt log data access shared by scoring and leaderboard aggregation

Only the most recent attempt (highest attempt_number) of each
(user_id, quiz_id) pair counts toward leaderboard totals.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func
from sqlalchemy.orm import Session, Query

from quizrank.models import QuizAttempt


def get_latest_attempt(db: Session, user_id: UUID, quiz_id: UUID) -> Optional[QuizAttempt]:
    """Most recent attempt of a user on a quiz, or None"""
    return (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.attempt_number.desc())
        .first()
    )


def get_attempts(db: Session, user_id: UUID, quiz_id: UUID) -> List[QuizAttempt]:
    """All attempts of a user on a quiz, oldest first"""
    return (
        db.query(QuizAttempt)
        .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.attempt_number.asc())
        .all()
    )


def latest_attempts_subquery(db: Session, user_id: Optional[UUID] = None):
    """
    (user_id, quiz_id, attempt_number) of the latest attempt per pair

    Args:
        db: Database session
        user_id: Restrict to one user when given
    """
    query = db.query(
        QuizAttempt.user_id.label("user_id"),
        QuizAttempt.quiz_id.label("quiz_id"),
        func.max(QuizAttempt.attempt_number).label("attempt_number"),
    )
    if user_id is not None:
        query = query.filter(QuizAttempt.user_id == user_id)

    return query.group_by(QuizAttempt.user_id, QuizAttempt.quiz_id).subquery()


def user_totals_query(db: Session, user_id: Optional[UUID] = None) -> Query:
    """
    Per-user totals over latest attempts only

    Rows: (user_id, total_points, total_topics, last_activity)
    """
    latest = latest_attempts_subquery(db, user_id)

    return (
        db.query(
            QuizAttempt.user_id.label("user_id"),
            func.sum(QuizAttempt.points_earned).label("total_points"),
            func.count(QuizAttempt.id).label("total_topics"),
            func.max(QuizAttempt.created_at).label("last_activity"),
        )
        .join(
            latest,
            and_(
                QuizAttempt.user_id == latest.c.user_id,
                QuizAttempt.quiz_id == latest.c.quiz_id,
                QuizAttempt.attempt_number == latest.c.attempt_number,
            ),
        )
        .group_by(QuizAttempt.user_id)
    )


def count_users_above(db: Session, total_points: int) -> int:
    """Number of users whose deduplicated total strictly exceeds total_points"""
    totals = user_totals_query(db).subquery()

    return (
        db.query(func.count())
        .select_from(totals)
        .filter(totals.c.total_points > total_points)
        .scalar()
    ) or 0
