"""
QuizAttempt model - the append-only attempt log
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Uuid, ForeignKey,
    UniqueConstraint, Index, CheckConstraint,
)
from quizrank.database import Base, JSONDocument, utcnow
import uuid


class QuizAttempt(Base):
    """
    Quiz attempts table - one immutable row per submission

    (user_id, quiz_id, attempt_number) is unique so that concurrent
    submissions cannot share an attempt number.
    """
    __tablename__ = "quiz_attempts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    quiz_id = Column(Uuid, ForeignKey("quizzes.id"), nullable=False)
    module_id = Column(Uuid, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    answers = Column(JSONDocument)  # [{questionIndex, userAnswer, isCorrect, timeSpent}]
    score = Column(Integer, nullable=False)
    adjusted_score = Column(Integer, nullable=False)
    points_earned = Column(Integer, nullable=False)
    passed = Column(Boolean, nullable=False)
    status = Column(String(20), default="completed", nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_attempt_number"),
        Index("ix_attempts_user_module", "user_id", "module_id"),
        Index("ix_attempts_quiz_created", "quiz_id", "created_at"),
        CheckConstraint("attempt_number >= 1", name="attempt_number_check"),
        CheckConstraint("score BETWEEN 0 AND 100", name="score_check"),
        CheckConstraint("points_earned BETWEEN 0 AND 100", name="points_check"),
        CheckConstraint(
            "status IN ('completed', 'in-progress', 'abandoned')", name="status_check"
        ),
    )

    def __repr__(self):
        return (
            f"<QuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, "
            f"attempt={self.attempt_number}, score={self.score})>"
        )
