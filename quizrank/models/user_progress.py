"""
UserProgress model - per-module learning progress
"""
from sqlalchemy import Column, String, Integer, DateTime, Uuid, ForeignKey, UniqueConstraint
from quizrank.database import Base, JSONDocument, utcnow
import uuid


class UserProgress(Base):
    """
    User progress table - module progress updated after each quiz submission
    """
    __tablename__ = "user_progress"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    module_id = Column(Uuid, nullable=False)
    percentage = Column(Integer, default=0, nullable=False)  # 0 to 100
    status = Column(String(20), default="not-started", nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)  # seconds
    points = Column(Integer, default=0, nullable=False)
    quiz_stats = Column(JSONDocument, default=dict)  # {quiz_id: {bestScore, totalAttempts, lastAttempt}}
    last_activity = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "module_id", name="uq_progress_user_module"),
    )

    def __repr__(self):
        return f"<UserProgress(user_id={self.user_id}, module_id={self.module_id}, status={self.status})>"
