"""
User model - registered learners, the leaderboard's base population
"""
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from quizrank.database import Base, utcnow
import uuid


class User(Base):
    """
    Users table - identity and display fields shown on the leaderboard
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    profile_picture = Column(String(500), default="")
    role = Column(String(20), default="user")
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name})>"
