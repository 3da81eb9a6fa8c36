"""
Quiz model - published question sets and their aggregate analytics
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, Uuid
from quizrank.database import Base, JSONDocument, utcnow
import uuid


class Quiz(Base):
    """
    Quizzes table - single-choice questions plus running analytics counters
    """
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    module_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, default="")
    # [{"question": str, "options": [str], "correctAnswer": int, "explanation": str}]
    questions = Column(JSONDocument, nullable=False, default=list)
    passing_score = Column(Integer, default=70, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)

    # Analytics
    attempts = Column(Integer, default=0, nullable=False)
    pass_count = Column(Integer, default=0, nullable=False)
    average_score = Column(Integer, default=0, nullable=False)
    completion_rate = Column(Integer, default=0, nullable=False)  # percent of attempts passed

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, published={self.is_published})>"
