"""
Shared fixtures: in-memory SQLite database, factories and an API client
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

import quizrank.models  # noqa: F401
from quizrank.config import settings
from quizrank.database import Base, SessionLocal, engine
from quizrank.models import Quiz, QuizAttempt, User
from quizrank.utils.rate_limiter import rate_limiter

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def create_access_token(user_id, role="user", expires_delta=None):
    """Sign a token the way the platform auth service does"""
    expires = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=24))
    claims = {"userId": str(user_id), "role": role, "exp": expires}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        rate_limiter.reset()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name=None, created_at=None, is_active=True):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"Learner {n}",
            email=f"learner{n}@example.com",
            profile_picture="",
            is_active=is_active,
            created_at=created_at or BASE_TIME - timedelta(days=30, minutes=n),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_quiz(db):
    def _make(correct=(1, 2, 0, 3), passing_score=70, published=True, title="Saving Basics"):
        quiz = Quiz(
            module_id=uuid.uuid4(),
            title=title,
            description="",
            passing_score=passing_score,
            is_published=published,
            questions=[
                {
                    "question": f"Question {i + 1}",
                    "options": ["A", "B", "C", "D"],
                    "correctAnswer": answer,
                    "explanation": f"Option {answer} is right",
                }
                for i, answer in enumerate(correct)
            ],
        )
        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    return _make


@pytest.fixture
def add_attempt(db):
    """Write an attempt straight into the log, bypassing scoring"""

    def _add(user, quiz, attempt_number, points, score=None, minutes=0):
        attempt = QuizAttempt(
            user_id=user.id,
            quiz_id=quiz.id,
            module_id=quiz.module_id,
            attempt_number=attempt_number,
            answers=[],
            score=points if score is None else score,
            adjusted_score=points if score is None else score,
            points_earned=points,
            passed=points >= 70,
            status="completed",
            time_spent=0,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )
        db.add(attempt)
        db.commit()
        return attempt

    return _add
