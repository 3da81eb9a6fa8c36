"""
Database models package
"""
from quizrank.models.user import User
from quizrank.models.quiz import Quiz
from quizrank.models.quiz_attempt import QuizAttempt
from quizrank.models.user_progress import UserProgress

__all__ = ["User", "Quiz", "QuizAttempt", "UserProgress"]
