"""
Domain exceptions raised by services and rendered by the API layer
"""
from typing import Any, Dict, Optional


class QuizRankError(Exception):
    """Base class: carries the HTTP status and the client-facing payload"""

    status_code = 500

    def __init__(self, message: str, data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.data = data


class ValidationError(QuizRankError):
    status_code = 400


class NotFoundError(QuizRankError):
    status_code = 404


class ForbiddenError(QuizRankError):
    status_code = 403


class AlreadyCompletedError(QuizRankError):
    """Perfect score already recorded for this (user, quiz); nothing was written"""

    status_code = 400

    def __init__(self, points_earned: int, attempt_number: int):
        super().__init__(
            "Quiz already completed with perfect score. No further attempts allowed.",
            data={
                "isCompleted": True,
                "userScore": points_earned,
                "attemptNumber": attempt_number,
            },
        )


class PersistenceError(QuizRankError):
    """The attempt could not be stored and is not considered recorded"""

    status_code = 500
