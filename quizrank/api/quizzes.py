"""
Quiz submission and attempt API endpoints
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from quizrank.auth import Principal, get_current_principal
from quizrank.database import get_db
from quizrank.errors import NotFoundError, QuizRankError
from quizrank.models import Quiz
from quizrank.schemas.quiz import (
    QuizSubmission,
    QuizSubmissionResponse,
    QuizSubmissionResult,
    QuizDetailResponse,
    QuizDetail,
    QuizView,
    QuizQuestionView,
    AttemptHistoryResponse,
    AttemptHistory,
)
from quizrank.services.scoring_service import scoring_service


router = APIRouter(prefix="/api/quiz", tags=["quiz"])
logger = logging.getLogger(__name__)


@router.get("/{quiz_id}", response_model=QuizDetailResponse)
async def get_quiz(
    quiz_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Get a quiz for taking

    - Answer keys and explanations are not included
    - isCompleted/userScore tell whether the caller already locked it
      with a perfect score
    """

    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        raise NotFoundError("Quiz not found")

    questions = quiz.questions or []
    status = scoring_service.get_completion_status(db, quiz_id, principal.user_id)

    view = QuizView(
        id=quiz.id,
        module_id=quiz.module_id,
        title=quiz.title,
        description=quiz.description or "",
        passing_score=quiz.passing_score,
        total_questions=len(questions),
        questions=[
            QuizQuestionView(question=q.get("question", ""), options=q.get("options", []))
            for q in questions
        ],
    )

    return QuizDetailResponse(data=QuizDetail(quiz=view, **status))


@router.post("/{quiz_id}/submit", response_model=QuizSubmissionResponse)
async def submit_quiz(
    quiz_id: UUID,
    submission: QuizSubmission,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Submit and grade a quiz

    Scoring:
    - First attempt: points = percentage score
    - Re-attempt: points capped at 85
    - A perfect score locks the quiz (400 with data.isCompleted)
    """

    try:
        logger.info(f"Grading quiz {quiz_id} for user {principal.user_id}")

        result = scoring_service.submit(
            db,
            quiz_id=quiz_id,
            user_id=principal.user_id,
            answers=submission.answers,
            time_spent=submission.time_spent,
        )

        return QuizSubmissionResponse(data=QuizSubmissionResult(**result))

    except QuizRankError:
        raise
    except Exception as e:
        logger.error(f"Failed to submit quiz: {str(e)}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Server error while submitting quiz")


@router.get("/{quiz_id}/attempts", response_model=AttemptHistoryResponse)
async def get_attempts(
    quiz_id: UUID,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Caller's attempt history on a quiz, oldest first"""

    if not db.query(Quiz.id).filter(Quiz.id == quiz_id).first():
        raise NotFoundError("Quiz not found")

    history = scoring_service.get_attempt_history(db, quiz_id, principal.user_id)

    return AttemptHistoryResponse(data=AttemptHistory(**history))
