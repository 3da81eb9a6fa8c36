"""
Quiz scoring service
Grades single-choice submissions and awards leaderboard points
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from quizrank.config import settings
from quizrank.errors import (
    AlreadyCompletedError,
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from quizrank.models import Quiz, QuizAttempt
from quizrank.services import attempt_log
from quizrank.services.analytics_service import analytics_service
from quizrank.services.progress_service import progress_service
from quizrank.utils.cache import cache_service

logger = logging.getLogger(__name__)

PERFECT_SCORE = 100


class ScoringService:
    """
    Service for scoring quiz submissions

    Point policy:
    - First attempt: points equal the raw percentage. A perfect score locks
      the quiz for that user.
    - Any later attempt: points are capped at REATTEMPT_POINT_CAP (85) and
      no further re-attempt is offered.
    """

    def __init__(self, reattempt_point_cap: int = 85, insert_retries: int = 3):
        self.reattempt_point_cap = reattempt_point_cap
        self.insert_retries = insert_retries

    def grade_answers(
        self,
        questions: List[Dict[str, Any]],
        answers: List[Optional[int]]
    ) -> Tuple[int, List[Dict[str, Any]]]:
        """
        Grade answers aligned by position with the quiz questions

        Missing, null or out-of-range answers are graded incorrect.

        Returns:
            Tuple of (correct_answers, per-question answer records)
        """
        correct_answers = 0
        answer_results = []

        for index, question in enumerate(questions):
            user_answer = answers[index] if index < len(answers) else None
            is_correct = self._is_correct(user_answer, question.get("correctAnswer"))

            if is_correct:
                correct_answers += 1

            answer_results.append({
                "questionIndex": index,
                "userAnswer": user_answer,
                "isCorrect": is_correct,
                "timeSpent": 0
            })

        return correct_answers, answer_results

    @staticmethod
    def _is_correct(user_answer: Any, correct_answer: Any) -> bool:
        # bool is an int subclass; True must not match index 1
        if isinstance(user_answer, bool) or not isinstance(user_answer, int):
            return False
        return user_answer == correct_answer

    @staticmethod
    def calculate_raw_score(correct_answers: int, total_questions: int) -> int:
        """Percentage of correct answers, halves rounded up"""
        return int(math.floor(correct_answers / total_questions * 100 + 0.5))

    def award_points(self, raw_score: int, attempt_number: int) -> Tuple[int, bool]:
        """
        Points credited for an attempt

        Returns:
            Tuple of (points_earned, can_re_attempt)
        """
        if attempt_number == 1:
            return raw_score, raw_score != PERFECT_SCORE

        return min(raw_score, self.reattempt_point_cap), False

    def submit(
        self,
        db: Session,
        quiz_id: UUID,
        user_id: UUID,
        answers: List[Optional[int]],
        time_spent: int = 0
    ) -> Dict[str, Any]:
        """
        Grade a submission and record it in the attempt log

        Raises:
            NotFoundError: quiz does not exist
            ForbiddenError: quiz is not published
            ValidationError: quiz has no questions
            AlreadyCompletedError: a perfect score is already recorded
            PersistenceError: the attempt could not be stored
        """
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise NotFoundError("Quiz not found")

        if not quiz.is_published:
            raise ForbiddenError("Quiz is not published")

        questions = list(quiz.questions or [])
        if not questions:
            raise ValidationError("Quiz has no questions")

        correct_answers, answer_results = self.grade_answers(questions, answers)
        raw_score = self.calculate_raw_score(correct_answers, len(questions))
        passing_score = quiz.passing_score
        module_id = quiz.module_id

        attempt, can_re_attempt = self._record_attempt(
            db, quiz, user_id, answer_results, raw_score, time_spent
        )

        logger.info(
            f"Quiz attempt saved: {attempt.id}, quiz={quiz_id}, user={user_id}, "
            f"attempt={attempt.attempt_number}, score={raw_score}, points={attempt.points_earned}"
        )

        result = {
            "attempt_id": attempt.id,
            "attempt_number": attempt.attempt_number,
            "score": attempt.score,
            "adjusted_score": attempt.adjusted_score,
            "points_earned": attempt.points_earned,
            "passed": attempt.passed,
            "status": attempt.status,
            "can_re_attempt": can_re_attempt,
            "correct_answers": correct_answers,
            "total_questions": len(questions),
            "passing_score": passing_score,
            "time_spent": attempt.time_spent,
            "results": [
                {
                    "question_index": index,
                    "question": question.get("question", ""),
                    "user_answer": record["userAnswer"],
                    "correct_answer": question.get("correctAnswer"),
                    "is_correct": record["isCorrect"],
                    "explanation": question.get("explanation") or ""
                }
                for index, (question, record) in enumerate(zip(questions, answer_results))
            ]
        }

        self._apply_side_effects(db, quiz_id, module_id, user_id, result)

        return result

    def _record_attempt(
        self,
        db: Session,
        quiz: Quiz,
        user_id: UUID,
        answer_results: List[Dict[str, Any]],
        raw_score: int,
        time_spent: int
    ) -> Tuple[QuizAttempt, bool]:
        """
        Insert the attempt with the next attempt number

        A concurrent submission taking the same number violates the unique
        constraint; the insert is retried after re-reading the log, so the
        lockout check also sees the racing attempt.
        """
        quiz_id = quiz.id
        module_id = quiz.module_id
        passing_score = quiz.passing_score

        for retry in range(self.insert_retries):
            latest = attempt_log.get_latest_attempt(db, user_id, quiz_id)

            if latest and latest.score == PERFECT_SCORE:
                raise AlreadyCompletedError(latest.points_earned, latest.attempt_number)

            attempt_number = latest.attempt_number + 1 if latest else 1
            points_earned, can_re_attempt = self.award_points(raw_score, attempt_number)

            # Display score is the raw percentage; no adjustment is applied
            adjusted_score = raw_score

            attempt = QuizAttempt(
                user_id=user_id,
                quiz_id=quiz_id,
                module_id=module_id,
                attempt_number=attempt_number,
                answers=answer_results,
                score=raw_score,
                adjusted_score=adjusted_score,
                points_earned=points_earned,
                passed=adjusted_score >= passing_score,
                time_spent=time_spent or 0,
                status="completed"
            )

            try:
                db.add(attempt)
                db.commit()
                db.refresh(attempt)
                return attempt, can_re_attempt
            except IntegrityError as e:
                db.rollback()
                logger.warning(
                    f"Attempt number {attempt_number} taken for quiz={quiz_id} user={user_id} "
                    f"(retry {retry + 1}/{self.insert_retries}): {str(e.orig)}"
                )
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(f"Error saving quiz attempt: {str(e)}")
                raise PersistenceError("Failed to save quiz attempt") from e

        raise PersistenceError("Failed to save quiz attempt")

    def _apply_side_effects(
        self,
        db: Session,
        quiz_id: UUID,
        module_id: UUID,
        user_id: UUID,
        result: Dict[str, Any]
    ) -> None:
        """Secondary bookkeeping; the attempt is already committed"""
        try:
            analytics_service.update_quiz_analytics(
                db, quiz_id, result["adjusted_score"], result["passed"]
            )
        except Exception as e:
            db.rollback()
            logger.error(f"Quiz analytics update skipped for {quiz_id}: {str(e)}")

        try:
            progress_service.record_quiz_result(
                db,
                user_id=user_id,
                module_id=module_id,
                quiz_id=quiz_id,
                score=result["adjusted_score"],
                time_spent=result["time_spent"]
            )
        except Exception as e:
            db.rollback()
            logger.warning(f"Progress update skipped for user {user_id}: {str(e)}")

        cache_service.invalidate_leaderboard()

    def get_completion_status(self, db: Session, quiz_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """Whether the user's latest attempt locked the quiz with a perfect score"""
        latest = attempt_log.get_latest_attempt(db, user_id, quiz_id)

        if latest and latest.score == PERFECT_SCORE:
            return {"is_completed": True, "user_score": latest.points_earned}

        return {"is_completed": False, "user_score": None}

    def get_attempt_history(self, db: Session, quiz_id: UUID, user_id: UUID) -> Dict[str, Any]:
        """All of a user's attempts on a quiz with their best display score"""
        attempts = attempt_log.get_attempts(db, user_id, quiz_id)

        return {
            "attempts": [
                {
                    "attempt_id": a.id,
                    "attempt_number": a.attempt_number,
                    "score": a.score,
                    "adjusted_score": a.adjusted_score,
                    "points_earned": a.points_earned,
                    "passed": a.passed,
                    "status": a.status,
                    "time_spent": a.time_spent,
                    "created_at": a.created_at
                }
                for a in attempts
            ],
            "best_score": max((a.adjusted_score for a in attempts), default=0),
            "latest_attempt_number": attempts[-1].attempt_number if attempts else 0,
            "is_completed": bool(attempts) and attempts[-1].score == PERFECT_SCORE
        }


# Global instance
scoring_service = ScoringService(
    reattempt_point_cap=settings.REATTEMPT_POINT_CAP,
    insert_retries=settings.ATTEMPT_INSERT_RETRIES
)
