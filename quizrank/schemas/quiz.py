"""
Pydantic schemas for quiz submission and attempt history
"""
from pydantic import Field, StrictInt
from typing import List, Optional, Any
from uuid import UUID
from datetime import datetime

from quizrank.schemas.common import CamelModel


class QuizSubmission(CamelModel):
    """Schema for quiz submission; answers are option indexes aligned with the questions"""
    answers: List[Optional[StrictInt]] = Field(..., description="Selected option index per question, null when skipped")
    time_spent: int = Field(0, ge=0, description="Total time spent in seconds")


class QuestionResult(CamelModel):
    """Grading details for a single question"""
    question_index: int
    question: str
    user_answer: Optional[int] = None
    correct_answer: Any
    is_correct: bool
    explanation: str = ""


class QuizSubmissionResult(CamelModel):
    """Outcome of one recorded attempt"""
    attempt_id: UUID
    attempt_number: int
    score: int
    adjusted_score: int
    points_earned: int
    passed: bool
    status: str
    can_re_attempt: bool
    correct_answers: int
    total_questions: int
    passing_score: int
    time_spent: int
    results: List[QuestionResult]


class QuizSubmissionResponse(CamelModel):
    success: bool = True
    data: QuizSubmissionResult


class QuizQuestionView(CamelModel):
    """Question as shown to learners, without the answer key"""
    question: str
    options: List[str]


class QuizView(CamelModel):
    id: UUID
    module_id: UUID
    title: str
    description: str = ""
    passing_score: int
    total_questions: int
    questions: List[QuizQuestionView]


class QuizDetail(CamelModel):
    quiz: QuizView
    is_completed: bool
    user_score: Optional[int] = None


class QuizDetailResponse(CamelModel):
    success: bool = True
    data: QuizDetail


class AttemptSummary(CamelModel):
    attempt_id: UUID
    attempt_number: int
    score: int
    adjusted_score: int
    points_earned: int
    passed: bool
    status: str
    time_spent: int
    created_at: datetime


class AttemptHistory(CamelModel):
    attempts: List[AttemptSummary]
    best_score: int
    latest_attempt_number: int
    is_completed: bool


class AttemptHistoryResponse(CamelModel):
    success: bool = True
    data: AttemptHistory
