"""Client-side orchestration for AI-generated quizzes."""

from .api import ApiClient
from .auth import AuthSessionStore, TokenStore
from .errors import FetchError, QuizgenError, StateViolation, ValidationError
from .generation import CatalogGenerationRequest, PdfGenerationRequest
from .hierarchy import LevelCache, LevelStatus, ResourceHierarchyResolver
from .models import (
    AnswerRecord,
    Analysis,
    NodeKind,
    Question,
    Quiz,
    ResourceNode,
    ResultSummary,
    SubmissionResult,
)
from .session import QuizSessionMachine, QuizSessionState, SessionStatus
from .submission import (
    HistoryStats,
    SubmissionCoordinator,
    band,
    percentage,
    summarize_history,
)

__all__ = [
    "ApiClient",
    "AuthSessionStore",
    "TokenStore",
    "FetchError",
    "QuizgenError",
    "StateViolation",
    "ValidationError",
    "CatalogGenerationRequest",
    "PdfGenerationRequest",
    "LevelCache",
    "LevelStatus",
    "ResourceHierarchyResolver",
    "AnswerRecord",
    "Analysis",
    "NodeKind",
    "Question",
    "Quiz",
    "ResourceNode",
    "ResultSummary",
    "SubmissionResult",
    "QuizSessionMachine",
    "QuizSessionState",
    "SessionStatus",
    "HistoryStats",
    "SubmissionCoordinator",
    "band",
    "percentage",
    "summarize_history",
]
