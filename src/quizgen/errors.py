"""Error taxonomy shared by the quizgen client components."""

from __future__ import annotations

import logging

__all__ = [
    "QuizgenError",
    "ValidationError",
    "FetchError",
    "StateViolation",
    "report_violation",
]


class QuizgenError(RuntimeError):
    """Base class for quizgen client failures."""


class ValidationError(QuizgenError):
    """Raised for malformed user input before any request is issued."""


class FetchError(QuizgenError):
    """Raised when a listing, quiz, submission or result request fails."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def message(self) -> str:
        return str(self)


class StateViolation(QuizgenError):
    """Raised when an operation is invoked while its precondition is false."""


def report_violation(
    message: str, *, strict: bool, logger: logging.Logger
) -> None:
    """Raise :class:`StateViolation` in strict mode, otherwise log it."""

    if strict:
        raise StateViolation(message)
    logger.warning("Ignored out-of-order operation: %s", message)
