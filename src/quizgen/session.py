"""Finite-state machine for a single quiz attempt.

``LOADING → READY → SUBMITTING → COMPLETED`` is the success path. A failed
submission returns to ``READY`` with every captured answer intact; a failed
quiz load ends in the terminal ``FAILED`` state and a new machine is needed.
State changes happen synchronously before the first ``await`` of an
operation, which is what keeps at most one submission in flight on a
single-threaded event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Protocol, Sequence

from .core.logging import get_logger
from .errors import FetchError, ValidationError, report_violation
from .models import Question, Quiz, SubmissionResult

__all__ = [
    "SUBMISSION_FAILED_NOTICE",
    "QuizSessionMachine",
    "QuizSessionState",
    "SessionStatus",
    "run_clock",
]


SUBMISSION_FAILED_NOTICE = (
    "Your answers have been preserved; you can submit again."
)


class SessionStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class QuizSessionState:
    quiz_id: str
    status: SessionStatus
    current_index: int = 0
    answers: dict[int, str] = field(default_factory=dict)
    elapsed_seconds: int = 0


class QuizSource(Protocol):
    async def fetch_quiz(self, quiz_id: str) -> Quiz: ...


class AnswerSubmitter(Protocol):
    def format(self, answers: Mapping[int, str]) -> list[dict[str, object]]: ...

    async def submit(
        self, quiz_id: str, records: Sequence[Mapping[str, object]]
    ) -> SubmissionResult: ...


class QuizSessionMachine:
    """Owns the state of one quiz attempt from load to completion."""

    def __init__(
        self,
        source: QuizSource,
        submitter: AnswerSubmitter,
        *,
        strict: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self._source = source
        self._submitter = submitter
        self._strict = strict
        self._logger = logger or get_logger("session")
        self._state: Optional[QuizSessionState] = None
        self.quiz: Optional[Quiz] = None
        self.result: Optional[SubmissionResult] = None
        self.last_error: Optional[str] = None

    @property
    def state(self) -> Optional[QuizSessionState]:
        """Return a copy of the current state; ``None`` before loading."""

        if self._state is None:
            return None
        return replace(self._state, answers=dict(self._state.answers))

    @property
    def status(self) -> Optional[SessionStatus]:
        return self._state.status if self._state else None

    @property
    def current_question(self) -> Optional[Question]:
        if self.quiz is None or self._state is None:
            return None
        return self.quiz.questions[self._state.current_index]

    def answer_for(self, question_id: int) -> Optional[str]:
        if self._state is None:
            return None
        return self._state.answers.get(question_id)

    async def load_quiz(self, quiz_id: str) -> Optional[Quiz]:
        if self._state is not None:
            report_violation(
                "A quiz can only be loaded into a fresh session.",
                strict=self._strict,
                logger=self._logger,
            )
            return None

        self._state = QuizSessionState(
            quiz_id=quiz_id, status=SessionStatus.LOADING
        )
        try:
            quiz = await self._source.fetch_quiz(quiz_id)
            if not quiz.questions:
                raise FetchError("The quiz has no questions.")
        except FetchError as exc:
            self._state.status = SessionStatus.FAILED
            self.last_error = (
                f"Could not load the quiz: {exc} "
                "Please generate a new one."
            )
            self._logger.error(
                "Quiz load failed",
                extra={"quiz_id": quiz_id, "error": str(exc)},
            )
            return None
        except BaseException:
            self._state.status = SessionStatus.FAILED
            raise

        self.quiz = quiz
        self._state = QuizSessionState(
            quiz_id=quiz_id, status=SessionStatus.READY
        )
        self._logger.info(
            "Quiz loaded",
            extra={"quiz_id": quiz_id, "questions": len(quiz.questions)},
        )
        return quiz

    def select_answer(self, question_id: int, answer: str) -> None:
        if not self._require_ready("select an answer"):
            return
        assert self.quiz is not None and self._state is not None
        question = self.quiz.question_for(question_id)
        if question is None:
            raise ValidationError(f"Unknown question id {question_id}.")
        if not question.has_option(answer):
            raise ValidationError(
                f"'{answer}' is not an option for question {question_id}."
            )
        self._state.answers[question_id] = answer

    def go_to(self, index: int) -> None:
        if not self._require_ready("navigate"):
            return
        assert self.quiz is not None and self._state is not None
        total = len(self.quiz.questions)
        if not 0 <= index < total:
            raise ValidationError(
                f"Question index {index} is outside 0..{total - 1}."
            )
        self._state.current_index = index

    def next(self) -> None:
        if self._state is not None and self.quiz is not None:
            last = len(self.quiz.questions) - 1
            self.go_to(min(self._state.current_index + 1, last))

    def previous(self) -> None:
        if self._state is not None:
            self.go_to(max(self._state.current_index - 1, 0))

    def tick(self) -> None:
        """Advance the elapsed-time clock by one second.

        Safe in any state; a machine that has not started loading has no
        clock to advance.
        """

        if self._state is not None:
            self._state.elapsed_seconds += 1

    async def submit(self) -> Optional[SubmissionResult]:
        """Submit the captured answers; ``None`` means the attempt failed.

        On failure the session is back in ``READY`` with the same answers and
        position, and :attr:`last_error` holds the message to show.
        """

        if not self._require_ready("submit"):
            return None
        state = self._state
        assert state is not None and self.quiz is not None
        question = self.quiz.questions[state.current_index]
        if question.question_id not in state.answers:
            raise ValidationError(
                "Answer the current question before submitting."
            )

        state.status = SessionStatus.SUBMITTING
        self.last_error = None
        records = self._submitter.format(state.answers)
        self._logger.info(
            "Submitting answers",
            extra={"quiz_id": state.quiz_id, "answered": len(records)},
        )
        try:
            result = await self._submitter.submit(state.quiz_id, records)
        except FetchError as exc:
            state.status = SessionStatus.READY
            self.last_error = (
                f"Failed to submit test: {exc} {SUBMISSION_FAILED_NOTICE}"
            )
            self._logger.warning(
                "Submission failed; session kept open",
                extra={"quiz_id": state.quiz_id, "error": str(exc)},
            )
            return None
        except BaseException:
            state.status = SessionStatus.READY
            raise

        state.status = SessionStatus.COMPLETED
        self.result = result
        self._logger.info(
            "Submission completed",
            extra={
                "quiz_id": state.quiz_id,
                "result_id": result.id,
                "elapsed_seconds": state.elapsed_seconds,
            },
        )
        return result

    def _require_ready(self, action: str) -> bool:
        status = self.status
        if status is SessionStatus.READY:
            return True
        label = status.value if status else "not loaded"
        report_violation(
            f"Cannot {action} while the session is {label}.",
            strict=self._strict,
            logger=self._logger,
        )
        return False


async def run_clock(
    machine: QuizSessionMachine, *, interval: float = 1.0
) -> None:
    """Tick ``machine`` every ``interval`` seconds until cancelled."""

    while True:
        await asyncio.sleep(interval)
        machine.tick()
