"""Answer submission protocol and score presentation policy."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from fractions import Fraction
from typing import Literal, Mapping, Optional, Protocol, Sequence

from .core.logging import get_logger
from .errors import StateViolation, ValidationError
from .models import SubmissionResult

__all__ = [
    "Band",
    "HistoryStats",
    "ScoringService",
    "SubmissionCoordinator",
    "band",
    "percentage",
    "summarize_history",
]

Band = Literal["high", "mid", "low"]
RECENT_WINDOW = timedelta(days=7)
HIGH_THRESHOLD = 80
MID_THRESHOLD = 60


class _Scored(Protocol):
    score: int
    total_questions: int


class ScoringService(Protocol):
    async def submit_answers(
        self, quiz_id: str, records: Sequence[Mapping[str, object]]
    ) -> str: ...

    async def fetch_result(self, result_id: str) -> SubmissionResult: ...


def percentage(result: _Scored) -> int:
    """Return the score as a whole percentage, rounding halves up."""

    if result.total_questions == 0:
        raise StateViolation("Cannot compute a percentage for zero questions.")
    return _round_half_up(Fraction(result.score * 100, result.total_questions))


def band(value: int) -> Band:
    """Map a percentage onto the qualitative tier shown everywhere."""

    if not 0 <= value <= 100:
        raise ValidationError(f"Percentage {value} is outside 0..100.")
    if value >= HIGH_THRESHOLD:
        return "high"
    if value >= MID_THRESHOLD:
        return "mid"
    return "low"


def _round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


class SubmissionCoordinator:
    """Formats answers, submits them and fetches the scored result.

    The submit endpoint is not idempotent: once it has accepted an answer set
    the returned result id is remembered, so a retry after a failed result
    fetch only repeats the fetch instead of recording a second attempt.
    """

    def __init__(
        self,
        service: ScoringService,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._service = service
        self._logger = logger or get_logger("submission")
        self._accepted: dict[str, tuple[frozenset[tuple[int, str]], str]] = {}

    @staticmethod
    def format(answers: Mapping[int, str]) -> list[dict[str, object]]:
        return [
            {"question_id": int(question_id), "selected_answer": answer}
            for question_id, answer in answers.items()
            if answer is not None
        ]

    percentage = staticmethod(percentage)
    band = staticmethod(band)

    async def submit(
        self, quiz_id: str, records: Sequence[Mapping[str, object]]
    ) -> SubmissionResult:
        key = frozenset(
            (int(r["question_id"]), str(r["selected_answer"])) for r in records
        )
        accepted = self._accepted.get(quiz_id)
        if accepted is not None and accepted[0] == key:
            result_id = accepted[1]
            self._logger.info(
                "Reusing accepted submission",
                extra={"quiz_id": quiz_id, "result_id": result_id},
            )
        else:
            result_id = await self._service.submit_answers(quiz_id, records)
            self._accepted[quiz_id] = (key, result_id)
            self._logger.info(
                "Submission accepted",
                extra={
                    "quiz_id": quiz_id,
                    "result_id": result_id,
                    "answered": len(records),
                },
            )
        result = await self._service.fetch_result(result_id)
        self._accepted.pop(quiz_id, None)
        return result


@dataclass(frozen=True)
class HistoryStats:
    total_quizzes: int = 0
    average_score: int = 0
    best_score: int = 0
    recent_activity: int = 0


class _Dated(_Scored, Protocol):
    created_at: Optional[datetime]


def summarize_history(
    results: Sequence[_Dated], *, now: datetime | None = None
) -> HistoryStats:
    """Compute dashboard statistics from past results."""

    if not results:
        return HistoryStats()
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    scores = [percentage(result) for result in results]
    cutoff = current - RECENT_WINDOW
    recent = 0
    for result in results:
        created = result.created_at
        if created is None:
            continue
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        if created > cutoff:
            recent += 1
    return HistoryStats(
        total_quizzes=len(results),
        average_score=_round_half_up(Fraction(sum(scores), len(scores))),
        best_score=max(scores),
        recent_activity=recent,
    )
