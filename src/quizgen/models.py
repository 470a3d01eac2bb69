"""Immutable data structures exchanged between the quizgen components.

Every record is built from the JSON payloads returned by the quiz backend via a
``from_dict`` constructor. Constructors raise :class:`ValueError` for payloads
that do not match the expected shape so the HTTP layer can translate them into
fetch failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Sequence

__all__ = [
    "FOLDER_MIME_TYPE",
    "NodeKind",
    "ResourceNode",
    "Question",
    "Quiz",
    "AnswerRecord",
    "Analysis",
    "SubmissionResult",
    "ResultSummary",
]


FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class NodeKind(str, Enum):
    FOLDER = "folder"
    DOCUMENT = "document"


@dataclass(frozen=True)
class ResourceNode:
    """A child entry of the remote catalog hierarchy."""

    id: str
    name: str
    kind: NodeKind
    mime_type: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.kind is NodeKind.FOLDER

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ResourceNode":
        node_id = payload.get("id")
        if not node_id:
            raise ValueError("Catalog entry is missing an 'id'.")
        mime_type = payload.get("mimeType")
        raw_kind = payload.get("kind")
        if raw_kind:
            kind = NodeKind(str(raw_kind).lower())
        elif mime_type == FOLDER_MIME_TYPE:
            kind = NodeKind.FOLDER
        else:
            kind = NodeKind.DOCUMENT
        return cls(
            id=str(node_id),
            name=str(payload.get("name", "")),
            kind=kind,
            mime_type=str(mime_type) if mime_type is not None else None,
        )


@dataclass(frozen=True)
class Question:
    """A multiple-choice question; the answer stays hidden until scored."""

    question_id: int
    question_text: str
    options: tuple[str, ...]
    correct_answer: str | None = field(default=None, repr=False)
    explanation: str | None = field(default=None, repr=False)

    def has_option(self, answer: str) -> bool:
        return answer in self.options

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Question":
        options = payload.get("options")
        if not isinstance(options, Sequence) or isinstance(options, str):
            raise ValueError("Question options must be a list.")
        if not options:
            raise ValueError("Question options must not be empty.")
        correct = payload.get("correct_answer")
        explanation = payload.get("explanation")
        return cls(
            question_id=int(payload["question_id"]),
            question_text=str(payload.get("question_text", "")),
            options=tuple(str(option) for option in options),
            correct_answer=str(correct) if correct is not None else None,
            explanation=str(explanation) if explanation is not None else None,
        )


@dataclass(frozen=True)
class Quiz:
    id: str
    title: str
    questions: tuple[Question, ...]

    def question_for(self, question_id: int) -> Question | None:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Quiz":
        raw_questions = payload.get("questions") or []
        if not isinstance(raw_questions, Sequence):
            raise ValueError("Quiz questions must be a list.")
        questions = tuple(Question.from_dict(item) for item in raw_questions)
        seen: set[int] = set()
        for question in questions:
            if question.question_id in seen:
                raise ValueError(
                    f"Duplicate question id {question.question_id} in quiz."
                )
            seen.add(question.question_id)
        return cls(
            id=str(payload.get("_id", payload.get("id", ""))),
            title=str(payload.get("title", "")),
            questions=questions,
        )


@dataclass(frozen=True)
class AnswerRecord:
    question_id: int
    selected_answer: str
    is_correct: bool

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AnswerRecord":
        return cls(
            question_id=int(payload["question_id"]),
            selected_answer=str(payload.get("selected_answer", "")),
            is_correct=bool(payload.get("is_correct", False)),
        )


@dataclass(frozen=True)
class Analysis:
    """Remote feedback attached to a scored attempt."""

    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | None) -> "Analysis":
        if not payload:
            return cls()
        return cls(
            strengths=_string_tuple(payload.get("strengths")),
            weaknesses=_string_tuple(payload.get("weaknesses")),
            recommendations=_string_tuple(payload.get("recommendations")),
        )


@dataclass(frozen=True)
class SubmissionResult:
    """Scored attempt returned by the results endpoint."""

    id: str
    score: int
    total_questions: int
    answers: tuple[AnswerRecord, ...]
    analysis: Analysis
    quiz: Quiz | None = None
    created_at: datetime | None = None

    def answer_for(self, question_id: int) -> AnswerRecord | None:
        for record in self.answers:
            if record.question_id == question_id:
                return record
        return None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SubmissionResult":
        score, total = _score_pair(payload)
        quiz_payload = payload.get("quiz")
        quiz = (
            Quiz.from_dict(quiz_payload)
            if isinstance(quiz_payload, Mapping)
            else None
        )
        return cls(
            id=str(payload.get("_id", "")),
            score=score,
            total_questions=total,
            answers=tuple(
                AnswerRecord.from_dict(item)
                for item in payload.get("answers") or []
            ),
            analysis=Analysis.from_dict(payload.get("analysis")),
            quiz=quiz,
            created_at=_parse_timestamp(payload.get("createdAt")),
        )


@dataclass(frozen=True)
class ResultSummary:
    """One entry of the past-results listing."""

    id: str
    quiz_title: str
    score: int
    total_questions: int
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ResultSummary":
        quiz = payload.get("quiz")
        title = quiz.get("title", "") if isinstance(quiz, Mapping) else ""
        score, total = _score_pair(payload)
        return cls(
            id=str(payload.get("_id", "")),
            quiz_title=str(title),
            score=score,
            total_questions=total,
            created_at=_parse_timestamp(payload.get("createdAt")),
        )


def _score_pair(payload: Mapping[str, Any]) -> tuple[int, int]:
    score = int(payload["score"])
    total = int(payload["totalQuestions"])
    if total <= 0:
        raise ValueError("Result must cover at least one question.")
    if not 0 <= score <= total:
        raise ValueError(f"Score {score} is outside 0..{total}.")
    return score, total


def _string_tuple(value: object) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Sequence):
        raise ValueError("Expected a list of strings.")
    return tuple(str(item) for item in value)


def _parse_timestamp(value: object) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
