"""Validated quiz-generation requests for the upload and catalog modes.

Both request types validate eagerly in their constructors so that malformed
input is rejected with :class:`~quizgen.errors.ValidationError` before the API
client ever builds an HTTP request.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from .core.config import DIFFICULTIES, MAX_QUESTIONS, MIN_QUESTIONS, PACES
from .errors import ValidationError

__all__ = [
    "PdfGenerationRequest",
    "CatalogGenerationRequest",
    "validate_num_questions",
]


def validate_num_questions(value: object) -> int:
    """Return ``value`` as an int within the allowed question-count range."""

    if isinstance(value, bool):
        raise ValidationError("Number of questions must be a whole number.")
    try:
        number = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "Number of questions must be a whole number."
        ) from exc
    if isinstance(value, float) and value != number:
        raise ValidationError("Number of questions must be a whole number.")
    if number < MIN_QUESTIONS:
        raise ValidationError(f"Must be at least {MIN_QUESTIONS}.")
    if number > MAX_QUESTIONS:
        raise ValidationError(f"Cannot exceed {MAX_QUESTIONS}.")
    return number


def _require_text(value: str, label: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required.")
    return text


def _require_choice(value: str, label: str, choices: tuple[str, ...]) -> str:
    text = _require_text(value, label).lower()
    if text not in choices:
        raise ValidationError(f"{label} must be one of {', '.join(choices)}.")
    return text


@dataclass(frozen=True)
class PdfGenerationRequest:
    """Upload-mode generation: a local PDF plus quiz parameters."""

    pdf_path: Path
    subject: str
    num_questions: int
    pace: str = "average"
    difficulty: str = "medium"
    student_class: str = "XII"

    def __post_init__(self) -> None:
        path = Path(self.pdf_path).expanduser()
        if not path.is_file():
            raise ValidationError("A PDF file is required.")
        if path.suffix.lower() != ".pdf":
            raise ValidationError(f"Expected a .pdf file, got {path.name}.")
        object.__setattr__(self, "pdf_path", path)
        object.__setattr__(
            self, "subject", _require_text(self.subject, "Subject")
        )
        object.__setattr__(
            self, "num_questions", validate_num_questions(self.num_questions)
        )
        object.__setattr__(
            self, "pace", _require_choice(self.pace, "Pace", PACES)
        )
        object.__setattr__(
            self,
            "difficulty",
            _require_choice(self.difficulty, "Difficulty", DIFFICULTIES),
        )
        object.__setattr__(
            self,
            "student_class",
            _require_text(self.student_class, "Student class"),
        )

    def to_form(self) -> Dict[str, str]:
        return {
            "subject": self.subject,
            "numQuestions": str(self.num_questions),
            "pace": self.pace,
            "difficulty": self.difficulty,
            "studentClass": self.student_class,
        }


@dataclass(frozen=True)
class CatalogGenerationRequest:
    """Catalog-mode generation from a class/subject/chapter selection."""

    chapter_ref: str
    num_questions: int
    student_class: str
    subject: str
    chapter: str
    pace: str = "average"
    difficulty: str = "medium"

    def __post_init__(self) -> None:
        for attr, label in (
            ("chapter_ref", "Chapter reference"),
            ("student_class", "Class"),
            ("subject", "Subject"),
            ("chapter", "Chapter"),
        ):
            value = _require_text(getattr(self, attr), label)
            object.__setattr__(self, attr, value)
        object.__setattr__(
            self, "num_questions", validate_num_questions(self.num_questions)
        )
        object.__setattr__(
            self, "pace", _require_choice(self.pace, "Pace", PACES)
        )
        object.__setattr__(
            self,
            "difficulty",
            _require_choice(self.difficulty, "Difficulty", DIFFICULTIES),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "fileId": self.chapter_ref,
            "numQuestions": self.num_questions,
            "pace": self.pace,
            "difficulty": self.difficulty,
            "studentClass": self.student_class,
            "subject": self.subject,
            "chapter": self.chapter,
        }
