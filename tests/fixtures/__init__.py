"""Shared testing fixtures and fakes for the quizgen test suite."""

from .backend import FakeBackend  # noqa: F401
from .catalog import (  # noqa: F401
    ControlledCatalog,
    StaticCatalog,
    document,
    folder,
    settle,
)
from .quizzes import quiz_payload, result_payload  # noqa: F401

__all__ = [
    "ControlledCatalog",
    "FakeBackend",
    "StaticCatalog",
    "document",
    "folder",
    "quiz_payload",
    "result_payload",
    "settle",
]
