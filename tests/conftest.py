from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import FakeBackend  # noqa: E402
from fixtures.backend import BASE_URL  # noqa: E402
from quizgen.api import ApiClient  # noqa: E402


class _StaticAuth:
    def __init__(self, token: str | None = "tok-123") -> None:
        self.token = token
        self.unauthorized_calls = 0

    def current_token(self) -> str | None:
        return self.token

    def on_unauthorized(self) -> None:
        self.unauthorized_calls += 1
        self.token = None


@pytest.fixture(autouse=True)
def isolated_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Point the workspace at tmp and hide ambient quizgen settings."""

    home = tmp_path / "quizgen-home"
    monkeypatch.setenv("QUIZGEN_DATA_HOME", str(home))
    for name in ("QUIZGEN_TOKEN", "QUIZGEN_API_URL", "QUIZGEN_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield home


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def auth() -> _StaticAuth:
    return _StaticAuth()


@pytest.fixture
def make_client(
    backend: FakeBackend, auth: _StaticAuth
) -> Callable[[], ApiClient]:
    """Build an ``ApiClient`` wired to the fake backend.

    The client has to be created inside the event loop that uses it, so tests
    receive a factory rather than an instance.
    """

    def _factory() -> ApiClient:
        return ApiClient(BASE_URL, auth=auth, transport=backend.transport())

    return _factory


@pytest.fixture(autouse=True)
def reset_quizgen_logger() -> Iterator[None]:
    """Undo handlers and propagation changes made by ``configure_logger``."""

    yield
    logger = logging.getLogger("quizgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
