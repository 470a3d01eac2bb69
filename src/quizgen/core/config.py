"""TOML configuration for the quizgen client.

The config file is optional. Values are merged over packaged defaults, unknown
keys are rejected, and each field is validated into a frozen dataclass tree so
the rest of the client can rely on well-typed settings.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - should never happen
    raise RuntimeError("Python 3.11+ required for tomllib support") from exc

from . import workspace as workspace_mod


CONFIG_PATH_ENV = "QUIZGEN_CONFIG"
API_URL_ENV = "QUIZGEN_API_URL"
CONFIG_FILENAME = "quizgen.toml"

PACES = ("slow", "average", "fast")
DIFFICULTIES = ("easy", "medium", "hard")
MIN_QUESTIONS = 1
MAX_QUESTIONS = 10


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ApiConfig:
    base_url: str
    timeout_seconds: float


@dataclass(frozen=True)
class QuizDefaults:
    num_questions: int
    pace: str
    difficulty: str
    student_class: str
    document_mime_type: str


@dataclass(frozen=True)
class SessionConfig:
    strict: bool
    show_timer: bool


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class ClientConfig:
    api: ApiConfig
    quiz: QuizDefaults
    session: SessionConfig
    logging: LoggingConfig


def _merge_dict(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        if isinstance(base[key], MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted, type(value).__name__
                    )
                )
            _merge_dict(base[key], value, path=f"{dotted}.")
        else:
            base[key] = value


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_choice(value: Any, *, field: str, choices: tuple[str, ...]) -> str:
    text = _require_string(value, field=field).lower()
    if text not in choices:
        raise ConfigError(f"'{field}' must be one of {', '.join(choices)}.")
    return text


def _build_api(section: Mapping[str, Any], env: Mapping[str, str]) -> ApiConfig:
    base_url = env.get(API_URL_ENV) or section.get("base_url")
    base_url = _require_string(base_url, field="api.base_url")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigError("'api.base_url' must be an http(s) URL.")
    timeout = section.get("timeout_seconds")
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ConfigError("'api.timeout_seconds' must be a number.")
    if timeout <= 0:
        raise ConfigError("'api.timeout_seconds' must be positive.")
    return ApiConfig(base_url=base_url.rstrip("/"), timeout_seconds=float(timeout))


def _build_quiz(section: Mapping[str, Any]) -> QuizDefaults:
    num_questions = section.get("num_questions")
    if (
        isinstance(num_questions, bool)
        or not isinstance(num_questions, int)
        or not MIN_QUESTIONS <= num_questions <= MAX_QUESTIONS
    ):
        raise ConfigError(
            f"'quiz.num_questions' must be an integer between "
            f"{MIN_QUESTIONS} and {MAX_QUESTIONS}."
        )
    return QuizDefaults(
        num_questions=num_questions,
        pace=_require_choice(section.get("pace"), field="quiz.pace", choices=PACES),
        difficulty=_require_choice(
            section.get("difficulty"),
            field="quiz.difficulty",
            choices=DIFFICULTIES,
        ),
        student_class=_require_string(
            section.get("student_class"), field="quiz.student_class"
        ),
        document_mime_type=_require_string(
            section.get("document_mime_type"),
            field="quiz.document_mime_type",
        ),
    )


def _build_logging(section: Mapping[str, Any]) -> LoggingConfig:
    level = _require_string(section.get("level"), field="logging.level").upper()
    if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigError(
            "logging.level must be one of "
            "DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    verbose = _require_bool(section.get("verbose"), field="logging.verbose")
    return LoggingConfig(level=level, verbose=verbose)


def _build_config(
    tree: Mapping[str, Any], env: Mapping[str, str]
) -> ClientConfig:
    session = tree["session"]
    return ClientConfig(
        api=_build_api(tree["api"], env),
        quiz=_build_quiz(tree["quiz"]),
        session=SessionConfig(
            strict=_require_bool(session.get("strict"), field="session.strict"),
            show_timer=_require_bool(
                session.get("show_timer"), field="session.show_timer"
            ),
        ),
        logging=_build_logging(tree["logging"]),
    )


def _load_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_config_path(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace: Optional[workspace_mod.WorkspaceLayout] = None,
) -> tuple[Path, bool]:
    """Return the config path and whether the caller asked for it explicitly."""

    env_map = os.environ if env is None else env
    if explicit_path is not None:
        return explicit_path.expanduser().resolve(), True
    env_override = env_map.get(CONFIG_PATH_ENV)
    if env_override:
        return Path(env_override).expanduser().resolve(), True
    layout = workspace or workspace_mod.ensure_workspace(env=env_map)
    return layout.path_for("config") / CONFIG_FILENAME, False


def load_config(
    *,
    explicit_path: Optional[Path] = None,
    env: Mapping[str, str] | None = None,
    workspace: Optional[workspace_mod.WorkspaceLayout] = None,
) -> ClientConfig:
    """Load the TOML config, applying defaults and validation.

    A missing file at the default workspace location yields the defaults; a
    missing file that was requested explicitly is an error.
    """

    env_map = os.environ if env is None else env
    path, explicit = resolve_config_path(
        explicit_path=explicit_path, env=env_map, workspace=workspace
    )
    tree = default_tree()
    if explicit or path.exists():
        toml_data = _load_toml(path)
        _merge_dict(tree, toml_data)
    return _build_config(tree, env_map)


def default_tree() -> Dict[str, Any]:
    """Return a copy of the default configuration tree."""

    return copy.deepcopy(_DEFAULTS)


def config_template() -> str:
    return _CONFIG_TEMPLATE.strip() + "\n"


def write_template(
    path: Path, *, overwrite: bool = False, mode: int = 0o600
) -> Path:
    """Write the default template to ``path``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as fh:
        fh.write(config_template())
    try:
        path.chmod(mode)
    except PermissionError:
        pass
    return path


_DEFAULTS: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:5000/api",
        "timeout_seconds": 120,
    },
    "quiz": {
        "num_questions": 5,
        "pace": "average",
        "difficulty": "medium",
        "student_class": "XII",
        "document_mime_type": "application/pdf",
    },
    "session": {
        "strict": True,
        "show_timer": True,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


_CONFIG_TEMPLATE = """
# quizgen client configuration

[api]
# Backend base URL (QUIZGEN_API_URL overrides this value)
base_url = "http://localhost:5000/api"
# Quiz generation and scoring run remotely and can take a while
timeout_seconds = 120

[quiz]
# Default number of questions per generated quiz (1-10)
num_questions = 5
# One of: slow, average, fast
pace = "average"
# One of: easy, medium, hard
difficulty = "medium"
student_class = "XII"
# Chapter documents listed by the catalog must have this MIME type
document_mime_type = "application/pdf"

[session]
# Raise on out-of-order operations instead of ignoring them
strict = true
# Show the elapsed-time clock while answering
show_timer = true

[logging]
level = "INFO"
verbose = false
"""
