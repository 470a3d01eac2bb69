from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path

from quizgen.core import logging as core_logging
from quizgen.models import NodeKind


def _close(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_configure_logger_writes_json(tmp_path):
    log_dir = tmp_path / "logs"
    logger, log_path = core_logging.configure_logger(
        "quizgen.test", log_dir=log_dir, level="INFO"
    )

    logger.info("hello world", extra={"quiz_id": "Q1", "answered": 3})
    logger.debug("not written")

    class _Helper:
        def __repr__(self):  # noqa: D401
            return "helper"

    try:
        raise ValueError("boom")
    except ValueError:
        logger.exception(
            "with error",
            extra={
                "kind": NodeKind.FOLDER,
                "paths": [Path(log_dir), 1],
                "obj": _Helper(),
            },
        )
    for handler in logger.handlers:
        handler.flush()

    assert log_path == log_dir / "test.log"
    contents = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert len(contents) == 2
    first = json.loads(contents[0])
    assert first["message"] == "hello world"
    assert first["logger"] == "quizgen.test"
    assert first["extra"] == {"quiz_id": "Q1", "answered": 3}

    payload = json.loads(contents[-1])
    assert payload["exception"]
    assert payload["extra"]["kind"] == "folder"
    assert payload["extra"]["paths"] == [str(log_dir), 1]
    assert payload["extra"]["obj"] == "helper"
    _close(logger)


def test_component_loggers_propagate_into_configured_root(tmp_path):
    logger, log_path = core_logging.configure_logger(
        "quizgen", log_dir=tmp_path, level="DEBUG"
    )

    core_logging.get_logger("hierarchy").debug(
        "Fetching listing", extra={"seq": 2}
    )
    for handler in logger.handlers:
        handler.flush()

    line = json.loads(log_path.read_text(encoding="utf-8").splitlines()[0])
    assert line["logger"] == "quizgen.hierarchy"
    assert line["extra"] == {"seq": 2}
    _close(logger)


def test_console_handler_toggle(tmp_path):
    log_dir = tmp_path / "logs"
    name = "quizgen.test_toggle"

    def consoles(logger):
        return [
            handler
            for handler in logger.handlers
            if getattr(handler, "_quizgen_console", False)
        ]

    logger, _ = core_logging.configure_logger(
        name, log_dir=log_dir, verbose=True
    )
    assert len(consoles(logger)) == 1

    core_logging.configure_logger(name, log_dir=log_dir, verbose=True)
    assert len(consoles(logger)) == 1
    assert len(logger.handlers) == 2

    core_logging.configure_logger(name, log_dir=log_dir, verbose=False)
    assert not consoles(logger)
    _close(logger)


def test_configure_logger_fallback_directory(tmp_path, monkeypatch):
    target = tmp_path / "blocked"
    monkeypatch.setattr(tempfile, "gettempdir", lambda: str(tmp_path))
    original_mkdir = Path.mkdir

    def fake_mkdir(self, *args, **kwargs):  # noqa: D401, ANN001
        if self == target:
            raise PermissionError("denied")
        return original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fake_mkdir)

    logger, log_path = core_logging.configure_logger(
        "quizgen.test_blocked", log_dir=target
    )

    assert log_path.parent == tmp_path / "quizgen-logs"
    assert log_path.exists()
    _close(logger)


def test_coerce_level_defaults():
    assert core_logging._coerce_level("bogus") == logging.INFO
    assert core_logging._coerce_level("warning") == logging.WARNING
