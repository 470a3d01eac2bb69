"""Bearer token storage consumed by the API client."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Protocol

from .core.logging import get_logger

__all__ = [
    "TOKEN_ENV",
    "AuthSessionStore",
    "TokenStore",
]


TOKEN_ENV = "QUIZGEN_TOKEN"
TOKEN_FILENAME = "token"


class AuthSessionStore(Protocol):
    """Narrow view of the authentication session used by the client core."""

    def current_token(self) -> Optional[str]: ...

    def on_unauthorized(self) -> None: ...


class TokenStore:
    """File-backed token store living in the workspace ``auth`` directory.

    The token is treated as an opaque string. When no token file exists the
    ``QUIZGEN_TOKEN`` environment variable is used instead.
    """

    def __init__(
        self,
        directory: Path,
        *,
        env: Mapping[str, str] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.path = directory / TOKEN_FILENAME
        self._env = os.environ if env is None else env
        self._logger = logger or get_logger("auth")
        self._revoked = False

    def current_token(self) -> Optional[str]:
        if self.path.exists():
            token = self.path.read_text(encoding="utf-8").strip()
            if token:
                return token
        if self._revoked:
            return None
        token = (self._env.get(TOKEN_ENV) or "").strip()
        return token or None

    def login(self, token: str) -> Path:
        token = token.strip()
        if not token:
            raise ValueError("Token must be a non-empty string.")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token + "\n", encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except PermissionError:  # pragma: no cover - depends on filesystem
            pass
        self._revoked = False
        self._logger.info("Stored bearer token", extra={"path": self.path})
        return self.path

    def logout(self) -> bool:
        """Forget the stored token; returns whether a token file existed."""

        self._revoked = True
        if not self.path.exists():
            return False
        self.path.unlink()
        self._logger.info("Removed bearer token", extra={"path": self.path})
        return True

    def on_unauthorized(self) -> None:
        self._logger.warning("Backend rejected the bearer token")
        self.logout()
