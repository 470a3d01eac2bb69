"""Async HTTP client for the quiz backend.

Every endpoint wraps its payload in a ``{"data": ...}`` envelope and reports
errors as ``{"message": ...}``. :class:`ApiClient` unwraps the envelope,
attaches the bearer token supplied by an
:class:`~quizgen.auth.AuthSessionStore`, and converts transport failures,
error statuses and malformed payloads into :class:`~quizgen.errors.FetchError`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

import httpx

from .auth import AuthSessionStore
from .core.logging import get_logger
from .errors import FetchError
from .generation import CatalogGenerationRequest, PdfGenerationRequest
from .models import Quiz, ResourceNode, ResultSummary, SubmissionResult

__all__ = ["ApiClient"]

T = TypeVar("T")


class ApiClient:
    """Thin async wrapper around the quiz REST surface."""

    def __init__(
        self,
        base_url: str,
        *,
        auth: AuthSessionStore | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._auth = auth
        self._logger = logger or get_logger("api")
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def list_drive_contents(
        self, folder_id: Optional[str] = None
    ) -> list[ResourceNode]:
        params = {"folderId": folder_id} if folder_id else None
        data = await self._request("GET", "/quiz/drive-contents", params=params)
        return self._parse_list(data, ResourceNode.from_dict, "catalog listing")

    async def generate_from_pdf(self, request: PdfGenerationRequest) -> str:
        files = {
            "pdf": (
                request.pdf_path.name,
                request.pdf_path.read_bytes(),
                "application/pdf",
            )
        }
        data = await self._request(
            "POST", "/quiz/generate-pdf", data=request.to_form(), files=files
        )
        return self._parse_id(data, "generated quiz")

    async def generate_from_catalog(
        self, request: CatalogGenerationRequest
    ) -> str:
        data = await self._request(
            "POST", "/quiz/generate-ncert", json=request.to_payload()
        )
        return self._parse_id(data, "generated quiz")

    async def fetch_quiz(self, quiz_id: str) -> Quiz:
        data = await self._request("GET", f"/quiz/{quiz_id}")
        return self._parse(data, Quiz.from_dict, "quiz")

    async def submit_answers(
        self, quiz_id: str, records: Sequence[Mapping[str, Any]]
    ) -> str:
        payload = {"quizId": quiz_id, "answers": [dict(r) for r in records]}
        data = await self._request("POST", "/test/submit", json=payload)
        return self._parse_id(data, "submission")

    async def fetch_result(self, result_id: str) -> SubmissionResult:
        data = await self._request("GET", f"/test/results/{result_id}")
        return self._parse(data, SubmissionResult.from_dict, "result")

    async def list_results(self) -> list[ResultSummary]:
        data = await self._request("GET", "/test/results")
        return self._parse_list(data, ResultSummary.from_dict, "result history")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers: dict[str, str] = {}
        token = self._auth.current_token() if self._auth else None
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._logger.debug(
            "Issuing request", extra={"method": method, "path": path}
        )
        try:
            response = await self._client.request(
                method, path, headers=headers, **kwargs
            )
        except httpx.HTTPError as exc:
            self._logger.warning(
                "Request failed before a response arrived",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            raise FetchError(
                f"Could not reach the quiz service ({exc.__class__.__name__})."
            ) from exc

        if response.status_code == httpx.codes.UNAUTHORIZED and self._auth:
            self._auth.on_unauthorized()

        if response.is_error:
            message = _error_message(response)
            self._logger.warning(
                "Request returned an error status",
                extra={
                    "method": method,
                    "path": path,
                    "status": response.status_code,
                    "error": message,
                },
            )
            raise FetchError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise FetchError(
                "The quiz service returned a non-JSON response.",
                status_code=response.status_code,
            ) from exc
        if not isinstance(body, Mapping) or "data" not in body:
            raise FetchError(
                "The quiz service returned an unexpected response.",
                status_code=response.status_code,
            )
        return body["data"]

    def _parse(self, data: Any, parser: Callable[[Any], T], label: str) -> T:
        if not isinstance(data, Mapping):
            raise FetchError(f"Malformed {label} payload.")
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(f"Malformed {label} payload: {exc}") from exc

    def _parse_list(
        self, data: Any, parser: Callable[[Any], T], label: str
    ) -> list[T]:
        if not isinstance(data, list):
            raise FetchError(f"Malformed {label} payload.")
        return [self._parse(item, parser, label) for item in data]

    def _parse_id(self, data: Any, label: str) -> str:
        identifier = data.get("_id") if isinstance(data, Mapping) else None
        if not identifier:
            raise FetchError(f"The {label} response did not include an id.")
        return str(identifier)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return f"Request failed with status {response.status_code}."
