"""Cascading class → subject → chapter picker backed by catalog listings.

The resolver keeps a three-slot selection path and one cache per level. Each
fetch is tagged with the level's request sequence number; a response is only
applied when its tag is still the level's current sequence, so a listing that
was superseded by a newer selection can never overwrite the newer children.
Fetches run as fire-and-forget ``asyncio`` tasks and are never cancelled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence

from .core.logging import get_logger
from .errors import FetchError, ValidationError, report_violation
from .generation import CatalogGenerationRequest
from .models import NodeKind, ResourceNode

__all__ = [
    "DEPTH",
    "LEVEL_NAMES",
    "LevelCache",
    "LevelStatus",
    "RemoteCatalog",
    "ResourceHierarchyResolver",
]


DEPTH = 3
LEVEL_NAMES = ("class", "subject", "chapter")


class LevelStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class LevelCache:
    """Snapshot of the child listing shown at one level."""

    status: LevelStatus = LevelStatus.IDLE
    items: tuple[ResourceNode, ...] = ()
    request_seq: int = 0
    error: Optional[str] = None


class RemoteCatalog(Protocol):
    async def list_drive_contents(
        self, folder_id: Optional[str] = None
    ) -> Sequence[ResourceNode]: ...


class ResourceHierarchyResolver:
    """Owns the selection path and level caches for one configuration step.

    Must be created and driven from inside a running event loop because every
    fetch is scheduled as a task on it.
    """

    def __init__(
        self,
        catalog: RemoteCatalog,
        *,
        document_mime_type: str = "application/pdf",
        strict: bool = True,
        load_root: bool = True,
        logger: logging.Logger | None = None,
    ) -> None:
        self._catalog = catalog
        self._document_mime_type = document_mime_type
        self._strict = strict
        self._logger = logger or get_logger("hierarchy")
        self._selection: list[Optional[str]] = [None] * DEPTH
        self._caches: list[LevelCache] = [LevelCache() for _ in range(DEPTH)]
        self._tasks: set[asyncio.Task[None]] = set()
        if load_root:
            self.refresh_root()

    @property
    def selection(self) -> tuple[Optional[str], ...]:
        return tuple(self._selection)

    def cache(self, level_index: int) -> LevelCache:
        return self._caches[level_index]

    def is_complete(self) -> bool:
        return all(slot is not None for slot in self._selection)

    def refresh_root(self) -> None:
        """Fetch the top-level (class) listing."""

        self._fetch(0, None)

    def select_level(self, level_index: int, node_id: str) -> None:
        """Select ``node_id`` at ``level_index`` and reload the level below."""

        if level_index not in range(DEPTH):
            report_violation(
                f"Level {level_index} is outside 0..{DEPTH - 1}.",
                strict=self._strict,
                logger=self._logger,
            )
            return
        if level_index > 0 and self._selection[level_index - 1] is None:
            report_violation(
                "Cannot select a {0} before a {1} is selected.".format(
                    LEVEL_NAMES[level_index], LEVEL_NAMES[level_index - 1]
                ),
                strict=self._strict,
                logger=self._logger,
            )
            return

        self._selection[level_index] = node_id
        for deeper in range(level_index + 1, DEPTH):
            self._selection[deeper] = None
            previous = self._caches[deeper]
            self._caches[deeper] = LevelCache(
                request_seq=previous.request_seq + 1
            )
        self._logger.debug(
            "Selected node",
            extra={"level": LEVEL_NAMES[level_index], "node_id": node_id},
        )
        if level_index < DEPTH - 1:
            self._fetch(level_index + 1, node_id)

    def selected_node(self, level_index: int) -> Optional[ResourceNode]:
        node_id = self._selection[level_index]
        if node_id is None:
            return None
        for node in self._caches[level_index].items:
            if node.id == node_id:
                return node
        return None

    def catalog_request(
        self,
        *,
        num_questions: int,
        pace: str = "average",
        difficulty: str = "medium",
    ) -> CatalogGenerationRequest:
        """Build the catalog-mode generation request for the full selection."""

        if not self.is_complete():
            raise ValidationError(
                "Select a class, subject and chapter before generating."
            )
        labels = [self._label(level) for level in range(DEPTH)]
        return CatalogGenerationRequest(
            chapter_ref=str(self._selection[2]),
            num_questions=num_questions,
            student_class=labels[0],
            subject=labels[1],
            chapter=labels[2],
            pace=pace,
            difficulty=difficulty,
        )

    async def wait_idle(self) -> None:
        """Wait until every issued fetch has completed."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _label(self, level_index: int) -> str:
        node = self.selected_node(level_index)
        if node is not None and node.name:
            return node.name
        return str(self._selection[level_index])

    def _fetch(self, level_index: int, folder_id: Optional[str]) -> None:
        seq = self._caches[level_index].request_seq + 1
        self._caches[level_index] = LevelCache(
            status=LevelStatus.LOADING, request_seq=seq
        )
        self._logger.debug(
            "Fetching listing",
            extra={
                "level": LEVEL_NAMES[level_index],
                "folder_id": folder_id,
                "seq": seq,
            },
        )
        task = asyncio.get_running_loop().create_task(
            self._run_fetch(level_index, folder_id, seq)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_fetch(
        self, level_index: int, folder_id: Optional[str], seq: int
    ) -> None:
        try:
            nodes = await self._catalog.list_drive_contents(folder_id)
        except Exception as exc:
            if self._is_current(level_index, seq):
                message = (
                    str(exc)
                    if isinstance(exc, FetchError)
                    else "Could not load the listing "
                    f"({exc.__class__.__name__})."
                )
                self._caches[level_index] = LevelCache(
                    status=LevelStatus.ERROR,
                    request_seq=seq,
                    error=message,
                )
                self._logger.warning(
                    "Listing failed",
                    extra={
                        "level": LEVEL_NAMES[level_index],
                        "folder_id": folder_id,
                        "error": message,
                    },
                    exc_info=not isinstance(exc, FetchError),
                )
            return

        if not self._is_current(level_index, seq):
            return
        items = tuple(node for node in nodes if self._accepts(level_index, node))
        self._caches[level_index] = LevelCache(
            status=LevelStatus.READY, items=items, request_seq=seq
        )
        self._logger.info(
            "Listing loaded",
            extra={"level": LEVEL_NAMES[level_index], "count": len(items)},
        )

    def _is_current(self, level_index: int, seq: int) -> bool:
        current = self._caches[level_index].request_seq
        if seq != current:
            self._logger.debug(
                "Discarded stale listing",
                extra={
                    "level": LEVEL_NAMES[level_index],
                    "seq": seq,
                    "current_seq": current,
                },
            )
            return False
        return True

    def _accepts(self, level_index: int, node: ResourceNode) -> bool:
        if level_index < DEPTH - 1:
            return node.kind is NodeKind.FOLDER
        return (
            node.kind is NodeKind.DOCUMENT
            and node.mime_type == self._document_mime_type
        )
