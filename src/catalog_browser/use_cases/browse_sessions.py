from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable
from uuid import uuid4

from catalog_browser.domain.browse_state import BrowseSnapshot
from catalog_browser.domain.errors import NotFoundError
from catalog_browser.domain.title import Query
from catalog_browser.infra.config import (
    DEFAULT_MAX_SESSIONS,
    DEFAULT_QUIET_MS,
    DEFAULT_SESSION_TTL_SECONDS,
)
from catalog_browser.use_cases.debounced_input import DebouncedInputBuffer
from catalog_browser.use_cases.pagination_controller import PaginationController

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[], PaginationController]


@dataclass(eq=False)
class BrowseSession:
    """
    One user's browsing state: a controller plus its debounced text input.

    Typed text flows through the input buffer and is committed with the
    current filters; explicit submits bypass the quiet period.
    """

    session_id: str
    controller: PaginationController
    input_buffer: DebouncedInputBuffer

    @classmethod
    def create(
        cls, controller: PaginationController, quiet_ms: int = DEFAULT_QUIET_MS
    ) -> BrowseSession:
        session_id = uuid4().hex

        def commit_text(text: str) -> None:
            current = controller.snapshot.query
            controller.submit_query(replace(current, text=text))

        return cls(
            session_id=session_id,
            controller=controller,
            input_buffer=DebouncedInputBuffer(commit_text, quiet_ms=quiet_ms),
        )

    @property
    def snapshot(self) -> BrowseSnapshot:
        return self.controller.snapshot

    def type_text(self, text: str) -> None:
        self.input_buffer.on_raw_input(text)

    def submit(self, query: Query) -> bool:
        """Commit a full query now, superseding any text still in the quiet period."""
        self.input_buffer.cancel()
        return self.controller.submit_query(query)

    async def close(self) -> None:
        self.input_buffer.cancel()
        await self.controller.aclose()


class BrowseSessionRegistry:
    """
    In-process store of live browse sessions keyed by id.

    Sessions are reclaimed when a new one is opened: every session idle for
    longer than ``idle_ttl_seconds`` is closed, then the least recently used
    sessions are closed until there is room under ``max_sessions``. Any
    access through get() counts as use.
    """

    def __init__(
        self,
        controller_factory: ControllerFactory,
        quiet_ms: int = DEFAULT_QUIET_MS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self._controller_factory = controller_factory
        self._quiet_ms = quiet_ms
        self._max_sessions = max_sessions
        self._idle_ttl_seconds = idle_ttl_seconds
        self._clock = clock
        self._sessions: dict[str, BrowseSession] = {}
        self._last_used: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    async def create(self) -> BrowseSession:
        await self._evict()
        session = BrowseSession.create(self._controller_factory(), quiet_ms=self._quiet_ms)
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self._clock()
        logger.info("Browse session created", extra={"session_id": session.session_id})
        return session

    def get(self, session_id: str) -> BrowseSession:
        """
        Raises:
            NotFoundError: If no session has this id
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(resource="BrowseSession", identifier=session_id)
        self._last_used[session_id] = self._clock()
        return session

    async def close(self, session_id: str) -> None:
        session = self.get(session_id)
        del self._sessions[session_id]
        del self._last_used[session_id]
        await session.close()
        logger.info("Browse session closed", extra={"session_id": session_id})

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    async def _evict(self) -> None:
        now = self._clock()
        # Oldest first
        by_age = sorted(self._last_used, key=self._last_used.__getitem__)
        expired = [sid for sid in by_age if now - self._last_used[sid] > self._idle_ttl_seconds]
        remaining = [sid for sid in by_age if sid not in expired]
        overflow = max(0, len(remaining) + 1 - self._max_sessions)

        for session_id in expired:
            logger.info("Evicting idle browse session", extra={"session_id": session_id})
            await self.close(session_id)
        for session_id in remaining[:overflow]:
            logger.info(
                "Evicting least recently used browse session",
                extra={"session_id": session_id},
            )
            await self.close(session_id)
