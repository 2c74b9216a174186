from __future__ import annotations

import asyncio
from typing import Callable

from catalog_browser.infra.config import DEFAULT_QUIET_MS

CommitCallback = Callable[[str], None]


class DebouncedInputBuffer:
    """
    Coalesce rapid text input into a single committed value.

    ``on_raw_input`` may be called arbitrarily often; ``commit`` fires once,
    ``quiet_ms`` after the last call, with the last value seen. Only the
    most recent pending value survives. ``force_commit`` commits
    immediately and cancels any pending delayed commit.

    Timers run on the current asyncio event loop, so commits never run
    concurrently with each other.
    """

    def __init__(self, commit: CommitCallback, quiet_ms: int = DEFAULT_QUIET_MS) -> None:
        if quiet_ms < 0:
            raise ValueError("quiet_ms must be >= 0")
        self._commit = commit
        self._quiet_seconds = quiet_ms / 1000
        self._pending: str | None = None
        self._handle: asyncio.TimerHandle | None = None

    @property
    def has_pending(self) -> bool:
        return self._handle is not None

    @property
    def pending_value(self) -> str | None:
        return self._pending

    def on_raw_input(self, text: str) -> None:
        """Record a keystroke and restart the quiet period."""
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self._pending = text
        self._handle = loop.call_later(self._quiet_seconds, self._fire)

    def force_commit(self, text: str) -> None:
        """Commit now (explicit submit), superseding any pending value."""
        self.cancel()
        self._commit(text)

    def cancel(self) -> None:
        self._cancel_timer()
        self._pending = None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        text = self._pending
        self._handle = None
        self._pending = None
        if text is not None:
            self._commit(text)
