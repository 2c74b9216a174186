from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_BASE_URL = "https://www.omdbapi.com/"
DEFAULT_TIMEOUT_SECONDS = 8.0
DEFAULT_QUIET_MS = 400
DEFAULT_BASELINE_TERM = "movie"
DEFAULT_ENRICH_CONCURRENCY = 10
DEFAULT_MAX_SESSIONS = 1000
DEFAULT_SESSION_TTL_SECONDS = 1800.0


@dataclass(frozen=True, slots=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    quiet_ms: int = DEFAULT_QUIET_MS
    baseline_term: str = DEFAULT_BASELINE_TERM
    enrich_concurrency: int = DEFAULT_ENRICH_CONCURRENCY
    max_sessions: int = DEFAULT_MAX_SESSIONS
    session_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS


def api_key() -> str:
    key = os.getenv("OMDB_API_KEY")

    if not key:
        raise RuntimeError("OMDB_API_KEY environment variable is not set")

    return key


def load_settings() -> Settings:
    """
    Read settings from the environment.

    Only the API credential is mandatory; everything else falls back to
    the module defaults.

    Raises:
        RuntimeError: If OMDB_API_KEY is missing or a numeric variable is malformed
    """
    try:
        timeout_seconds = float(os.getenv("OMDB_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
        quiet_ms = int(os.getenv("BROWSE_QUIET_MS", DEFAULT_QUIET_MS))
        enrich_concurrency = int(
            os.getenv("BROWSE_ENRICH_CONCURRENCY", DEFAULT_ENRICH_CONCURRENCY)
        )
        max_sessions = int(os.getenv("BROWSE_MAX_SESSIONS", DEFAULT_MAX_SESSIONS))
        session_ttl_seconds = float(
            os.getenv("BROWSE_SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS)
        )
    except ValueError as exc:
        raise RuntimeError(f"Invalid numeric browse setting: {exc}") from exc

    if timeout_seconds <= 0:
        raise RuntimeError("OMDB_TIMEOUT_SECONDS must be > 0")
    if quiet_ms < 0:
        raise RuntimeError("BROWSE_QUIET_MS must be >= 0")
    if enrich_concurrency < 1:
        raise RuntimeError("BROWSE_ENRICH_CONCURRENCY must be >= 1")
    if max_sessions < 1:
        raise RuntimeError("BROWSE_MAX_SESSIONS must be >= 1")
    if session_ttl_seconds <= 0:
        raise RuntimeError("BROWSE_SESSION_TTL_SECONDS must be > 0")

    return Settings(
        api_key=api_key(),
        base_url=os.getenv("OMDB_BASE_URL") or DEFAULT_BASE_URL,
        timeout_seconds=timeout_seconds,
        quiet_ms=quiet_ms,
        baseline_term=os.getenv("BROWSE_BASELINE_TERM") or DEFAULT_BASELINE_TERM,
        enrich_concurrency=enrich_concurrency,
        max_sessions=max_sessions,
        session_ttl_seconds=session_ttl_seconds,
    )
