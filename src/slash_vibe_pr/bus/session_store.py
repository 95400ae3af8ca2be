"""Dialog session persistence on Redis.

Key structure:
- slashvibeprs:{view_id} - JSON PullRequestSession, expires after the session TTL
"""

from __future__ import annotations

import logging
from typing import Protocol

import redis
from pydantic import ValidationError

from slash_vibe_pr.workflow.errors import SessionStoreFailure
from slash_vibe_pr.workflow.models import PullRequestSession

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "slashvibeprs:"


class SessionStore(Protocol):
    """Per-view dialog session storage. Absence is a normal result."""

    def put(self, view_id: str, session: PullRequestSession, *, ttl_seconds: int) -> None: ...

    def get(self, view_id: str) -> PullRequestSession | None: ...

    def delete(self, view_id: str) -> None: ...


class RedisSessionStore:
    """SessionStore backed by Redis string keys with an expiry."""

    def __init__(self, client: redis.Redis, *, key_prefix: str = SESSION_KEY_PREFIX) -> None:
        self._client = client
        self._prefix = key_prefix

    def _key(self, view_id: str) -> str:
        return f"{self._prefix}{view_id}"

    def put(self, view_id: str, session: PullRequestSession, *, ttl_seconds: int) -> None:
        key = self._key(view_id)
        try:
            self._client.set(key, session.model_dump_json(by_alias=True), ex=ttl_seconds)
        except redis.RedisError as e:
            raise SessionStoreFailure(f"Failed to store session {key}: {e}") from e
        logger.debug(
            "Stored PR session",
            extra={"key": key, "pr_count": len(session.pull_requests), "ttl": ttl_seconds},
        )

    def get(self, view_id: str) -> PullRequestSession | None:
        key = self._key(view_id)
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            raise SessionStoreFailure(f"Failed to fetch session {key}: {e}") from e
        if raw is None:
            return None
        try:
            return PullRequestSession.model_validate_json(raw)
        except ValidationError as e:
            raise SessionStoreFailure(f"Corrupt session data at {key}: {e}") from e

    def delete(self, view_id: str) -> None:
        key = self._key(view_id)
        try:
            self._client.delete(key)
        except redis.RedisError as e:
            raise SessionStoreFailure(f"Failed to delete session {key}: {e}") from e
