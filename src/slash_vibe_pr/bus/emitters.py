"""Fire-and-forget producers for the executor and poster work lists."""

from __future__ import annotations

import logging

import redis
from pydantic import BaseModel

from slash_vibe_pr.workflow.errors import EmitFailure
from slash_vibe_pr.workflow.models import ExecutionRequest, NotificationMessage

logger = logging.getLogger(__name__)


class _ListEmitter:
    def __init__(self, client: redis.Redis, list_name: str) -> None:
        self._client = client
        self._list_name = list_name

    @property
    def list_name(self) -> str:
        return self._list_name

    def _push(self, message: BaseModel) -> None:
        payload = message.model_dump_json()
        try:
            self._client.rpush(self._list_name, payload)
        except redis.RedisError as e:
            raise EmitFailure(f"Failed to push to {self._list_name}: {e}") from e
        logger.debug("Enqueued message", extra={"list": self._list_name})


class CommandEmitter(_ListEmitter):
    """Enqueues execution requests for the command executor (Poppit)."""

    def emit(self, request: ExecutionRequest) -> None:
        self._push(request)


class NotificationEmitter(_ListEmitter):
    """Enqueues channel messages for the poster (SlackLiner)."""

    def emit(self, message: NotificationMessage) -> None:
        self._push(message)
