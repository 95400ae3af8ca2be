"""Test configuration and fixtures."""

from __future__ import annotations

import json
from collections import defaultdict
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
import redis

from slash_vibe_pr.bus.emitters import CommandEmitter, NotificationEmitter
from slash_vibe_pr.bus.session_store import RedisSessionStore
from slash_vibe_pr.slack.client import SlackClient
from slash_vibe_pr.workflow.controller import DialogController


class InMemoryRedis:
    """The handful of Redis commands the relay uses, kept in dicts.

    Set `fail` to make every command raise a connection error.
    """

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.expirations: dict[str, int | None] = {}
        self.lists: dict[str, list[str]] = defaultdict(list)
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise redis.ConnectionError("bus unavailable")

    def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self.values[key] = value
        self.expirations[key] = ex
        return True

    def get(self, key: str) -> str | None:
        self._check()
        return self.values.get(key)

    def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            self.expirations.pop(key, None)
        return removed

    def rpush(self, name: str, *values: str) -> int:
        self._check()
        self.lists[name].extend(values)
        return len(self.lists[name])

    def popped(self, name: str) -> list[dict[str, Any]]:
        return [json.loads(v) for v in self.lists.get(name, [])]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep stray config files and env vars out of every test."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONFIG_FILE", str(tmp_path / "missing-config.yaml"))
    for name in ("SLACK_BOT_TOKEN", "REDIS_PASSWORD", "SLACK__CHANNEL_ID", "GITHUB__ORG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def surface() -> Mock:
    mock_slack = Mock(spec=SlackClient)
    mock_slack.open_view.return_value = "V1"
    mock_slack.push_view.return_value = "V2"
    mock_slack.update_view.return_value = "V1"
    return mock_slack


@pytest.fixture
def controller(fake_redis: InMemoryRedis, surface: Mock) -> DialogController:
    return DialogController(
        surface=surface,
        sessions=RedisSessionStore(fake_redis),  # type: ignore[arg-type]
        commands=CommandEmitter(fake_redis, "poppit:commands"),  # type: ignore[arg-type]
        notifications=NotificationEmitter(fake_redis, "slack_messages"),  # type: ignore[arg-type]
        github_org="acme",
        notify_channel="C123",
    )
