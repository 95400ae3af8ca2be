"""Unit tests for the channel subscriber loop."""

from __future__ import annotations

import threading
from typing import Any
from unittest.mock import Mock

import redis

from slash_vibe_pr.bus.subscriber import ChannelSubscriber


class ScriptedPubSub:
    """Replays a fixed list of messages, then sets `stop` once exhausted."""

    def __init__(
        self,
        messages: list[Any],
        stop: threading.Event,
        *,
        subscribe_errors: list[Exception] | None = None,
    ) -> None:
        self._messages = list(messages)
        self._stop = stop
        self._subscribe_errors = list(subscribe_errors or [])
        self.subscribed: list[str] = []
        self.closed = False

    def subscribe(self, *channels: str) -> None:
        if self._subscribe_errors:
            raise self._subscribe_errors.pop(0)
        self.subscribed.extend(channels)

    def get_message(self, timeout: float = 0.0) -> dict[str, Any] | None:
        if not self._messages:
            self._stop.set()
            return None
        item = self._messages.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def _client_with(pubsub: ScriptedPubSub) -> Mock:
    client = Mock(spec=redis.Redis)
    client.pubsub.return_value = pubsub
    return client


def test_run_dispatches_messages_in_order_until_stopped() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub(
        [
            {"type": "message", "data": "one"},
            None,
            {"type": "subscribe", "data": 1},
            {"type": "message", "data": b"two"},
        ],
        stop,
    )
    seen: list[str] = []

    ChannelSubscriber(_client_with(pubsub), "chan", seen.append, poll_seconds=0).run(stop)

    assert seen == ["one", "two"]
    assert pubsub.subscribed == ["chan"]
    assert pubsub.closed


def test_handler_errors_do_not_end_the_loop() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub(
        [{"type": "message", "data": "bad"}, {"type": "message", "data": "good"}], stop
    )
    seen: list[str] = []

    def handler(payload: str) -> None:
        if payload == "bad":
            raise RuntimeError("boom")
        seen.append(payload)

    ChannelSubscriber(_client_with(pubsub), "chan", handler, poll_seconds=0).run(stop)

    assert seen == ["good"]


def test_connection_errors_are_survived() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub(
        [redis.ConnectionError("reset"), {"type": "message", "data": "after"}], stop
    )
    seen: list[str] = []

    ChannelSubscriber(_client_with(pubsub), "chan", seen.append, poll_seconds=0).run(stop)

    assert seen == ["after"]


def test_other_redis_errors_are_survived() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub(
        [redis.TimeoutError("read timed out"), {"type": "message", "data": "after"}], stop
    )
    seen: list[str] = []

    ChannelSubscriber(_client_with(pubsub), "chan", seen.append, poll_seconds=0).run(stop)

    assert seen == ["after"]


def test_failed_subscribe_is_retried() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub(
        [{"type": "message", "data": "first"}],
        stop,
        subscribe_errors=[redis.ConnectionError("refused")],
    )
    seen: list[str] = []

    ChannelSubscriber(_client_with(pubsub), "chan", seen.append, poll_seconds=0).run(stop)

    assert pubsub.subscribed == ["chan"]
    assert seen == ["first"]


def test_stop_before_start_reads_nothing() -> None:
    stop = threading.Event()
    stop.set()
    pubsub = ScriptedPubSub([{"type": "message", "data": "never"}], stop)
    handler = Mock()

    ChannelSubscriber(_client_with(pubsub), "chan", handler).run(stop)

    handler.assert_not_called()
    assert pubsub.closed


def test_start_runs_in_daemon_thread() -> None:
    stop = threading.Event()
    pubsub = ScriptedPubSub([{"type": "message", "data": "x"}], stop)
    seen: list[str] = []

    thread = ChannelSubscriber(_client_with(pubsub), "chan", seen.append, poll_seconds=0).start(
        stop
    )
    thread.join(timeout=5)

    assert thread.daemon
    assert not thread.is_alive()
    assert seen == ["x"]
