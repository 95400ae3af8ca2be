"""Unit tests for service wiring and startup checks."""

from __future__ import annotations

import threading
from unittest.mock import Mock, patch

import pytest
import redis

from slash_vibe_pr import __version__
from slash_vibe_pr.config import RelaySettings
from slash_vibe_pr.main import (
    build_controller,
    build_parser,
    build_subscribers,
    join_threads,
    run,
)
from slash_vibe_pr.slack.client import SlackClient


def _settings(**overrides: object) -> RelaySettings:
    data: dict[str, object] = {
        "slack_bot_token": "xoxb-test",
        "slack": {"channel_id": "C123"},
        "github": {"org": "acme"},
    }
    data.update(overrides)
    return RelaySettings(**data)


def test_parser_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--version"])
    assert __version__ in capsys.readouterr().out


def test_run_refuses_to_start_without_token_or_channel() -> None:
    with patch("slash_vibe_pr.main.connect") as connect:
        assert run(RelaySettings(), threading.Event()) == 1
    connect.assert_not_called()


def test_run_exits_when_redis_is_unreachable() -> None:
    with patch("slash_vibe_pr.main.connect", side_effect=redis.ConnectionError("refused")):
        assert run(_settings(), threading.Event()) == 1


def test_run_starts_three_subscribers_and_stops_on_signal() -> None:
    stop = threading.Event()
    stop.set()
    client = Mock(spec=redis.Redis)
    started: list[str] = []

    def fake_start(self, _stop: threading.Event) -> Mock:
        started.append(self.channel)
        return Mock(spec=threading.Thread)

    with (
        patch("slash_vibe_pr.main.connect", return_value=client),
        patch("slash_vibe_pr.main.ChannelSubscriber.start", fake_start),
    ):
        assert run(_settings(), stop) == 0

    assert started == [
        "slack-commands",
        "slack-relay-view-submission",
        "poppit:command-output",
    ]
    client.close.assert_called_once()


def test_subscribers_route_to_controller_handlers() -> None:
    settings = _settings()
    client = Mock(spec=redis.Redis)
    controller = build_controller(settings, client, Mock(spec=SlackClient))

    subs = build_subscribers(settings, client, controller)

    assert [s.channel for s in subs] == [
        settings.channels.slash_commands,
        settings.channels.view_submissions,
        settings.channels.poppit_output,
    ]


def test_join_threads_shares_one_grace_period() -> None:
    threads = [Mock(spec=threading.Thread) for _ in range(3)]

    with patch("slash_vibe_pr.main.time.monotonic", side_effect=[100.0, 100.0, 100.75, 101.5]):
        join_threads(threads, 1.0)

    assert [t.join.call_args.kwargs["timeout"] for t in threads] == [1.0, 0.25, 0.0]
