"""Service entrypoint: wire the bus, the Slack client and the dialog controller."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
import threading
import time
from collections.abc import Sequence
from types import FrameType

import redis
from pydantic import ValidationError

from slash_vibe_pr import __version__
from slash_vibe_pr.bus.client import connect
from slash_vibe_pr.bus.emitters import CommandEmitter, NotificationEmitter
from slash_vibe_pr.bus.session_store import RedisSessionStore
from slash_vibe_pr.bus.subscriber import ChannelSubscriber
from slash_vibe_pr.config import RelaySettings
from slash_vibe_pr.logging import configure_logging
from slash_vibe_pr.slack.client import SlackClient
from slash_vibe_pr.workflow.controller import DialogController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slash-vibe-pr",
        description="Relay for the Slack /pr pull request sharing workflow",
    )
    parser.add_argument("--version", action="version", version=f"slash-vibe-pr {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the YAML config file (defaults to $CONFIG_FILE or config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (DEBUG, INFO, WARN, ERROR)",
    )
    return parser


def build_controller(
    settings: RelaySettings, client: redis.Redis, slack: SlackClient
) -> DialogController:
    wf = settings.workflow
    return DialogController(
        surface=slack,
        sessions=RedisSessionStore(client),
        commands=CommandEmitter(client, settings.lists.poppit_commands),
        notifications=NotificationEmitter(client, settings.lists.slackliner_messages),
        github_org=settings.github.org,
        notify_channel=settings.slack.channel_id,
        initiation_strategy=wf.initiation_strategy,
        session_ttl_seconds=wf.session_ttl_seconds,
        pr_limit=wf.pr_limit,
        work_dir=wf.work_dir,
        notification_ttl_seconds=wf.notification_ttl_seconds,
    )


def build_subscribers(
    settings: RelaySettings, client: redis.Redis, controller: DialogController
) -> list[ChannelSubscriber]:
    channels = settings.channels
    return [
        ChannelSubscriber(client, channels.slash_commands, controller.handle_slash_command),
        ChannelSubscriber(client, channels.view_submissions, controller.handle_view_submission),
        ChannelSubscriber(client, channels.poppit_output, controller.handle_command_output),
    ]


def run(settings: RelaySettings, stop: threading.Event) -> int:
    """Run the relay until `stop` is set. Returns a process exit code."""

    missing = settings.missing_requirements()
    if missing:
        for problem in missing:
            logger.error(problem)
        return 1

    try:
        client = connect(settings)
    except redis.RedisError as e:
        logger.error("Failed to connect to Redis: %s", e, extra={"addr": settings.redis.addr})
        return 1

    slack = SlackClient(token=settings.slack_bot_token, base_url=settings.slack.api_base_url)
    try:
        controller = build_controller(settings, client, slack)
        threads = [sub.start(stop) for sub in build_subscribers(settings, client, controller)]
        logger.info("SlashVibePR service started")

        stop.wait()

        logger.info("Shutting down...")
        join_threads(threads, settings.workflow.shutdown_grace_seconds)
        return 0
    finally:
        slack.close()
        client.close()


def join_threads(threads: Sequence[threading.Thread], grace_seconds: float) -> None:
    """Wait for all threads within one shared grace period."""

    deadline = time.monotonic() + grace_seconds
    for thread in threads:
        thread.join(timeout=max(0.0, deadline - time.monotonic()))


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.config:
        os.environ["CONFIG_FILE"] = args.config

    try:
        settings = RelaySettings()
    except ValidationError as e:
        # Logging is not configured yet; fall back to stderr.
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(args.log_level or settings.logging.level)

    stop = threading.Event()

    def _request_stop(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received signal", extra={"signal": signal.Signals(signum).name})
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    return run(settings, stop)


if __name__ == "__main__":
    raise SystemExit(main())
