"""Long-lived pub/sub listeners, one thread per channel."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import redis

logger = logging.getLogger(__name__)

PayloadHandler = Callable[[str], None]


class ChannelSubscriber:
    """Feed every message published on one channel to a handler, in order.

    The loop checks `stop` between messages, so an event that is already being
    handled runs to completion before the thread exits. Redis errors, including a
    failed subscribe, are logged and retried after one poll interval.
    """

    def __init__(
        self,
        client: redis.Redis,
        channel: str,
        handler: PayloadHandler,
        *,
        poll_seconds: float = 1.0,
    ) -> None:
        self._client = client
        self._channel = channel
        self._handler = handler
        self._poll_seconds = poll_seconds

    @property
    def channel(self) -> str:
        return self._channel

    def run(self, stop: threading.Event) -> None:
        pubsub = self._client.pubsub(ignore_subscribe_messages=True)
        subscribed = False
        try:
            while not stop.is_set():
                try:
                    if not subscribed:
                        pubsub.subscribe(self._channel)
                        subscribed = True
                        logger.info(
                            "Subscribed to Redis channel", extra={"channel": self._channel}
                        )
                    message = pubsub.get_message(timeout=self._poll_seconds)
                except redis.RedisError as e:
                    logger.error(
                        "Redis error while reading channel",
                        extra={"channel": self._channel, "error": str(e)},
                    )
                    stop.wait(self._poll_seconds)
                    continue

                if message is None or message.get("type") != "message":
                    continue
                self.dispatch(message.get("data"))
        finally:
            pubsub.close()
            logger.info("Unsubscribed from Redis channel", extra={"channel": self._channel})

    def dispatch(self, data: object) -> None:
        """Hand one raw message body to the handler.

        Handler failures are logged and never end the subscription.
        """

        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        if not isinstance(data, str):
            logger.warning(
                "Dropping non-text message", extra={"channel": self._channel}
            )
            return
        try:
            self._handler(data)
        except Exception:
            logger.exception("Unhandled error in event handler", extra={"channel": self._channel})

    def start(self, stop: threading.Event) -> threading.Thread:
        thread = threading.Thread(
            target=self.run,
            name=f"subscriber-{self._channel}",
            daemon=True,
            args=(stop,),
        )
        thread.start()
        return thread
