"""Redis bus adapters: session storage, list emitters and channel subscribers."""

from slash_vibe_pr.bus.emitters import CommandEmitter, NotificationEmitter
from slash_vibe_pr.bus.session_store import RedisSessionStore, SessionStore
from slash_vibe_pr.bus.subscriber import ChannelSubscriber

__all__ = [
    "ChannelSubscriber",
    "CommandEmitter",
    "NotificationEmitter",
    "RedisSessionStore",
    "SessionStore",
]
