"""Error taxonomy for the dialog workflow.

Every error is handled inside the event handler that raised it; none of these
are process-fatal.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base class for errors raised while handling a single event."""


class DecodeError(RelayError):
    """An inbound payload could not be decoded."""


class ArgumentValidationError(RelayError):
    """A free-text repository argument does not match the allowed grammar."""


class UpstreamParseError(RelayError):
    """The executor output could not be parsed as a pull request list."""

    user_message = "Failed to parse the pull request list. Please try again."


class UpstreamEmptyResult(RelayError):
    """The executor reported zero open pull requests."""

    def __init__(self, repo: str) -> None:
        super().__init__(f"No open pull requests for {repo}")
        self.repo = repo

    @property
    def user_message(self) -> str:
        return f"No open pull requests found for `{self.repo}`."


class SessionMissing(RelayError):
    """No live dialog session exists for a view id (expired or never created)."""


class SessionStoreFailure(RelayError):
    """A session store operation against the bus failed."""


class EmitFailure(RelayError):
    """Enqueueing an outbound message on the bus failed."""
