"""Pydantic models for everything that crosses the bus.

Inbound events (slash commands, view submissions, executor output) are decoded
from JSON; outbound messages (execution requests, notifications) and stored
dialog sessions are encoded to JSON.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import DecodeError, UpstreamEmptyResult, UpstreamParseError

PR_LIST_TASK_TYPE = "slash-vibe-pr-list"
PR_POSTED_EVENT_TYPE = "pr_posted"

EventT = TypeVar("EventT", bound=BaseModel)


# -- inbound events ---------------------------------------------------------


class InboundEvent(BaseModel):
    """Base for decoded bus payloads: a JSON `null` reads as an absent field."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class SlashCommand(InboundEvent):
    command: str
    text: str = ""
    response_url: str = ""
    trigger_id: str = ""
    user_id: str = ""
    user_name: str = ""
    channel_id: str = ""


class ViewState(InboundEvent):
    # block_id -> action_id -> raw element state
    values: dict[str, dict[str, Any] | None] = Field(default_factory=dict)


class SubmittedView(InboundEvent):
    id: str = ""
    hash: str = ""
    callback_id: str = ""
    private_metadata: str = ""
    state: ViewState = Field(default_factory=ViewState)


class SubmittingUser(InboundEvent):
    id: str = ""
    username: str = ""


class ViewSubmission(InboundEvent):
    type: str = ""
    trigger_id: str = ""
    view: SubmittedView = Field(default_factory=SubmittedView)
    user: SubmittingUser = Field(default_factory=SubmittingUser)


class CommandOutput(InboundEvent):
    """Published by the executor after running an execution request."""

    type: str = ""
    metadata: dict[str, Any] | None = None
    command: str = ""
    output: str = ""

    def metadata_str(self, key: str) -> str:
        if not self.metadata:
            return ""
        value = self.metadata.get(key)
        return value if isinstance(value, str) else ""


def decode_event(model: type[EventT], payload: str | bytes) -> EventT:
    """Decode a raw bus payload into `model`, raising DecodeError on failure."""

    try:
        return model.model_validate_json(payload)
    except PydanticValidationError as e:
        raise DecodeError(f"Malformed {model.__name__} payload: {e}") from e


# -- candidates and sessions ------------------------------------------------


class PullRequestAuthor(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str = ""


class PullRequestItem(BaseModel):
    """One pull request as returned by `gh pr list --json`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    number: int
    title: str = ""
    author: PullRequestAuthor = Field(default_factory=PullRequestAuthor)
    url: str = ""
    head_ref_name: str = Field(default="", alias="headRefName")


_PR_LIST_ADAPTER = TypeAdapter(list[PullRequestItem])


def parse_pull_request_list(output: str, *, repo: str) -> list[PullRequestItem]:
    """Parse executor stdout into pull requests.

    Raises:
        UpstreamParseError: the output is not a JSON list of pull requests.
        UpstreamEmptyResult: the list is empty.
    """

    text = output.strip()
    try:
        # `gh` prints `null` rather than `[]` in some versions.
        items = [] if text == "null" else _PR_LIST_ADAPTER.validate_json(text)
    except PydanticValidationError as e:
        raise UpstreamParseError(f"Could not parse pull request list for {repo}: {e}") from e
    if not items:
        raise UpstreamEmptyResult(repo)
    return items


class PullRequestSession(BaseModel):
    """Candidates offered in one selection dialog, keyed externally by view id."""

    repo: str
    pull_requests: list[PullRequestItem] = Field(default_factory=list)

    def find(self, number: str) -> PullRequestItem | None:
        for pr in self.pull_requests:
            if str(pr.number) == number.strip():
                return pr
        return None


class SelectionMetadata(BaseModel):
    """Stored in the PR chooser modal's private_metadata."""

    repo: str = ""


# -- outbound messages ------------------------------------------------------


class ExecutionRequest(BaseModel):
    repo: str
    branch: str = ""
    type: str
    dir: str
    commands: list[str]
    metadata: dict[str, Any] = Field(default_factory=dict)


class NotificationMessage(BaseModel):
    channel: str
    text: str
    ttl: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
