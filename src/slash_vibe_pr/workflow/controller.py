"""The dialog controller: correlates events from three disconnected services.

The dialog state is never stored explicitly. Each event carries enough to infer
where the dialog is:

- `/pr` slash command          -> open the repository chooser, or go straight to
                                  fetching when a repository argument is given
- repository chooser submitted -> fetching
- executor output (PR list)    -> presenting (or an inline error)
- PR chooser submitted         -> share the pull request, dialog done

The only state that survives between events is the per-view PR session on the
bus, written when the PR list arrives and consumed on submission.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from slash_vibe_pr.bus.emitters import CommandEmitter, NotificationEmitter
from slash_vibe_pr.bus.session_store import SessionStore
from slash_vibe_pr.config import InitiationStrategy
from slash_vibe_pr.slack.client import DialogSurface, SlackApiError
from slash_vibe_pr.slack.views import (
    PR_BLOCK_ID,
    PR_MODAL_CALLBACK_ID,
    PR_SELECT_ACTION_ID,
    REPO_BLOCK_ID,
    REPO_INPUT_ACTION_ID,
    REPO_MODAL_CALLBACK_ID,
    error_modal,
    loading_modal,
    pr_chooser_modal,
    repo_chooser_modal,
)

from .errors import (
    ArgumentValidationError,
    DecodeError,
    EmitFailure,
    SessionMissing,
    SessionStoreFailure,
    UpstreamEmptyResult,
    UpstreamParseError,
)
from .fields import extract_field_text
from .models import (
    PR_LIST_TASK_TYPE,
    PR_POSTED_EVENT_TYPE,
    CommandOutput,
    ExecutionRequest,
    NotificationMessage,
    PullRequestItem,
    PullRequestSession,
    SelectionMetadata,
    SlashCommand,
    ViewSubmission,
    decode_event,
    parse_pull_request_list,
)
from .validation import qualify_repo, validate_repo_name

logger = logging.getLogger(__name__)

SLASH_COMMAND = "/pr"

ViewPresenter = Callable[[dict[str, Any]], str]


def build_pr_list_command(repo: str, *, limit: int) -> str:
    return (
        f"gh pr list --repo {repo} --json number,title,author,url,headRefName --limit {limit}"
    )


def format_pr_message(pr: PullRequestItem, repo: str, posted_by: str) -> str:
    return (
        f"📋 *Pull Request shared by @{posted_by}*\n\n"
        f"*Repository:* {repo}\n"
        f"*PR #{pr.number}:* {pr.title}\n"
        f"*Author:* {pr.author.login}\n"
        f"*Link:* <{pr.url}|View PR>"
    )


class DialogController:
    """Routes decoded bus events to dialog transitions.

    Handlers never raise: every failure is logged and ends handling of that
    single event.
    """

    def __init__(
        self,
        *,
        surface: DialogSurface,
        sessions: SessionStore,
        commands: CommandEmitter,
        notifications: NotificationEmitter,
        github_org: str,
        notify_channel: str,
        initiation_strategy: InitiationStrategy = "direct",
        session_ttl_seconds: int = 3600,
        pr_limit: int = 50,
        work_dir: str = "/tmp",
        notification_ttl_seconds: int = 86400,
    ) -> None:
        self._surface = surface
        self._sessions = sessions
        self._commands = commands
        self._notifications = notifications
        self._github_org = github_org
        self._notify_channel = notify_channel
        self._strategy = initiation_strategy
        self._session_ttl = session_ttl_seconds
        self._pr_limit = pr_limit
        self._work_dir = work_dir
        self._notification_ttl = notification_ttl_seconds

    # -- slash commands ---------------------------------------------------

    def handle_slash_command(self, payload: str) -> None:
        try:
            cmd = decode_event(SlashCommand, payload)
        except DecodeError as e:
            logger.error("Error decoding slash command: %s", e)
            return

        if cmd.command != SLASH_COMMAND:
            return

        logger.info("Received /pr command", extra={"user": cmd.user_name})

        arg = cmd.text.strip()
        if not arg or self._strategy == "chooser":
            self._open_repo_chooser(cmd, initial_value=arg)
            return

        try:
            name = validate_repo_name(arg)
        except ArgumentValidationError as e:
            logger.warning("Ignoring /pr argument: %s", e, extra={"user": cmd.user_name})
            return

        repo = qualify_repo(self._github_org, name)
        logger.info("Repo argument provided, skipping repo chooser", extra={"repo": repo})
        self._start_fetch(
            repo,
            username=cmd.user_name,
            present=lambda view: self._surface.open_view(trigger_id=cmd.trigger_id, view=view),
        )

    def _open_repo_chooser(self, cmd: SlashCommand, *, initial_value: str) -> None:
        try:
            view_id = self._surface.open_view(
                trigger_id=cmd.trigger_id, view=repo_chooser_modal(initial_value)
            )
        except SlackApiError as e:
            logger.error("Error opening repo chooser modal: %s", e)
            return
        logger.debug("Repo chooser modal opened", extra={"view_id": view_id})

    # -- view submissions -------------------------------------------------

    def handle_view_submission(self, payload: str) -> None:
        try:
            submission = decode_event(ViewSubmission, payload)
        except DecodeError as e:
            logger.error("Error decoding view submission: %s", e)
            return

        callback_id = submission.view.callback_id
        if callback_id == PR_MODAL_CALLBACK_ID:
            self._handle_pr_selection(submission)
        elif callback_id == REPO_MODAL_CALLBACK_ID:
            self._handle_repo_submission(submission)

    def _handle_repo_submission(self, submission: ViewSubmission) -> None:
        username = submission.user.username
        raw = extract_field_text(
            submission.view.state.values, REPO_BLOCK_ID, REPO_INPUT_ACTION_ID
        )
        if not raw or not raw.strip():
            logger.warning("Repo chooser submission has no repository", extra={"user": username})
            return

        try:
            name = validate_repo_name(raw)
        except ArgumentValidationError as e:
            logger.warning("Ignoring repo chooser submission: %s", e, extra={"user": username})
            return

        repo = qualify_repo(self._github_org, name)
        logger.info("User selected repo via chooser", extra={"user": username, "repo": repo})

        # The submission carries its own fresh trigger id; the one from the
        # original slash command may have expired by now.
        self._start_fetch(
            repo,
            username=username,
            present=lambda view: self._surface.open_view(
                trigger_id=submission.trigger_id, view=view
            ),
        )

    def _handle_pr_selection(self, submission: ViewSubmission) -> None:
        view_id = submission.view.id
        username = submission.user.username

        number = extract_field_text(submission.view.state.values, PR_BLOCK_ID, PR_SELECT_ACTION_ID)
        if not number or not number.strip():
            logger.warning(
                "PR selection submission has empty PR number", extra={"view_id": view_id}
            )
            return

        try:
            session = self._load_session(view_id)
        except SessionMissing as e:
            logger.warning("%s", e, extra={"view_id": view_id, "user": username})
            return
        except SessionStoreFailure as e:
            logger.error("Error fetching PR session: %s", e, extra={"view_id": view_id})
            return

        pr = session.find(number)
        if pr is None:
            logger.warning(
                "Could not find selected PR in session data",
                extra={"view_id": view_id, "pr_number": number},
            )
            return

        repo = self._selection_repo(submission, session)
        logger.info(
            "User selected PR", extra={"user": username, "pr_number": pr.number, "repo": repo}
        )

        try:
            self.share_pull_request(pr, repo=repo, posted_by=username)
        except EmitFailure as e:
            logger.error("Error posting PR to Slack: %s", e)
            return

        try:
            self._sessions.delete(view_id)
        except SessionStoreFailure as e:
            logger.warning("Failed to delete PR session: %s", e, extra={"view_id": view_id})

        logger.info("PR posted to Slack channel", extra={"pr_number": pr.number, "repo": repo})

    def _load_session(self, view_id: str) -> PullRequestSession:
        session = self._sessions.get(view_id)
        if session is None:
            raise SessionMissing(f"No PR session for view {view_id} (expired or unknown)")
        return session

    @staticmethod
    def _selection_repo(submission: ViewSubmission, session: PullRequestSession) -> str:
        raw = submission.view.private_metadata
        if raw:
            try:
                meta = SelectionMetadata.model_validate_json(raw)
            except ValueError:
                logger.debug("Unreadable private metadata", extra={"view_id": submission.view.id})
            else:
                if meta.repo:
                    return meta.repo
        return session.repo

    # -- executor output --------------------------------------------------

    def handle_command_output(self, payload: str) -> None:
        try:
            output = decode_event(CommandOutput, payload)
        except DecodeError as e:
            logger.error("Error decoding command output: %s", e)
            return

        if output.type != PR_LIST_TASK_TYPE:
            return

        view_id = output.metadata_str("view_id")
        repo = output.metadata_str("repo")
        username = output.metadata_str("username")
        if not view_id or not repo:
            logger.warning("Missing view_id or repo in PR list output metadata")
            return

        try:
            prs = parse_pull_request_list(output.output, repo=repo)
        except UpstreamParseError as e:
            logger.error("%s", e, extra={"view_id": view_id})
            self._show_error(view_id, e.user_message)
            return
        except UpstreamEmptyResult as e:
            logger.info("No open PRs found", extra={"repo": repo, "user": username})
            self._show_error(view_id, e.user_message)
            return

        logger.info(
            "Found open PRs", extra={"repo": repo, "user": username, "pr_count": len(prs)}
        )

        try:
            self._sessions.put(
                view_id,
                PullRequestSession(repo=repo, pull_requests=prs),
                ttl_seconds=self._session_ttl,
            )
        except SessionStoreFailure as e:
            logger.error("Error storing PR session: %s", e, extra={"view_id": view_id})
            return

        metadata = SelectionMetadata(repo=repo).model_dump_json()
        try:
            self._surface.update_view(
                view_id=view_id, view=pr_chooser_modal(prs, repo, metadata), view_hash=""
            )
        except SlackApiError as e:
            logger.error("Error updating modal with PR list: %s", e, extra={"view_id": view_id})
            return

        logger.debug("PR chooser modal updated", extra={"view_id": view_id})

    def _show_error(self, view_id: str, message: str) -> None:
        try:
            self._surface.update_view(view_id=view_id, view=error_modal(message), view_hash="")
        except SlackApiError as e:
            logger.error("Error updating modal with error message: %s", e)

    # -- outbound ---------------------------------------------------------

    def _start_fetch(self, repo: str, *, username: str, present: ViewPresenter) -> None:
        try:
            view_id = present(loading_modal())
        except SlackApiError as e:
            logger.error("Error opening loading modal: %s", e)
            return

        logger.debug("Loading modal opened", extra={"view_id": view_id})

        try:
            self.request_pull_request_list(repo, view_id=view_id, username=username)
        except EmitFailure as e:
            logger.error("Error sending PR list command: %s", e, extra={"repo": repo})

    def request_pull_request_list(
        self, repo: str, *, view_id: str, username: str
    ) -> ExecutionRequest:
        """Ask the executor for open PRs; the result is correlated by view id."""

        request = ExecutionRequest(
            repo=repo,
            branch="",
            type=PR_LIST_TASK_TYPE,
            dir=self._work_dir,
            commands=[build_pr_list_command(repo, limit=self._pr_limit)],
            metadata={"view_id": view_id, "repo": repo, "username": username},
        )
        self._commands.emit(request)
        return request

    def share_pull_request(
        self, pr: PullRequestItem, *, repo: str, posted_by: str
    ) -> NotificationMessage:
        message = NotificationMessage(
            channel=self._notify_channel,
            text=format_pr_message(pr, repo, posted_by),
            ttl=self._notification_ttl,
            metadata={
                "event_type": PR_POSTED_EVENT_TYPE,
                "event_payload": {
                    "pr_number": pr.number,
                    "repository": repo,
                    "pr_url": pr.url,
                    "author": pr.author.login,
                    "title": pr.title,
                    "posted_by": posted_by,
                    "branch": pr.head_ref_name,
                },
            },
        )
        self._notifications.emit(message)
        return message
