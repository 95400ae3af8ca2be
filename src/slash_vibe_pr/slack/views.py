"""Block Kit modal payloads.

These are plain dicts ready for `views.open` / `views.push` / `views.update`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from slash_vibe_pr.workflow.models import PullRequestItem

REPO_MODAL_CALLBACK_ID = "select_pr_repo_modal"
PR_MODAL_CALLBACK_ID = "select_pr_modal"

REPO_BLOCK_ID = "repo_block"
REPO_INPUT_ACTION_ID = "repo_input"
PR_BLOCK_ID = "pr_block"
PR_SELECT_ACTION_ID = "pr_select"

# Slack rejects option text longer than 75 characters.
OPTION_TEXT_LIMIT = 75


def _plain(text: str) -> dict[str, Any]:
    return {"type": "plain_text", "text": text}


def _markdown_section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def format_option_text(number: int, title: str, *, limit: int = OPTION_TEXT_LIMIT) -> str:
    text = f"#{number}: {title}"
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


def repo_chooser_modal(initial_value: str = "") -> dict[str, Any]:
    """Ask for a repository name; submitting it starts the PR lookup."""

    element: dict[str, Any] = {
        "type": "plain_text_input",
        "action_id": REPO_INPUT_ACTION_ID,
        "placeholder": _plain("e.g. billing-service"),
    }
    if initial_value:
        element["initial_value"] = initial_value

    return {
        "type": "modal",
        "callback_id": REPO_MODAL_CALLBACK_ID,
        "title": _plain("Select Repository"),
        "submit": _plain("List PRs"),
        "close": _plain("Cancel"),
        "blocks": [
            _markdown_section("Enter a repository to list its open pull requests."),
            {
                "type": "input",
                "block_id": REPO_BLOCK_ID,
                "label": _plain("Repository"),
                "element": element,
            },
        ],
    }


def loading_modal() -> dict[str, Any]:
    return {
        "type": "modal",
        "title": _plain("Loading PRs..."),
        "close": _plain("Cancel"),
        "blocks": [
            _markdown_section(
                ":hourglass_flowing_sand: Fetching open pull requests, please wait..."
            ),
        ],
    }


def pr_chooser_modal(
    prs: Sequence[PullRequestItem], repo: str, private_metadata: str
) -> dict[str, Any]:
    options = [
        {
            "text": _plain(format_option_text(pr.number, pr.title)),
            "value": str(pr.number),
        }
        for pr in prs
    ]

    return {
        "type": "modal",
        "callback_id": PR_MODAL_CALLBACK_ID,
        "private_metadata": private_metadata,
        "title": _plain("Select a Pull Request"),
        "submit": _plain("Post to Channel"),
        "close": _plain("Cancel"),
        "blocks": [
            _markdown_section(f"*{repo}*: select a pull request to post to the channel."),
            {
                "type": "input",
                "block_id": PR_BLOCK_ID,
                "label": _plain("Pull Request"),
                "element": {
                    "type": "static_select",
                    "action_id": PR_SELECT_ACTION_ID,
                    "placeholder": _plain("Choose a pull request"),
                    "options": options,
                },
            },
        ],
    }


def error_modal(message: str) -> dict[str, Any]:
    return {
        "type": "modal",
        "title": _plain("Error"),
        "close": _plain("Close"),
        "blocks": [_markdown_section(f":x: {message}")],
    }
