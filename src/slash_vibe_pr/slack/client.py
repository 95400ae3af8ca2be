"""Slack Web API client wrapper for modal views.

This intentionally covers only the three view operations the dialog needs, to
keep HTTP calls out of the workflow code and make tests easy.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

logger = logging.getLogger(__name__)


class SlackApiError(RuntimeError):
    """A Slack Web API call failed (transport error or `ok: false`)."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"Slack {method} failed: {error}")
        self.method = method
        self.error = error


class DialogSurface(Protocol):
    """The modal operations of a Slack dialog.

    The controller opens and replaces views. `push_view` stacks a view on an
    open modal and completes the `views.*` surface; a submitted modal is already
    closing, so the chooser submission opens a new view instead.
    """

    def open_view(self, *, trigger_id: str, view: dict[str, Any]) -> str: ...

    def push_view(self, *, trigger_id: str, view: dict[str, Any]) -> str: ...

    def update_view(self, *, view_id: str, view: dict[str, Any], view_hash: str = "") -> str: ...


class SlackClient:
    """Small wrapper around the Slack `views.*` methods."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://slack.com/api",
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("Slack bot token is required")

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json; charset=utf-8",
                "User-Agent": "slash-vibe-pr",
            }
        )

    def close(self) -> None:
        self._session.close()

    def _call(self, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}/{method}"
        try:
            resp = self._session.post(url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
            data: dict[str, Any] = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise SlackApiError(method, str(e)) from e

        if not data.get("ok"):
            error = data.get("error")
            messages = (data.get("response_metadata") or {}).get("messages")
            detail = str(error or "unknown_error")
            if messages:
                detail = f"{detail} ({'; '.join(str(m) for m in messages)})"
            raise SlackApiError(method, detail)
        return data

    @staticmethod
    def _view_id(method: str, data: dict[str, Any]) -> str:
        view = data.get("view")
        view_id = view.get("id") if isinstance(view, dict) else None
        if not isinstance(view_id, str) or not view_id:
            raise SlackApiError(method, "response is missing view.id")
        return view_id

    def open_view(self, *, trigger_id: str, view: dict[str, Any]) -> str:
        """Open a modal with a one-shot trigger id and return its view id."""

        data = self._call("views.open", {"trigger_id": trigger_id, "view": view})
        return self._view_id("views.open", data)

    def push_view(self, *, trigger_id: str, view: dict[str, Any]) -> str:
        """Push a modal onto the current stack and return its view id."""

        data = self._call("views.push", {"trigger_id": trigger_id, "view": view})
        return self._view_id("views.push", data)

    def update_view(self, *, view_id: str, view: dict[str, Any], view_hash: str = "") -> str:
        """Replace the content of an open modal.

        An empty `view_hash` skips Slack's optimistic lock check.
        """

        payload: dict[str, Any] = {"view_id": view_id, "view": view}
        if view_hash:
            payload["hash"] = view_hash
        data = self._call("views.update", payload)
        return self._view_id("views.update", data)
