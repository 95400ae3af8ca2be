"""Slack dialog surface: the Web API client and modal payload builders."""

from slash_vibe_pr.slack.client import DialogSurface, SlackApiError, SlackClient

__all__ = ["DialogSurface", "SlackApiError", "SlackClient"]
