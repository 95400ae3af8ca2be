"""SlashVibePR.

A `/pr` Slack workflow that coordinates three Redis-connected services:
- the Slack relay (slash commands and view submissions)
- Poppit (runs `gh pr list` on request)
- SlackLiner (posts the chosen pull request to a channel)
"""

__version__ = "0.1.0"

from slash_vibe_pr.config import RelaySettings

__all__ = ["__version__", "RelaySettings"]
