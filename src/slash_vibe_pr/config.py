"""Configuration for the SlashVibePR relay.

Configuration is loaded from (highest priority first):
- explicit keyword arguments
- environment variables (nested sections use `__`, e.g. `SLACK__CHANNEL_ID`)
- a local `.env` file (if present)
- a YAML config file (`CONFIG_FILE`, default `config.yaml`; optional)

The two secrets, `REDIS_PASSWORD` and `SLACK_BOT_TOKEN`, are read from the
environment only and never from the YAML file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_FILE = Path("config.yaml")

InitiationStrategy = Literal["direct", "chooser"]


class RedisSection(BaseModel):
    addr: str = Field(default="host.docker.internal:6379", description="Redis host:port")
    db: int = Field(default=0, ge=0)

    @property
    def host(self) -> str:
        host, _, _ = self.addr.rpartition(":")
        return host or self.addr

    @property
    def port(self) -> int:
        _, sep, port = self.addr.rpartition(":")
        if not sep or not port.isdigit():
            return 6379
        return int(port)


class ChannelsSection(BaseModel):
    slash_commands: str = "slack-commands"
    view_submissions: str = "slack-relay-view-submission"
    poppit_output: str = "poppit:command-output"


class ListsSection(BaseModel):
    poppit_commands: str = "poppit:commands"
    slackliner_messages: str = "slack_messages"


class SlackSection(BaseModel):
    channel_id: str = Field(default="", description="Channel that selected PRs are posted to")
    api_base_url: str = Field(default="https://slack.com/api")


class GitHubSection(BaseModel):
    org: str = Field(default="", description="Owner prefixed to bare repository names")


class LoggingSection(BaseModel):
    level: str = "INFO"


class WorkflowSection(BaseModel):
    initiation_strategy: InitiationStrategy = Field(
        default="direct",
        description=(
            "'direct' skips the repository chooser when `/pr <repo>` is given; "
            "'chooser' always shows it, pre-filled with any argument."
        ),
    )
    session_ttl_seconds: int = Field(default=3600, gt=0)
    pr_limit: int = Field(default=50, gt=0)
    work_dir: str = "/tmp"
    notification_ttl_seconds: int = Field(default=86400, ge=0)
    shutdown_grace_seconds: float = Field(default=1.0, ge=0)


class RelaySettings(BaseSettings):
    """Settings for the relay service.

    Notes:
        Tests can point at a specific YAML file with the `CONFIG_FILE`
        environment variable, or pass sections directly as keyword arguments.
    """

    redis_password: str = Field(default="", validation_alias="REDIS_PASSWORD")
    slack_bot_token: str = Field(default="", validation_alias="SLACK_BOT_TOKEN")

    redis: RedisSection = Field(default_factory=RedisSection)
    channels: ChannelsSection = Field(default_factory=ChannelsSection)
    lists: ListsSection = Field(default_factory=ListsSection)
    slack: SlackSection = Field(default_factory=SlackSection)
    github: GitHubSection = Field(default_factory=GitHubSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)
    workflow: WorkflowSection = Field(default_factory=WorkflowSection)

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        yaml_file = Path(os.environ.get("CONFIG_FILE", str(DEFAULT_CONFIG_FILE)))
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=yaml_file),
            file_secret_settings,
        )

    def missing_requirements(self) -> list[str]:
        """Return human-readable descriptions of unmet startup requirements."""

        missing: list[str] = []
        if not self.slack_bot_token.strip():
            missing.append("SLACK_BOT_TOKEN environment variable is required")
        if not self.slack.channel_id.strip():
            missing.append("slack.channel_id must be set in the config file")
        return missing
