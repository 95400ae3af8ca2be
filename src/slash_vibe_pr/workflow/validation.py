"""Validation of free-text repository arguments."""

from __future__ import annotations

import re

from .errors import ArgumentValidationError

# GitHub repository names: alphanumerics, hyphens, underscores and dots.
_VALID_REPO_NAME = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_repo_name(value: str) -> str:
    """Return the stripped repository name or raise ArgumentValidationError."""

    name = value.strip()
    if not _VALID_REPO_NAME.fullmatch(name):
        raise ArgumentValidationError(f"Invalid repository name: {value!r}")
    if ".." in name or name == ".":
        raise ArgumentValidationError(f"Repository name may not traverse paths: {value!r}")
    return name


def qualify_repo(org: str, name: str) -> str:
    """Prefix a bare repository name with the configured owner."""

    org = org.strip().strip("/")
    return f"{org}/{name}" if org else name
