"""
Exceptions raised by sftp-upload.

All of them are Click exceptions: when one escapes the command, Click prints
``Error: <message>`` to stderr and exits with status 1.
"""

from typing import List, Sequence

import click


class UploadError(click.ClickException):
    """Base class for sftp-upload failures."""


class ConfigurationError(UploadError):
    """A required input is missing or an input value is malformed."""


class InvalidPatternError(ConfigurationError):
    """A glob pattern spans more than one line."""

    def __init__(self, pattern: str) -> None:
        super().__init__(
            f"Pattern should not contain a newline character, but it does: {pattern!r}"
        )
        self.pattern = pattern


class UnmatchedPatternsError(UploadError):
    """One or more glob patterns matched no local files."""

    def __init__(self, patterns: Sequence[str]) -> None:
        self.patterns: List[str] = list(patterns)
        super().__init__(
            f"{len(self.patterns)} pattern(s) matched no files: "
            + ", ".join(self.patterns)
        )


class ConnectionSetupError(UploadError):
    """The connection could not be prepared (e.g. unreadable private key)."""
