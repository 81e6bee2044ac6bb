"""
Input loading for sftp-upload.

Inputs follow the GitHub Actions convention: input ``name`` is read from the
``INPUT_<NAME>`` environment variable. Values given on the command line take
precedence over the environment.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from sftp_upload.errors import ConfigurationError

DEFAULT_PORT = 22

REQUIRED_INPUTS = (
    "host",
    "local-file-globs",
    "private-key",
    "remote-directory",
    "user",
)


@dataclass(frozen=True)
class UploadRequest:
    """Everything needed for one upload run."""

    host: str
    user: str
    private_key: str
    remote_directory: str
    local_file_globs: Tuple[str, ...]
    port: int = DEFAULT_PORT

    def __repr__(self) -> str:
        # Keep the key out of tracebacks and logs
        return (
            f"UploadRequest(host={self.host!r}, user={self.user!r}, "
            f"private_key='***', remote_directory={self.remote_directory!r}, "
            f"local_file_globs={self.local_file_globs!r}, port={self.port!r})"
        )


def input_env_name(name: str) -> str:
    """Return the environment variable that carries input ``name``."""
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Read a named input.

    Args:
        name: Input name, e.g. ``remote-directory``.
        environ: Mapping to read from (default: ``os.environ``).

    Returns:
        The whitespace-trimmed value, or None if the input is absent.
    """
    if environ is None:
        environ = os.environ
    value = environ.get(input_env_name(name))
    if value is None:
        return None
    return value.strip()


def get_required_input(
    name: str,
    override: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Read a required input, preferring ``override`` when it is given.

    Raises:
        ConfigurationError: If the input is absent or empty.
    """
    value = override.strip() if override is not None else get_input(name, environ)
    if not value:
        raise ConfigurationError(f"Missing required input: {name}")
    return value


def parse_port(value: Optional[str]) -> int:
    """Parse the optional ``port`` input."""
    if not value:
        return DEFAULT_PORT
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid port: {value!r}") from None
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range: {port}")
    return port


def load_upload_request(
    overrides: Optional[Mapping[str, Optional[str]]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> UploadRequest:
    """
    Build the UploadRequest from named inputs.

    Args:
        overrides: Input values keyed by input name (``None`` means not given).
        environ: Mapping to read inputs from (default: ``os.environ``).

    Returns:
        The immutable request for this run.

    Raises:
        ConfigurationError: If a required input is missing or empty.
    """
    overrides = overrides or {}
    values = {
        name: get_required_input(name, overrides.get(name), environ)
        for name in REQUIRED_INPUTS
    }

    port_value = overrides.get("port")
    if port_value is None:
        port_value = get_input("port", environ)
    else:
        port_value = port_value.strip()

    return UploadRequest(
        host=values["host"],
        user=values["user"],
        private_key=values["private-key"],
        remote_directory=values["remote-directory"],
        local_file_globs=tuple(values["local-file-globs"].split("\n")),
        port=parse_port(port_value),
    )
