"""
SFTP protocol implementation for sftp-upload.

Handles the SFTP connection, remote directory creation and file upload.
"""

import posixpath
import stat
from io import StringIO
from pathlib import Path
from typing import List, Optional, Sequence, Type

import click
import paramiko

from sftp_upload.config import DEFAULT_PORT, UploadRequest
from sftp_upload.errors import ConnectionSetupError
from sftp_upload.utils import remote_path_for

# rw-r--r--
UPLOAD_MODE = 0o644

KEY_TYPES: List[Type[paramiko.PKey]] = [
    paramiko.Ed25519Key,
    paramiko.ECDSAKey,
    paramiko.RSAKey,
]


def load_private_key(key_text: str) -> paramiko.PKey:
    """
    Parse a private key given as text.

    Args:
        key_text: Private key in OpenSSH or PEM format.

    Returns:
        The parsed key.

    Raises:
        ConnectionSetupError: If the text is not a supported private key.
    """
    for key_type in KEY_TYPES:
        try:
            return key_type.from_private_key(StringIO(key_text))
        except paramiko.PasswordRequiredException:
            raise ConnectionSetupError(
                "Private key is encrypted; passphrase-protected keys are not supported"
            ) from None
        except (paramiko.SSHException, ValueError):
            continue
    raise ConnectionSetupError(
        "Could not parse private key (supported types: Ed25519, ECDSA, RSA)"
    )


class SFTPConnection:
    """
    An authenticated SFTP session.

    Use as a context manager; the session is closed when the block exits,
    whether or not an error is raised inside it.
    """

    def __init__(self, ssh: paramiko.SSHClient, sftp: paramiko.SFTPClient) -> None:
        self._ssh: Optional[paramiko.SSHClient] = ssh
        self._sftp: Optional[paramiko.SFTPClient] = sftp

    @classmethod
    def connect(
        cls, host: str, user: str, private_key: str, port: int = DEFAULT_PORT
    ) -> "SFTPConnection":
        """
        Open a session authenticated with ``private_key``.

        Errors propagate unchanged; nothing is left open when this raises.
        """
        pkey = load_private_key(private_key)

        ssh = paramiko.SSHClient()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            ssh.connect(
                host,
                port,
                user,
                pkey=pkey,
                timeout=60,
                allow_agent=False,
                look_for_keys=False,
            )
            sftp = ssh.open_sftp()
        except Exception:
            ssh.close()
            raise
        return cls(ssh, sftp)

    @property
    def sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise paramiko.SSHException("SFTP connection is closed")
        return self._sftp

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        return self.sftp.stat(path)

    def is_dir(self, path: str) -> bool:
        """Return True if ``path`` exists and is a directory."""
        mode = self.stat(path).st_mode
        return mode is not None and stat.S_ISDIR(mode)

    def mkdir(self, path: str, recursive: bool = True) -> None:
        """
        Create ``path`` on the server.

        With ``recursive`` set, missing parent directories are created first.
        The final mkdir is always issued, so an already existing ``path``
        makes this raise.
        """
        if recursive:
            parent = posixpath.dirname(path.rstrip("/"))
            if parent and parent != path:
                try:
                    self.stat(parent)
                except IOError:
                    self.mkdir(parent, recursive=True)
        self.sftp.mkdir(path)

    def put(self, local_path: str, remote_path: str, mode: int = UPLOAD_MODE) -> None:
        """Upload ``local_path`` to ``remote_path`` and set its permissions."""
        self.sftp.put(local_path, remote_path)
        self.sftp.chmod(remote_path, mode)

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        sftp, self._sftp = self._sftp, None
        ssh, self._ssh = self._ssh, None
        try:
            if sftp is not None:
                sftp.close()
        finally:
            if ssh is not None:
                ssh.close()

    def __enter__(self) -> "SFTPConnection":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def ensure_remote_directory(connection: SFTPConnection, path: str) -> None:
    """
    Make sure ``path`` exists on the server and is a directory.

    SFTP servers do not reliably tell "already exists" apart from other mkdir
    failures, so a failed mkdir is followed by a stat of the path. An existing
    directory counts as success. Anything else re-raises the mkdir error; the
    stat result or error is never reported.

    Args:
        connection: Open SFTP connection.
        path: Remote directory path.

    Raises:
        Exception: The original mkdir error, if the path is not a directory
            afterwards.
    """
    try:
        connection.mkdir(path, recursive=True)
    except Exception as mkdir_error:
        try:
            is_dir = connection.is_dir(path)
        except Exception:
            # Missing or unreadable: report the mkdir failure
            is_dir = False
        if not is_dir:
            raise mkdir_error


def upload_sftp(request: UploadRequest, files: Sequence[Path]) -> None:
    """
    Upload files into the remote directory over a single SFTP connection.

    Files are sent one at a time. The first failure stops the run; files
    already uploaded are left in place. The connection is closed on every
    exit path.

    Args:
        request: Connection details and the remote directory.
        files: Local files to upload.
    """
    with SFTPConnection.connect(
        request.host, request.user, request.private_key, request.port
    ) as connection:
        click.echo(f"note: Uploading to remote directory: {request.remote_directory}")
        ensure_remote_directory(connection, request.remote_directory)
        for local_file in files:
            click.echo(f"note: Uploading: {local_file}")
            connection.put(
                str(local_file),
                remote_path_for(local_file, request.remote_directory),
                mode=UPLOAD_MODE,
            )
