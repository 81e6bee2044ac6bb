"""
CLI entry point for sftp-upload.

Provides the command-line interface using Click.
"""

import logging
import sys
import traceback
from typing import Optional

import click

from sftp_upload import __version__
from sftp_upload.config import load_upload_request
from sftp_upload.protocols.sftp import upload_sftp
from sftp_upload.utils import resolve_all

# Suppress paramiko's verbose error messages
logging.getLogger("paramiko").setLevel(logging.CRITICAL)


def version_callback(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Callback to display version and exit."""
    if value and not ctx.resilient_parsing:
        click.echo(f"sftp-upload version {__version__}")
        ctx.exit()


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--version",
    "-v",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--host", default=None, help="Remote SFTP host [input: host]")
@click.option("--port", default=None, help="Remote SSH port [input: port, default: 22]")
@click.option("--user", default=None, help="Remote user name [input: user]")
@click.option(
    "--private-key",
    default=None,
    help="Private key text used to authenticate [input: private-key]",
)
@click.option(
    "--remote-directory",
    default=None,
    help="Remote directory to upload into; created if missing [input: remote-directory]",
)
@click.option(
    "--local-file-globs",
    default=None,
    help="Newline-separated glob patterns of local files [input: local-file-globs]",
)
def main(
    host: Optional[str],
    port: Optional[str],
    user: Optional[str],
    private_key: Optional[str],
    remote_directory: Optional[str],
    local_file_globs: Optional[str],
) -> None:
    """
    Upload local files matching glob patterns to a remote SFTP directory.

    Every pattern must match at least one file. Files are uploaded into the
    remote directory under their base name with permissions rw-r--r--.

    \b
    Inputs are read from INPUT_* environment variables, as GitHub Actions
    sets them, and may be overridden with the options above:
      INPUT_HOST, INPUT_PORT, INPUT_USER, INPUT_PRIVATE-KEY,
      INPUT_REMOTE-DIRECTORY, INPUT_LOCAL-FILE-GLOBS

    \b
    Examples:
      sftp-upload --host=example.com --user=deploy \\
        --private-key="$(cat ~/.ssh/id_ed25519)" \\
        --remote-directory=/var/www/builds/42 \\
        --local-file-globs="$(printf 'dist/*.tar.gz\\ndist/*.whl')"
    """
    try:
        request = load_upload_request(
            {
                "host": host,
                "port": port,
                "user": user,
                "private-key": private_key,
                "remote-directory": remote_directory,
                "local-file-globs": local_file_globs,
            }
        )
        local_files = resolve_all(request.local_file_globs)
        upload_sftp(request, local_files)
    except click.ClickException:
        raise
    except Exception as e:
        click.echo(f"Error: {type(e).__name__}: {e}", err=True)
        click.echo(f"Traceback:\n{traceback.format_exc()}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
