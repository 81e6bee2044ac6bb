"""
Utility functions for sftp-upload.

Contains glob pattern resolution and remote path calculation.
"""

import glob
import os
import posixpath
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Union

import click

from sftp_upload.errors import InvalidPatternError, UnmatchedPatternsError


def check_pattern(pattern: str) -> None:
    """
    Reject a pattern that spans more than one line.

    Patterns arrive newline-delimited, so a newline inside one means the
    input was split incorrectly.

    Raises:
        InvalidPatternError: If the pattern contains a newline.
    """
    if "\n" in pattern:
        raise InvalidPatternError(pattern)


def walk_directory(directory: Path) -> List[Path]:
    """Return every regular file below ``directory``, sorted."""
    files: List[Path] = []
    for root, _dirs, filenames in os.walk(directory):
        for filename in filenames:
            path = Path(root) / filename
            if path.is_file():
                files.append(path)
    return sorted(files)


def resolve_pattern(pattern: str) -> List[Path]:
    """
    Expand one glob pattern against the local filesystem.

    ``**`` matches across directories and wildcards match dotfiles. A match
    that is a directory stands for every file beneath it.

    Args:
        pattern: Glob pattern or plain path.

    Returns:
        Absolute paths of the matching files, possibly empty.

    Raises:
        InvalidPatternError: If the pattern contains a newline.
    """
    check_pattern(pattern)

    files: List[Path] = []
    for match in sorted(glob.glob(pattern, recursive=True, include_hidden=True)):
        path = Path(os.path.abspath(match))
        if path.is_dir():
            files.extend(walk_directory(path))
        elif path.is_file():
            files.append(path)
    return files


def remove_duplicates(paths: Sequence[Path]) -> List[Path]:
    """Drop repeated paths, keeping the first occurrence of each."""
    return list(dict.fromkeys(paths))


def resolve_all(
    patterns: Sequence[str], max_workers: Optional[int] = None
) -> List[Path]:
    """
    Resolve every pattern and combine the results.

    Patterns are resolved concurrently and all of them are evaluated, so every
    pattern that matched nothing is reported, not just the first one.

    Args:
        patterns: Glob patterns, one per input line.
        max_workers: Thread pool size (default: one per pattern, at most 8).

    Returns:
        Deduplicated list of files to upload.

    Raises:
        InvalidPatternError: If any pattern contains a newline. Raised before
            the filesystem is touched.
        UnmatchedPatternsError: If any pattern matched no files.
    """
    for pattern in patterns:
        check_pattern(pattern)

    if not patterns:
        click.echo("note: Found 0 files to upload")
        return []

    if max_workers is None:
        max_workers = min(len(patterns), 8)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        files_by_pattern: List[List[Path]] = list(
            executor.map(resolve_pattern, patterns)
        )

    unmatched: List[str] = []
    for pattern, files in zip(patterns, files_by_pattern):
        if not files:
            click.echo(f"error: Pattern matched no files: {pattern}", err=True)
            unmatched.append(pattern)

    if unmatched:
        raise UnmatchedPatternsError(unmatched)

    local_files = remove_duplicates(
        [path for files in files_by_pattern for path in files]
    )
    click.echo(f"note: Found {len(local_files)} files to upload")
    return local_files


def remote_path_for(local_file: Union[str, Path], remote_directory: str) -> str:
    """
    Calculate where a local file lands on the server.

    Only the base name of the local file is kept; its directories are dropped.

    Args:
        local_file: Local file path.
        remote_directory: Remote target directory.

    Returns:
        Remote POSIX path string.
    """
    return posixpath.join(remote_directory, Path(local_file).name)
