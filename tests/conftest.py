"""
Shared pytest fixtures for sftp-upload tests.
"""

import errno
import posixpath
import stat
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional, Set
from unittest.mock import MagicMock, patch

import paramiko
import pytest


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_file_structure(temp_dir: Path) -> Path:
    """Create a sample file structure for testing."""
    (temp_dir / "src").mkdir()
    (temp_dir / "src" / "nested").mkdir()
    (temp_dir / "a").mkdir()

    (temp_dir / "src" / "a.txt").write_text("alpha")
    (temp_dir / "src" / "b.txt").write_text("bravo")
    (temp_dir / "src" / "app.js").write_text("console.log('app');")
    (temp_dir / "src" / "nested" / "c.txt").write_text("charlie")
    (temp_dir / "a" / "b1").write_text("b1")
    (temp_dir / "a" / "b2").write_text("b2")
    (temp_dir / "a" / "c1").write_text("c1")

    return temp_dir


@pytest.fixture
def chdir_to(sample_file_structure: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from inside the sample file structure."""
    monkeypatch.chdir(sample_file_structure)
    return sample_file_structure


class FakeSFTPServer:
    """
    In-memory stand-in for a paramiko.SFTPClient.

    Directories and files are tracked by absolute POSIX path. mkdir fails on
    an existing path or a missing parent, like a real server does.
    """

    def __init__(self) -> None:
        self.dirs: Set[str] = {"/"}
        self.files: Dict[str, bytes] = {}
        self.modes: Dict[str, int] = {}
        self.put_calls: List[str] = []
        self.fail_put_on: Optional[str] = None
        self.closed = False

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        attrs = paramiko.SFTPAttributes()
        if path in self.dirs:
            attrs.st_mode = stat.S_IFDIR | 0o755
        elif path in self.files:
            attrs.st_mode = stat.S_IFREG | self.modes.get(path, 0o600)
        else:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        return attrs

    def mkdir(self, path: str, mode: int = 0o777) -> None:
        if path in self.dirs or path in self.files:
            raise IOError("Failure")
        if posixpath.dirname(path) not in self.dirs:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        self.dirs.add(path)

    def put(self, localpath: str, remotepath: str) -> None:
        self.put_calls.append(remotepath)
        if self.fail_put_on is not None and localpath.endswith(self.fail_put_on):
            raise IOError("Failure: no space left on device")
        self.files[remotepath] = Path(localpath).read_bytes()

    def chmod(self, path: str, mode: int) -> None:
        self.modes[path] = mode

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_sftp() -> FakeSFTPServer:
    return FakeSFTPServer()


@pytest.fixture
def mock_ssh(fake_sftp: FakeSFTPServer) -> Generator[MagicMock, None, None]:
    """Patch paramiko so connections land on the fake server."""
    with patch(
        "sftp_upload.protocols.sftp.paramiko.SSHClient"
    ) as mock_ssh_class, patch(
        "sftp_upload.protocols.sftp.load_private_key"
    ) as mock_load_key:
        mock_load_key.return_value = MagicMock(spec=paramiko.PKey)
        ssh = MagicMock()
        ssh.open_sftp.return_value = fake_sftp
        mock_ssh_class.return_value = ssh
        yield ssh
