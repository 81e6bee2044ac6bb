"""
sftp-upload - Upload files matching glob patterns to a remote SFTP directory

License: MIT License
"""

__version__ = "1.0.0"

# Public API exports
from sftp_upload.config import (
    DEFAULT_PORT,
    UploadRequest,
    get_input,
    load_upload_request,
)
from sftp_upload.protocols.sftp import (
    UPLOAD_MODE,
    SFTPConnection,
    ensure_remote_directory,
    upload_sftp,
)
from sftp_upload.utils import resolve_all, resolve_pattern

__all__ = [
    "__version__",
    "DEFAULT_PORT",
    "UPLOAD_MODE",
    "UploadRequest",
    "get_input",
    "load_upload_request",
    "SFTPConnection",
    "ensure_remote_directory",
    "upload_sftp",
    "resolve_all",
    "resolve_pattern",
]
