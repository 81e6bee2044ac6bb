"""
Transfer protocol implementations for sftp-upload.
"""

from sftp_upload.protocols.sftp import SFTPConnection, upload_sftp

__all__ = ["SFTPConnection", "upload_sftp"]
