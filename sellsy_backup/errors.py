"""Exceptions raised by the backup pipeline."""
from typing import Optional


class BackupError(Exception):
    """Base class for backup failures."""


class AuthenticationError(BackupError):
    """Token exchange did not succeed."""


class FetchError(BackupError):
    """A collection page could not be fetched or was malformed."""


class DownloadError(BackupError):
    """A document transfer failed."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class RedirectLoopError(DownloadError):
    """Too many redirect hops while downloading a document."""


class FilesystemError(BackupError):
    """Writing, archiving or deleting a local artifact failed."""
