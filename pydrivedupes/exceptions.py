"""Exceptions raised by pydrivedupes."""

from typing import Optional


class DriveDupesError(Exception):
    """Base exception for all pydrivedupes errors."""


class DriveAPIError(DriveDupesError):
    """Raised when a Google Drive API request fails."""


class DriveAuthenticationError(DriveAPIError):
    """Raised when the access token is missing, expired or rejected."""


class DrivePermissionError(DriveAPIError):
    """Raised when access to a resource is forbidden."""


class DriveNotFoundError(DriveAPIError):
    """Raised when a requested resource does not exist."""


class DriveRateLimitError(DriveAPIError):
    """Raised when the API reports a rate or quota limit."""


class DriveNetworkError(DriveAPIError):
    """Raised on connection failures and timeouts."""


class DriveInvalidResponseError(DriveAPIError):
    """Raised when the server returns something that is not valid JSON."""


class DriveConfigError(DriveDupesError):
    """Raised when credentials or configuration are missing or invalid."""


class SourceUnavailableError(DriveDupesError):
    """Raised when the file listing cannot be retrieved.

    This is fatal for a run: without the listing there is nothing to
    resolve or group.
    """


class PathResolutionError(DriveDupesError):
    """Base class for errors resolving the folder path of a single file."""


class FolderNotFoundError(PathResolutionError):
    """Raised when metadata for a referenced parent folder cannot be fetched."""

    def __init__(self, folder_id: str, reason: Optional[str] = None):
        self.folder_id = folder_id
        self.reason = reason
        message = f"Folder not found: {folder_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CycleDetectedError(PathResolutionError):
    """Raised when a folder is its own transitive ancestor."""

    def __init__(self, folder_id: str, chain: list[str]):
        self.folder_id = folder_id
        self.chain = list(chain)
        cycle = " -> ".join([*self.chain, folder_id])
        super().__init__(f"Cycle detected in folder hierarchy: {cycle}")
