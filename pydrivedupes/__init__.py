"""PyDriveDupes - find duplicate files in Google Drive by content hash."""

from .api import DriveClient
from .duplicate_finder import DuplicateFileFinder, group_duplicates
from .exceptions import (
    CycleDetectedError,
    DriveAPIError,
    DriveAuthenticationError,
    DriveConfigError,
    DriveDupesError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    FolderNotFoundError,
    PathResolutionError,
    SourceUnavailableError,
)
from .file_source import DriveFileSource, FileSource
from .models import FileRecord, FolderNode
from .path_resolver import ROOT_PATH, PathResolver, resolve_paths

__all__ = [
    "DriveClient",
    "DriveFileSource",
    "DuplicateFileFinder",
    "FileRecord",
    "FileSource",
    "FolderNode",
    "PathResolver",
    "ROOT_PATH",
    "group_duplicates",
    "resolve_paths",
    "CycleDetectedError",
    "DriveAPIError",
    "DriveAuthenticationError",
    "DriveConfigError",
    "DriveDupesError",
    "DriveInvalidResponseError",
    "DriveNetworkError",
    "DriveNotFoundError",
    "DrivePermissionError",
    "DriveRateLimitError",
    "FolderNotFoundError",
    "PathResolutionError",
    "SourceUnavailableError",
]
