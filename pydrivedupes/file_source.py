"""File sources: where file listings and folder metadata come from."""

import logging
from typing import Callable, Optional, Protocol

from .api import DriveClient
from .exceptions import DriveAPIError, FolderNotFoundError, SourceUnavailableError
from .models import FileRecord, FolderNode
from .utils import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

FILE_FIELDS = "id, name, mimeType, size, md5Checksum, parents"
LIST_FIELDS = f"nextPageToken, files({FILE_FIELDS})"
FOLDER_FIELDS = "id, name, parents"


class FileSource(Protocol):
    """Anything that can list every file and look up a folder by ID."""

    def list_all_files(self) -> list[FileRecord]:
        """Return the complete file listing.

        Raises:
            SourceUnavailableError: If the listing cannot be retrieved
        """
        ...

    def get_folder(self, folder_id: str) -> FolderNode:
        """Return the name and parent of a folder.

        Raises:
            FolderNotFoundError: If the folder cannot be looked up
        """
        ...


class DriveFileSource:
    """FileSource backed by the Google Drive v3 API with automatic pagination."""

    def __init__(
        self,
        client: DriveClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        include_trashed: bool = False,
    ):
        """Initialize the Drive file source.

        Args:
            client: Drive API client
            page_size: Number of files requested per page (max 1000)
            include_trashed: Whether trashed files are part of the listing
        """
        self.client = client
        self.page_size = page_size
        self.include_trashed = include_trashed

    def list_all_files(
        self, page_callback: Optional[Callable[[int, int], None]] = None
    ) -> list[FileRecord]:
        """Fetch every file the user can see, following page tokens.

        Args:
            page_callback: Optional callback(page_number, total_so_far)
                invoked after each page

        Returns:
            List of all file records

        Raises:
            SourceUnavailableError: If any page request fails
        """
        query = None if self.include_trashed else "trashed = false"
        all_files: list[FileRecord] = []
        page_token: Optional[str] = None
        page = 0

        try:
            while True:
                result = self.client.list_files(
                    page_size=self.page_size,
                    page_token=page_token,
                    fields=LIST_FIELDS,
                    query=query,
                )
                page += 1
                all_files.extend(
                    FileRecord.from_api_response(item)
                    for item in result.get("files", [])
                )
                logger.debug(f"Page {page}: {len(all_files)} files so far")

                if page_callback:
                    page_callback(page, len(all_files))

                page_token = result.get("nextPageToken")
                if not page_token:
                    break
        except DriveAPIError as e:
            raise SourceUnavailableError(
                f"Unable to retrieve files (after {page} page(s)): {e}"
            ) from e

        return all_files

    def get_folder(self, folder_id: str) -> FolderNode:
        """Look up a folder's name and parent.

        Args:
            folder_id: Drive folder ID

        Returns:
            FolderNode for the folder

        Raises:
            FolderNotFoundError: If the lookup fails for any reason
        """
        try:
            result = self.client.get_file(folder_id, fields=FOLDER_FIELDS)
        except DriveAPIError as e:
            raise FolderNotFoundError(folder_id, str(e)) from e

        logger.debug(f"Fetched folder {folder_id}: {result.get('name')!r}")
        return FolderNode.from_api_response(result)
