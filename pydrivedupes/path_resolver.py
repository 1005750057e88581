"""Resolve the folder path of files from their parent references."""

import logging
from collections.abc import Iterable
from typing import Callable, Optional, Union

from .exceptions import CycleDetectedError, PathResolutionError
from .file_source import FileSource
from .models import FileRecord, FolderNode

logger = logging.getLogger(__name__)

ROOT_PATH = "root"

PathResult = Union[str, PathResolutionError]


class PathResolver:
    """Builds ``Top/Sub/Leaf`` folder paths by walking parent chains.

    Folder lookups go to the file source only on cache misses. Both the
    fetched folders and the resolved path of every folder seen are kept for
    the lifetime of the resolver, so a folder shared by many files is looked
    up once. Failed lookups are remembered as well: every folder whose chain
    hit the failure reports the same error without another round-trip.
    """

    def __init__(self, source: FileSource):
        """Initialize the resolver.

        Args:
            source: File source used for folder lookups
        """
        self.source = source
        self.folder_lookups = 0
        self._folders: dict[str, FolderNode] = {}
        self._paths: dict[str, str] = {}
        self._failures: dict[str, PathResolutionError] = {}

    def resolve_path(self, record: FileRecord) -> str:
        """Return the path of the folder containing ``record``.

        The file's own name is not part of the result.

        Args:
            record: File to resolve

        Returns:
            Folder path, or ROOT_PATH for files without a parent

        Raises:
            FolderNotFoundError: If an ancestor folder cannot be looked up
            CycleDetectedError: If the parent chain loops
        """
        if record.parent_id is None:
            return ROOT_PATH
        return self.resolve_folder(record.parent_id)

    def resolve_folder(self, folder_id: str) -> str:
        """Return the full path of a folder, names joined root-most first."""
        chain: list[str] = []
        visited: set[str] = set()
        base: Optional[str] = None
        current: Optional[str] = folder_id

        try:
            while current is not None:
                if current in self._paths:
                    base = self._paths[current]
                    break
                if current in self._failures:
                    # Drop the frames of earlier raises of the shared error
                    raise self._failures[current].with_traceback(None)
                if current in visited:
                    raise CycleDetectedError(current, chain)
                visited.add(current)
                chain.append(current)
                current = self._get_folder(current).parent_id
        except PathResolutionError as e:
            for pending in chain:
                self._failures.setdefault(pending, e)
            raise

        for pending in reversed(chain):
            name = self._folders[pending].name
            base = f"{base}/{name}" if base is not None else name
            self._paths[pending] = base

        return self._paths[folder_id]

    def _get_folder(self, folder_id: str) -> FolderNode:
        folder = self._folders.get(folder_id)
        if folder is None:
            self.folder_lookups += 1
            folder = self.source.get_folder(folder_id)
            self._folders[folder_id] = folder
        else:
            logger.debug(f"Folder cache hit: {folder_id}")
        return folder

    def resolve_paths(
        self,
        files: Iterable[FileRecord],
        progress_callback: Optional[Callable[[FileRecord], None]] = None,
    ) -> dict[str, PathResult]:
        """Resolve the folder path of every file.

        A failure for one file never stops the others: the error is logged
        and stored in place of the path.

        Args:
            files: Files to resolve
            progress_callback: Optional callback invoked after each file

        Returns:
            Dictionary mapping file ID to path or to the resolution error
        """
        paths: dict[str, PathResult] = {}
        failed = 0

        for record in files:
            try:
                paths[record.id] = self.resolve_path(record)
            except PathResolutionError as e:
                logger.warning(f"Could not resolve path of {record.name!r}: {e}")
                paths[record.id] = e
                failed += 1

            if progress_callback:
                progress_callback(record)

        logger.info(
            f"Resolved {len(paths) - failed} of {len(paths)} paths "
            f"with {self.folder_lookups} folder lookup(s)"
        )
        return paths

    def clear_cache(self) -> None:
        """Forget every cached folder, path and failure."""
        self._folders.clear()
        self._paths.clear()
        self._failures.clear()


def resolve_paths(
    source: FileSource, files: Iterable[FileRecord]
) -> dict[str, PathResult]:
    """Resolve paths for ``files`` with a fresh resolver over ``source``."""
    return PathResolver(source).resolve_paths(files)
