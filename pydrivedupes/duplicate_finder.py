"""Utilities for finding duplicate files in Google Drive by content hash."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .models import FileRecord
from .output import OutputFormatter
from .path_resolver import PathResult

logger = logging.getLogger(__name__)

UNRESOLVED_MARKER = "<unresolved>"


def group_duplicates(files: Iterable[FileRecord]) -> dict[str, list[FileRecord]]:
    """Group files that share an MD5 checksum.

    Files without a checksum (folders, Google Docs) are never grouped, not
    even with each other. Within a group the first-seen file comes first.

    Args:
        files: File records to group

    Returns:
        Dictionary mapping checksum to the files sharing it. Only checksums
        shared by 2+ files are included.
    """
    first_seen: dict[str, FileRecord] = {}
    duplicates: dict[str, list[FileRecord]] = {}

    for record in files:
        checksum = record.md5_checksum
        if not checksum:
            continue

        if checksum in duplicates:
            duplicates[checksum].append(record)
        elif checksum in first_seen:
            duplicates[checksum] = [first_seen[checksum], record]
        else:
            first_seen[checksum] = record

    return duplicates


def wasted_space(duplicates: Mapping[str, list[FileRecord]]) -> int:
    """Bytes that would be freed by keeping one copy of each group."""
    return sum(group[0].size * (len(group) - 1) for group in duplicates.values())


def format_path(result: Optional[PathResult]) -> str:
    """Render a resolved path, or the unresolved marker with its reason."""
    if result is None:
        return UNRESOLVED_MARKER
    if isinstance(result, Exception):
        return f"{UNRESOLVED_MARKER} ({result})"
    return result


class DuplicateFileFinder:
    """Finds and reports files with identical content."""

    def __init__(self, out: OutputFormatter):
        """Initialize duplicate file finder.

        Args:
            out: Output formatter for messages
        """
        self.out = out

    def find_duplicates(
        self, files: Iterable[FileRecord], min_size: int = 0
    ) -> dict[str, list[FileRecord]]:
        """Find duplicate files by MD5 checksum.

        Args:
            files: Complete file listing
            min_size: Drop groups whose files are smaller than this many bytes

        Returns:
            Dictionary mapping checksum to lists of 2+ FileRecord objects
        """
        self.out.info("Scanning for duplicate files...")

        duplicates = group_duplicates(files)
        if min_size > 0:
            duplicates = {
                checksum: group
                for checksum, group in duplicates.items()
                if group[0].size >= min_size
            }

        logger.info(f"Found {len(duplicates)} duplicate groups")
        self.out.info(f"Found {len(duplicates)} duplicate file groups")

        return duplicates

    def build_report(
        self,
        duplicates: Mapping[str, list[FileRecord]],
        paths: Mapping[str, PathResult],
    ) -> dict[str, Any]:
        """Build a JSON-serializable report of the duplicate groups.

        Groups are ordered by wasted space, largest first.

        Args:
            duplicates: Duplicate groups from find_duplicates
            paths: Resolved folder paths keyed by file ID

        Returns:
            Report dictionary
        """
        groups = []
        unresolved = 0
        for checksum, entries in self._sorted_groups(duplicates):
            files = []
            for entry in entries:
                result = paths.get(entry.id)
                file_info = entry.to_dict()
                file_info["path"] = result if isinstance(result, str) else None
                if isinstance(result, Exception):
                    file_info["path_error"] = str(result)
                    unresolved += 1
                files.append(file_info)
            groups.append(
                {
                    "hash": checksum,
                    "size": entries[0].size,
                    "count": len(entries),
                    "files": files,
                }
            )

        return {
            "duplicate_groups": groups,
            "total_groups": len(groups),
            "total_duplicates": sum(len(g) - 1 for g in duplicates.values()),
            "wasted_bytes": wasted_space(duplicates),
            "unresolved_paths": unresolved,
        }

    def display_duplicates(
        self,
        duplicates: Mapping[str, list[FileRecord]],
        paths: Optional[Mapping[str, PathResult]] = None,
    ) -> None:
        """Display duplicate files to the user.

        Files whose path failed to resolve are still listed, with the
        unresolved marker in place of the path.

        Args:
            duplicates: Dictionary of duplicate file groups
            paths: Resolved folder paths keyed by file ID (None to omit paths)
        """
        if self.out.json_output:
            self.out.output_json(self.build_report(duplicates, paths or {}))
            return

        if not duplicates:
            self.out.print("No duplicate files found.")
            return

        self.out.print(f"\nFound {len(duplicates)} groups of duplicate files:\n")

        for checksum, entries in self._sorted_groups(duplicates):
            size = self.out.format_size(entries[0].size)
            self.out.print(f"Hash: {checksum} ({size}, {len(entries)} copies)")

            for entry in entries:
                line = f"  ID: {entry.id}, Name: {entry.name}, Size: {entry.size}"
                if paths is not None:
                    line += f", Path: {format_path(paths.get(entry.id))}"
                self.out.print(line)

            self.out.print("")

        total = sum(len(group) - 1 for group in duplicates.values())
        self.out.print(
            f"{total} duplicate file(s), "
            f"{self.out.format_size(wasted_space(duplicates))} reclaimable"
        )

    @staticmethod
    def _sorted_groups(
        duplicates: Mapping[str, list[FileRecord]],
    ) -> list[tuple[str, list[FileRecord]]]:
        return sorted(
            duplicates.items(),
            key=lambda item: item[1][0].size * (len(item[1]) - 1),
            reverse=True,
        )
