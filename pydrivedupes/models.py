"""Data models for Google Drive API responses."""

from dataclasses import dataclass, field
from typing import Any, Optional


def _parse_size(value: Any) -> int:
    """Drive reports ``size`` as a decimal string, or omits it."""
    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class FileRecord:
    """Immutable snapshot of one file from the Drive listing."""

    id: str
    """Unique Drive file ID"""

    name: str
    """Display name"""

    md5_checksum: str = ""
    """Content hash; empty for folders and Google Workspace documents"""

    size: int = 0
    """Size in bytes"""

    parents: tuple[str, ...] = field(default_factory=tuple)
    """Parent folder IDs; only the first one is used"""

    mime_type: str = ""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FileRecord":
        """Create a FileRecord from a Drive ``files`` resource.

        Args:
            data: File resource dictionary

        Returns:
            FileRecord instance
        """
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            md5_checksum=data.get("md5Checksum") or "",
            size=_parse_size(data.get("size")),
            parents=tuple(data.get("parents") or ()),
            mime_type=data.get("mimeType", ""),
        )

    @property
    def parent_id(self) -> Optional[str]:
        """First parent folder ID, or None for files at the root."""
        return self.parents[0] if self.parents else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "id": self.id,
            "name": self.name,
            "md5Checksum": self.md5_checksum,
            "size": self.size,
            "parents": list(self.parents),
            "mimeType": self.mime_type,
        }


@dataclass(frozen=True)
class FolderNode:
    """A folder's name and its own parent, as needed for path building."""

    id: str
    name: str
    parent_id: Optional[str] = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FolderNode":
        """Create a FolderNode from a Drive ``files`` resource.

        Args:
            data: File resource with at least 'id', 'name' and 'parents'

        Returns:
            FolderNode instance
        """
        parents = data.get("parents") or []
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            parent_id=parents[0] if parents else None,
        )
