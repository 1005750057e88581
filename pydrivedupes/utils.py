"""Utility functions for pydrivedupes."""

# =============================================================================
# Constants
# =============================================================================

# Files per listing page; Drive rejects anything above 1000
DEFAULT_PAGE_SIZE: int = 1000

# Retry configuration for transient errors
DEFAULT_MAX_RETRIES: int = 3
DEFAULT_RETRY_DELAY: float = 1.0  # seconds

# OAuth redirect port for the local authorization server
DEFAULT_OAUTH_PORT: int = 8080


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
