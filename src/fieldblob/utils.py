"""Utility functions for fieldblob."""


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def parse_field_ids(raw: list) -> list:
    """Parse field ids given as separate or comma-separated values.

    Examples:
        ["1", "2,3"] -> [1, 2, 3]
    """
    ids = []
    for item in raw:
        for part in str(item).split(","):
            part = part.strip()
            if not part:
                continue
            ids.append(int(part))
    return ids
