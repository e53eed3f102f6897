"""Utility functions for uploaded file handling."""

import re
from pathlib import Path


def build_stored_name(filename: str, timestamp_ms: int) -> str:
    """Prefix the sanitized filename with the upload timestamp so names never collide."""
    return f"{timestamp_ms}_{sanitize_filename(filename)}"


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe filesystem storage on Unix-like systems.

    Removes dangerous characters, prevents path traversal, and handles edge cases
    while preserving readability and file extensions.

    Args:
        filename: Original filename from user

    Returns:
        Sanitized filename safe for filesystem use
    """
    # Remove path components to prevent traversal attacks
    filename = Path(filename.replace("\\", "/")).name

    # Remove leading dots to prevent hidden files
    filename = filename.lstrip(".")

    # Allow only word characters, dots, and hyphens; spaces become underscores for URL safety
    sanitized = re.sub(r"\s+", "_", filename)
    sanitized = re.sub(r"[^\w.-]", "_", sanitized)
    sanitized = re.sub(r"_+", "_", sanitized)

    # Limit length to 100 characters while preserving extension
    if len(sanitized) > 100:
        parts = sanitized.rsplit(".", 1)
        if len(parts) == 2:
            name, ext = parts
            max_name_len = 96 - len(ext)
            sanitized = f"{name[:max_name_len]}.{ext}" if max_name_len > 0 else f"file.{ext}"
        else:
            sanitized = sanitized[:100]

    if not sanitized or not re.sub(r"[\s._-]", "", sanitized):
        sanitized = "unnamed_file"

    return sanitized
