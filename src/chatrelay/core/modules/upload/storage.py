"""Disk storage for uploaded files."""

import re
from pathlib import Path

# "<timestamp ms>_<sanitized name>" as produced by build_stored_name
STORED_NAME_RE = re.compile(r"\d+_[\w.-]+")


def write_upload_file(uploads_path: str, stored_name: str, content: bytes) -> Path:
    """Write content to the uploads directory, creating it if needed."""
    directory = Path(uploads_path)
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / stored_name
    file_path.write_bytes(content)
    return file_path


def get_upload_file_path(uploads_path: str, stored_name: str) -> Path:
    """Resolve a stored file name to its path, refusing anything outside the uploads directory."""
    if not STORED_NAME_RE.fullmatch(stored_name):
        raise FileNotFoundError(stored_name)
    return Path(uploads_path) / stored_name
