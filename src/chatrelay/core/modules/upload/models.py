from pathlib import Path

from pydantic import BaseModel


class StoredFile(BaseModel):
    """Result of saving an uploaded file."""

    stored_name: str
    original_name: str
    size: int
    mime_type: str
    url: str


class UploadFileInfo(BaseModel):
    """Information needed to serve a stored file back."""

    file_path: Path
    filename: str
