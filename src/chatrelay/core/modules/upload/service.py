import asyncio
import time

import structlog

from chatrelay.core.core import Service
from chatrelay.core.modules.upload.models import StoredFile, UploadFileInfo
from chatrelay.core.modules.upload.storage import get_upload_file_path, write_upload_file
from chatrelay.core.modules.upload.utils import build_stored_name
from chatrelay.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class UploadService(Service):
    """Stores files shared in chats and serves them back."""

    async def save_file(self, filename: str, content: bytes, mime_type: str) -> StoredFile:
        """Save uploaded content to disk.

        Raises:
            ValidationError: If the file is empty or larger than the configured limit
        """
        config = self.core.config
        if not content:
            raise ValidationError("No se recibió archivo")
        if len(content) > config.max_upload_size:
            raise ValidationError(f"El archivo supera el tamaño máximo de {config.max_upload_size // (1024 * 1024)}MB")

        stored_name = build_stored_name(filename, int(time.time() * 1000))
        await asyncio.to_thread(write_upload_file, config.uploads_path, stored_name, content)
        logger.debug("file_uploaded", stored_name=stored_name, size=len(content))

        return StoredFile(
            stored_name=stored_name,
            original_name=filename,
            size=len(content),
            mime_type=mime_type,
            url=f"{config.public_url.rstrip('/')}/uploads/{stored_name}",
        )

    def get_file_info(self, stored_name: str) -> UploadFileInfo:
        try:
            file_path = get_upload_file_path(self.core.config.uploads_path, stored_name)
        except FileNotFoundError as e:
            raise NotFoundError("Archivo no encontrado") from e
        if not file_path.is_file():
            raise NotFoundError("Archivo no encontrado")
        return UploadFileInfo(file_path=file_path, filename=stored_name.split("_", 1)[-1])
