from fastapi import APIRouter, UploadFile
from fastapi.responses import FileResponse
from pydantic import BaseModel

from chatrelay.errors import ValidationError
from chatrelay.web.deps import AppDep, IdentityDep
from chatrelay.web.openapi import ErrorResponse

router = APIRouter(tags=["files"])


class UploadResponse(BaseModel):
    success: bool = True
    fileUrl: str  # noqa: N815
    fileName: str  # noqa: N815
    fileSize: int  # noqa: N815


@router.post(
    "/api/files/upload",
    summary="Upload file",
    description="Upload a file (max 25MB) to share in a chat. Returns a public URL for it.",
    operation_id="uploadFile",
    responses={
        200: {"description": "File stored"},
        400: {"model": ErrorResponse, "description": "No file or file too large"},
    },
)
async def upload_file(app: AppDep, identity: IdentityDep, file: UploadFile | None = None) -> UploadResponse:
    if file is None:
        raise ValidationError("No se recibió archivo")
    content = await file.read()
    filename = file.filename or "unnamed"
    mime_type = file.content_type or "application/octet-stream"
    stored = await app.upload_file(identity, filename, content, mime_type)
    return UploadResponse(fileUrl=stored.url, fileName=stored.original_name, fileSize=stored.size)


@router.get(
    "/uploads/{file_name}",
    summary="Download uploaded file",
    operation_id="downloadFile",
    response_model=None,
    responses={404: {"model": ErrorResponse, "description": "File not found"}},
)
async def download_file(file_name: str, app: AppDep) -> FileResponse:
    file_info = app.get_upload_file_info(file_name)
    return FileResponse(path=file_info.file_path, filename=file_info.filename)
