from typing import Any

from fastapi import APIRouter

from chatrelay.web.deps import AppDep

router = APIRouter(tags=["metadata"])

ENDPOINTS = {
    "auth": ["POST /api/auth/register", "POST /api/auth/login"],
    "api": [
        "GET /api/contacts",
        "POST /api/contacts/add",
        "POST /api/users/search",
        "GET /api/messages/:userId",
        "POST /api/files/upload",
    ],
    "websocket": "Socket.IO en el mismo puerto",
}


@router.get("/", summary="Service banner", operation_id="getBanner")
async def banner(app: AppDep) -> dict[str, Any]:
    return app.get_banner(ENDPOINTS)


@router.get("/api/status", summary="Service status", operation_id="getStatus")
async def status(app: AppDep) -> dict[str, Any]:
    return app.get_status()
