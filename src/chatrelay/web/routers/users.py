from fastapi import APIRouter
from pydantic import BaseModel, Field

from chatrelay.core.modules.user.models import UserSearchView
from chatrelay.web.deps import AppDep, IdentityDep
from chatrelay.web.openapi import ErrorResponse

router = APIRouter(tags=["users"])


class SearchUserRequest(BaseModel):
    username: str = Field("", description="Username to look up, at least 2 characters")


class SearchUserResponse(BaseModel):
    success: bool
    usuario: UserSearchView | None = None
    message: str | None = None


@router.post(
    "/users/search",
    summary="Search user",
    description="Look up a user by username (case-insensitive).",
    operation_id="searchUser",
    response_model_exclude_none=True,
    responses={
        200: {"description": "Search result; success is false when no user matches"},
        400: {"model": ErrorResponse, "description": "Search term shorter than 2 characters"},
    },
)
async def search_user(data: SearchUserRequest, app: AppDep, identity: IdentityDep) -> SearchUserResponse:
    user = await app.search_user(identity, data.username)
    if user is None:
        return SearchUserResponse(success=False, message="Usuario no encontrado")
    return SearchUserResponse(success=True, usuario=user)
