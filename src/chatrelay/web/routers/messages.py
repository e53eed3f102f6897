from uuid import UUID

from fastapi import APIRouter

from chatrelay.core.modules.message.models import MessageView
from chatrelay.web.deps import AppDep, IdentityDep
from chatrelay.web.openapi import ErrorResponse

router = APIRouter(tags=["messages"])


@router.get(
    "/messages/{user_id}",
    summary="Conversation history",
    description="Messages exchanged with a user, oldest first. Unread messages from that user are marked as read.",
    operation_id="getConversation",
    responses={
        200: {"description": "Messages ordered oldest to newest"},
        401: {"model": ErrorResponse, "description": "Token missing"},
        403: {"model": ErrorResponse, "description": "Token invalid"},
    },
)
async def get_conversation(user_id: UUID, app: AppDep, identity: IdentityDep) -> list[MessageView]:
    return await app.get_conversation(identity, user_id)
