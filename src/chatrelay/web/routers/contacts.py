from fastapi import APIRouter
from pydantic import BaseModel, Field

from chatrelay.core.modules.contact.models import ContactView
from chatrelay.web.deps import AppDep, IdentityDep
from chatrelay.web.openapi import ErrorResponse

router = APIRouter(tags=["contacts"])


class AddContactRequest(BaseModel):
    """Add a contact by id or by username."""

    contacto_id: str | None = Field(None, description="User ID of the contact")
    username: str | None = Field(None, description="Username of the contact")


class AddContactResponse(BaseModel):
    success: bool = True
    message: str


@router.get(
    "/contacts",
    summary="List contacts",
    description="Contacts of the current user with presence, last message and unread count.",
    operation_id="listContacts",
    responses={
        200: {"description": "Contact list"},
        401: {"model": ErrorResponse, "description": "Token missing"},
        403: {"model": ErrorResponse, "description": "Token invalid"},
    },
)
async def list_contacts(app: AppDep, identity: IdentityDep) -> list[ContactView]:
    return await app.get_contacts(identity)


@router.post(
    "/contacts/add",
    summary="Add contact",
    operation_id="addContact",
    responses={
        200: {"description": "Contact added"},
        400: {"model": ErrorResponse, "description": "Neither contacto_id nor username given, or adding yourself"},
        404: {"model": ErrorResponse, "description": "User not found"},
        409: {"model": ErrorResponse, "description": "Contact already exists"},
    },
)
async def add_contact(data: AddContactRequest, app: AppDep, identity: IdentityDep) -> AddContactResponse:
    user = await app.add_contact(identity, data.contacto_id, data.username)
    return AddContactResponse(message=f"Contacto {user.username} agregado")
