"""Contact directory routes."""

from fastapi import APIRouter, Depends, Request

from api.base import success_response
from auth.dependencies import AdminRequired, optional_user, require_user
from auth.types import User
from core.exceptions import ContactNotFoundError
from core.models import ContactCreate, ContactUpdate
from core.services.contact_service import ContactService


def create_contacts_router(contacts: ContactService, admin: AdminRequired) -> APIRouter:
    router = APIRouter(prefix="/contacts", tags=["contacts"])

    @router.get("")
    async def list_contacts(request: Request):
        """Full entries for signed-in users; id and name only for everyone else."""
        if optional_user(request) is None:
            summaries = contacts.list_summaries()
            return success_response(
                [s.model_dump(mode="json") for s in summaries]
            ).model_dump(mode="json")
        return success_response(
            [c.model_dump(mode="json") for c in contacts.list_all()]
        ).model_dump(mode="json")

    @router.get("/{contact_id}")
    async def get_contact(contact_id: int, user: User = Depends(require_user)):
        contact = contacts.get_by_id(contact_id)
        if contact is None:
            raise ContactNotFoundError(f"Contact {contact_id} not found")
        return success_response(contact.model_dump(mode="json")).model_dump(mode="json")

    @router.post("", status_code=201)
    async def create_contact(body: ContactCreate, user: User = Depends(admin)):
        contact = contacts.create(body)
        return success_response(contact.model_dump(mode="json")).model_dump(mode="json")

    @router.put("/{contact_id}")
    async def update_contact(contact_id: int, body: ContactUpdate, user: User = Depends(admin)):
        contact = contacts.update(contact_id, body)
        return success_response(contact.model_dump(mode="json")).model_dump(mode="json")

    @router.delete("/{contact_id}")
    async def delete_contact(contact_id: int, user: User = Depends(admin)):
        contacts.delete(contact_id)
        return success_response({"id": contact_id, "deleted": True}).model_dump(mode="json")

    @router.post("/{contact_id}/groups/{group_id}")
    async def add_to_group(contact_id: int, group_id: int, user: User = Depends(admin)):
        contact = contacts.add_to_group(contact_id, group_id)
        return success_response(contact.model_dump(mode="json")).model_dump(mode="json")

    @router.delete("/{contact_id}/groups/{group_id}")
    async def remove_from_group(contact_id: int, group_id: int, user: User = Depends(admin)):
        contact = contacts.remove_from_group(contact_id, group_id)
        return success_response(contact.model_dump(mode="json")).model_dump(mode="json")

    return router
