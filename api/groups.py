"""Group routes. Reads are public; writes need admin rights."""

from fastapi import APIRouter, Depends

from api.base import success_response
from auth.dependencies import AdminRequired
from auth.types import User
from core.exceptions import GroupNotFoundError
from core.models import GroupCreate, GroupUpdate
from core.services.group_service import GroupService


def create_groups_router(groups: GroupService, admin: AdminRequired) -> APIRouter:
    router = APIRouter(prefix="/groups", tags=["groups"])

    @router.get("")
    async def list_groups():
        return success_response(
            [g.model_dump(mode="json") for g in groups.list_all()]
        ).model_dump(mode="json")

    @router.get("/{group_id}")
    async def get_group(group_id: int):
        group = groups.get_by_id(group_id)
        if group is None:
            raise GroupNotFoundError(f"Group {group_id} not found")
        return success_response(group.model_dump(mode="json")).model_dump(mode="json")

    @router.post("", status_code=201)
    async def create_group(body: GroupCreate, user: User = Depends(admin)):
        group = groups.create(body.name)
        return success_response(group.model_dump(mode="json")).model_dump(mode="json")

    @router.put("/{group_id}")
    async def rename_group(group_id: int, body: GroupUpdate, user: User = Depends(admin)):
        group = groups.rename(group_id, body.name)
        return success_response(group.model_dump(mode="json")).model_dump(mode="json")

    @router.delete("/{group_id}")
    async def delete_group(group_id: int, user: User = Depends(admin)):
        groups.delete(group_id)
        return success_response({"id": group_id, "deleted": True}).model_dump(mode="json")

    return router
