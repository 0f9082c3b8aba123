"""Group domain models."""

from datetime import datetime

from pydantic import BaseModel


class GroupCreate(BaseModel):
    """Data required to create a group."""

    name: str


class GroupUpdate(BaseModel):
    """Rename payload. Groups carry nothing else."""

    name: str


class Group(BaseModel):
    """Full group entity as stored."""

    id: int
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
