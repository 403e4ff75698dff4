from typing import Literal

from pydantic import BaseModel, Field

Scope = Literal["collection", "category", "product"]
Level = Literal["view", "edit"]


class GrantRequest(BaseModel):
    principal_id: str = Field(min_length=1)
    scope: Scope
    resource_id: str = Field(min_length=1)
    level: Level


class RevokeRequest(BaseModel):
    principal_id: str = Field(min_length=1)
    scope: Scope
    resource_id: str = Field(min_length=1)


class CheckRequest(BaseModel):
    resource_type: Literal["collection", "category", "product", "order"]
    resource_id: str = Field(min_length=1)
    level: Level = "view"


class TransferOwnershipRequest(BaseModel):
    new_owner_id: str = Field(min_length=1)
