"""Pydantic request / response models for the user endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


# -- Requests --------------------------------------------------------------


class ChangeRoleRequest(BaseModel):
    role: Literal["admin", "user"]


# -- Responses -------------------------------------------------------------


class UserRow(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
