"""User schemas."""

from datetime import datetime

from crm.db.enums import Role
from crm.schemas.base import CamelModel


class UserRead(CamelModel):
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    role: Role
    created_at: datetime


class UserRoleUpdate(CamelModel):
    role: Role
