"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel

from crm.db.enums import Role
from crm.schemas.base import CamelModel


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency.
    """
    user_id: str
    role: Role  # Validated enum
    email: str | None = None
    display_name: str | None = None


class MeResponse(CamelModel):
    """Response schema for GET /api/auth/user."""
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    role: Role
    role_label: str
    permissions: list[str]
