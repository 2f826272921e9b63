"""Auth router - the signed-in user's profile and permissions.

Sign-in itself happens at the external session provider; this API only
verifies the bearer tokens it issues.
"""

from fastapi import APIRouter, Depends, HTTPException

from crm.core.deps import get_current_user
from crm.core.permissions import ROLE_LABELS, get_user_permissions
from crm.db.enums import Role
from crm.db.models import User
from crm.schemas.auth import MeResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/user", response_model=MeResponse)
def get_me(user: User = Depends(get_current_user)):
    """Current user with role label and the permission keys the role grants."""
    if not Role.has_value(user.role):
        raise HTTPException(status_code=403, detail="Papel de usuário não encontrado")
    role = Role(user.role)
    return MeResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        profile_image_url=user.profile_image_url,
        role=role,
        role_label=ROLE_LABELS[role],
        permissions=get_user_permissions(role),
    )
