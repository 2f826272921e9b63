"""Users router - user directory and role assignment."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from crm.core.deps import get_current_session, get_db, require_permission
from crm.core.policies import POLICIES
from crm.db.enums import Role
from crm.schemas.auth import UserSession
from crm.schemas.user import UserRead, UserRoleUpdate
from crm.services import user_service

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_permission(POLICIES["users"].default))],
)


@router.get("", response_model=list[UserRead])
def list_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.put(
    "/{user_id}/role",
    response_model=UserRead,
    dependencies=[Depends(require_permission(POLICIES["users"].actions["edit"]))],
)
def update_user_role(
    user_id: str,
    data: UserRoleUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    """Change a user's role. Admins cannot demote themselves."""
    if user_id == session.user_id and data.role != Role.ADMIN:
        raise HTTPException(status_code=400, detail="Cannot remove your own admin role")
    user = user_service.update_user_role(db, user_id, data.role)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
