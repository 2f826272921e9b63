"""Activities router.

Roles limited to their own data only list and change activities they logged.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from crm.core.deps import get_current_session, get_db, owner_scope, require_permission
from crm.core.policies import POLICIES
from crm.schemas.activity import ActivityCreate, ActivityRead, ActivityUpdate
from crm.schemas.auth import UserSession
from crm.services import activity_service
from crm.utils.pagination import PaginationParams, get_pagination

router = APIRouter(
    prefix="/activities",
    tags=["Activities"],
    dependencies=[Depends(require_permission(POLICIES["activities"].default))],
)


def _get_activity_or_404(db: Session, activity_id: int, session: UserSession):
    activity = activity_service.get_activity(db, activity_id, user_id=owner_scope(session))
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity


@router.get("", response_model=list[ActivityRead])
def list_activities(
    contact_id: int | None = Query(None, alias="contactId"),
    deal_id: int | None = Query(None, alias="dealId"),
    user_id: str | None = Query(None, alias="userId"),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    scoped_user = owner_scope(session)
    activities, _ = activity_service.list_activities(
        db,
        pagination,
        contact_id=contact_id,
        deal_id=deal_id,
        user_id=scoped_user if scoped_user is not None else user_id,
    )
    return activities


@router.get("/{activity_id}", response_model=ActivityRead)
def get_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return _get_activity_or_404(db, activity_id, session)


@router.post(
    "",
    response_model=ActivityRead,
    status_code=201,
    dependencies=[Depends(require_permission(POLICIES["activities"].actions["create"]))],
)
def create_activity(
    data: ActivityCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return activity_service.create_activity(db, data, user_id=session.user_id)


@router.put(
    "/{activity_id}",
    response_model=ActivityRead,
    dependencies=[Depends(require_permission(POLICIES["activities"].actions["edit"]))],
)
def update_activity(
    activity_id: int,
    data: ActivityUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    activity = _get_activity_or_404(db, activity_id, session)
    return activity_service.update_activity(db, activity, data)


@router.delete(
    "/{activity_id}",
    status_code=204,
    dependencies=[Depends(require_permission(POLICIES["activities"].actions["delete"]))],
)
def delete_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    activity = _get_activity_or_404(db, activity_id, session)
    activity_service.delete_activity(db, activity)
    return None
