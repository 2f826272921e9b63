"""Activity service - calls, emails, meetings, notes and tasks."""

from sqlalchemy.orm import Session

from crm.db.models import Activity
from crm.schemas.activity import ActivityCreate, ActivityUpdate
from crm.utils.pagination import PaginationParams, paginate_query


def list_activities(
    db: Session,
    pagination: PaginationParams,
    contact_id: int | None = None,
    deal_id: int | None = None,
    user_id: str | None = None,
) -> tuple[list[Activity], int]:
    """List activities newest first."""
    query = db.query(Activity)
    if contact_id is not None:
        query = query.filter(Activity.contact_id == contact_id)
    if deal_id is not None:
        query = query.filter(Activity.deal_id == deal_id)
    if user_id is not None:
        query = query.filter(Activity.user_id == user_id)
    query = query.order_by(Activity.created_at.desc(), Activity.id.desc())
    return paginate_query(query, pagination)


def get_activity(db: Session, activity_id: int, user_id: str | None = None) -> Activity | None:
    """Get an activity; with `user_id`, other users' activities are not found."""
    query = db.query(Activity).filter(Activity.id == activity_id)
    if user_id is not None:
        query = query.filter(Activity.user_id == user_id)
    return query.first()


def create_activity(db: Session, data: ActivityCreate, user_id: str) -> Activity:
    """Create an activity attributed to the calling user."""
    activity = Activity(**data.model_dump(), user_id=user_id)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def update_activity(db: Session, activity: Activity, data: ActivityUpdate) -> Activity:
    for field, value in data.model_dump(exclude_unset=True).items():
        if field in ("type", "title", "completed") and value is None:
            continue
        setattr(activity, field, value)
    db.commit()
    db.refresh(activity)
    return activity


def delete_activity(db: Session, activity: Activity) -> None:
    db.delete(activity)
    db.commit()
