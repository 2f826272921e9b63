"""User service - users provisioned from session tokens, and role management."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from crm.core.config import settings
from crm.db.enums import DEFAULT_ROLE, Role
from crm.db.models import User

logger = logging.getLogger(__name__)


def get_user_by_id(db: Session, user_id: str) -> User | None:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get user by email (case-insensitive)."""
    return db.query(User).filter(User.email == email.lower()).first()


def list_users(db: Session) -> list[User]:
    """All users, newest first."""
    return db.query(User).order_by(User.created_at.desc(), User.id).all()


def _initial_role() -> str:
    if Role.has_value(settings.AUTH_DEFAULT_ROLE):
        return settings.AUTH_DEFAULT_ROLE
    logger.warning(f"AUTH_DEFAULT_ROLE={settings.AUTH_DEFAULT_ROLE!r} is not a role, using {DEFAULT_ROLE.value}")
    return DEFAULT_ROLE.value


def get_or_create_user(db: Session, claims: dict) -> User:
    """
    Upsert the user described by verified token claims.

    Profile fields are refreshed on every call; the role is only set when the
    row is first created and is never taken from the token.
    """
    user_id = str(claims["sub"])
    metadata = claims.get("user_metadata") or {}
    email = claims.get("email")
    profile = {
        "email": email.lower() if email else None,
        "first_name": metadata.get("first_name") or claims.get("first_name"),
        "last_name": metadata.get("last_name") or claims.get("last_name"),
        "profile_image_url": metadata.get("avatar_url") or claims.get("profile_image_url"),
    }

    if profile["email"]:
        holder = get_user_by_email(db, profile["email"])
        if holder is not None and holder.id != user_id:
            logger.warning(f"Email for user {user_id} already belongs to user {holder.id}, not storing it")
            profile["email"] = None

    user = get_user_by_id(db, user_id)
    if user is None:
        user = User(id=user_id, role=_initial_role(), **profile)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent first sign-in for the same subject
            db.rollback()
            user = get_user_by_id(db, user_id)
            if user is None:
                raise
            return user
        db.refresh(user)
        logger.info(f"Provisioned user {user_id} with role {user.role}")
        return user

    changed = False
    for field, value in profile.items():
        if value is not None and getattr(user, field) != value:
            setattr(user, field, value)
            changed = True
    if changed:
        db.commit()
        db.refresh(user)
    return user


def update_user_role(db: Session, user_id: str, role: Role) -> User | None:
    """
    Change a user's role.

    Returns:
        The updated user, or None if not found
    """
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    previous = user.role
    user.role = role.value
    db.commit()
    db.refresh(user)
    logger.info(f"User {user_id} role changed: {previous} -> {role.value}")
    return user
