"""FastAPI dependencies for authentication, authorization, and database access."""

import logging
from typing import Generator

import jwt
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from crm.core.permissions import PermissionKey, can_view_own_data_only, has_permission
from crm.core.security import decode_access_token
from crm.db.session import SessionLocal

logger = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "
ACCESS_DENIED_MESSAGE = "Acesso negado. Você não tem permissão para realizar esta ação."


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Get authenticated user from the bearer token.

    Validates:
    - Authorization header carries a bearer token
    - JWT is valid and not expired
    - User row exists (created on first sign-in)

    Raises:
        HTTPException 401: Authentication failed
    """
    # Import here to avoid circular imports
    from crm.services import user_service

    header = request.headers.get(AUTH_HEADER, "")
    if not header.startswith(BEARER_PREFIX):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header")

    token = header[len(BEARER_PREFIX):].strip()
    try:
        claims = decode_access_token(token)
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token")

    return user_service.get_or_create_user(db, claims)


def get_current_session(
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Get full session context: user_id, role, email.

    This is the PRIMARY auth dependency for most endpoints.

    Raises:
        HTTPException 401: Not authenticated
        HTTPException 403: Unknown role
    """
    from crm.db.enums import Role
    from crm.schemas.auth import UserSession

    user = get_current_user(request, db)

    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(user.role):
        raise HTTPException(status_code=403, detail="Papel de usuário não encontrado")

    return UserSession(
        user_id=user.id,
        role=Role(user.role),
        email=user.email,
        display_name=" ".join(p for p in (user.first_name, user.last_name) if p) or None,
    )


def require_permission(permission: PermissionKey | None):
    """
    Dependency factory for permission checks.

    Usage:
        @router.post("", dependencies=[Depends(require_permission(P.CREATE_DEALS))])
    """
    def dependency(request: Request, db: Session = Depends(get_db)):
        session = get_current_session(request, db)
        if permission is not None and not has_permission(session.role, permission):
            logger.warning(
                f"Permission denied: user {session.user_id} ({session.role.value}) lacks {permission.value}"
            )
            raise HTTPException(status_code=403, detail=ACCESS_DENIED_MESSAGE)
        return session
    return dependency


def owner_scope(session) -> str | None:
    """Owner id to filter deals by, or None when the role sees everyone's data."""
    if can_view_own_data_only(session.role):
        return session.user_id
    return None
