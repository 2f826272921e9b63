"""Bearer token verification for sessions issued by the external auth provider."""

from datetime import datetime, timedelta, timezone

import jwt

from crm.core.config import settings


ALGORITHM = "HS256"


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a bearer JWT.

    Audience is only checked when AUTH_JWT_AUDIENCE is configured.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired or signed
            with another secret
    """
    options = {"require": ["sub", "exp"]}
    if settings.AUTH_JWT_AUDIENCE:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    options["verify_aud"] = False
    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[ALGORITHM],
        options=options,
    )


def create_access_token(
    user_id: str,
    email: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
    **claims,
) -> str:
    """
    Mint a token the same shape the session provider issues.

    Used by the CLI and the test suite; production tokens come from the provider.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    if email:
        payload["email"] = email
    if settings.AUTH_JWT_AUDIENCE:
        payload.setdefault("aud", settings.AUTH_JWT_AUDIENCE)
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=ALGORITHM)
