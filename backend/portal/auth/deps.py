"""Session resolution and FastAPI dependencies for authentication and authorization.

Dependencies:
  current_session              → SessionUser or None (never raises)
  require_session              → SessionUser, or 401
  require_role(...)            → restrict to specific roles (401 / 403)
  require_active_subscription  → session whose subscription is live, or 403
"""

import logging
from datetime import datetime, timezone

from fastapi import Depends, Request, Response
from pydantic import ValidationError

from portal.auth.permissions import check_role, check_subscription
from portal.auth.session import decrypt
from portal.config import Settings, get_settings
from portal.middleware.exceptions import AuthenticationError, AuthorizationError
from portal.models.user import UserRole
from portal.schemas.auth import SessionUser

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


# ── Session resolution ──────────────────────────────────────

def get_session(
    request: Request,
    settings: Settings,
    now: datetime | None = None,
) -> SessionUser | None:
    """Resolve the session cookie into a SessionUser, or None.

    Freshness is enforced from ``loginTime`` independently of the token's
    own ``exp`` claim: a login older than the session lifetime is rejected
    even if the signature and ``exp`` still check out.
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None

    claims = decrypt(token, settings)
    if claims is None:
        return None

    try:
        user = SessionUser.model_validate(claims)
    except ValidationError as exc:
        logger.warning("Session claims rejected: %d error(s)", exc.error_count())
        return None

    login_time = user.login_time
    if login_time.tzinfo is None:
        login_time = login_time.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    elapsed_days = (now - login_time).total_seconds() / SECONDS_PER_DAY
    if elapsed_days > settings.session_max_age_days:
        logger.info("Session for user %s expired after %.1f days", user.id, elapsed_days)
        return None

    return user


async def current_session(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> SessionUser | None:
    return get_session(request, settings)


async def require_session(
    user: SessionUser | None = Depends(current_session),
) -> SessionUser:
    if user is None:
        raise AuthenticationError()
    return user


def require_role(*roles: UserRole | str):
    """Dependency factory — restrict to one or more roles.

    Usage:
        @router.get("/subscriptions")
        async def list_subscriptions(
            user: SessionUser = Depends(require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN)),
        ):
            ...
    """
    async def _check(user: SessionUser = Depends(require_session)) -> SessionUser:
        if not check_role(user, roles):
            raise AuthorizationError()
        return user

    return _check


async def require_active_subscription(
    user: SessionUser = Depends(require_session),
) -> SessionUser:
    if not check_subscription(user):
        raise AuthorizationError("Subscription tidak aktif atau sudah berakhir")
    return user


# ── Cookie helpers ──────────────────────────────────────────

def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_days * SECONDS_PER_DAY,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
