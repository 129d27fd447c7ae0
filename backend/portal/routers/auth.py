"""Auth routes: login, logout, session.

Route overview:
  POST   /login    — email + password login, sets the session cookie
  DELETE /login    — logout (kept for existing clients)
  POST   /logout   — logout
  GET    /session  — the current session user, or null
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response, status

from portal.auth.deps import clear_session_cookie, current_session, set_session_cookie
from portal.auth.password import verify_password
from portal.auth.permissions import dashboard_path_for
from portal.auth.session import EncodingError, encrypt
from portal.config import Settings, get_settings
from portal.middleware.exceptions import (
    AuthenticationError,
    AuthorizationError,
    TooManyAttemptsError,
    PortalException,
    ValidationFailedError,
)
from portal.models.user import User, UserRole
from portal.repositories.base import ActivityLogRepository, UserRepository
from portal.repositories.deps import get_activity_log_repository, get_user_repository
from portal.schemas.auth import LoginRequest, LoginResponse, SessionResponse, SessionUser, UserOut
from portal.utils.activity import log_activity, resolve_client_ip
from portal.utils.rate_limit import RateLimiter, get_rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Email atau password salah"


def _build_session(user: User, now: datetime) -> SessionUser:
    return SessionUser(
        id=user.id,
        email=user.email,
        role=user.role,
        rt_akses=user.rt_akses or "",
        rw_akses=user.rw_akses or "",
        nama_lengkap=user.nama_lengkap,
        subscription_status=user.subscription_status or "inactive",
        subscription_end=user.subscription_end or "",
        login_time=now,
    )


def _build_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        role=user.role,
        nama_lengkap=user.nama_lengkap,
        rt_akses=user.rt_akses,
        rw_akses=user.rw_akses,
        subscription_status=user.subscription_status,
        dashboard_path=dashboard_path_for(user.role),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    ip: str = Depends(resolve_client_ip),
):
    """Email (case-insensitive) + password login. Sets the session cookie."""
    if not body.email.strip() or not body.password:
        raise ValidationFailedError("Email dan password harus diisi")

    if not await limiter.check(f"login:{ip}", settings.login_rate_limit, settings.login_rate_window_seconds):
        logger.warning("Login throttled for %s", ip, extra={"ip_address": ip})
        raise TooManyAttemptsError("Terlalu banyak percobaan login. Coba lagi dalam 1 menit.")

    user = await users.get_by_email(body.email)
    if not user or not verify_password(body.password, user.password_hash):
        logger.info("Failed login for %s", body.email.strip().lower())
        raise AuthenticationError(INVALID_CREDENTIALS)

    if user.status_aktif != "Aktif":
        raise AuthorizationError("Akun Anda tidak aktif. Hubungi administrator.")

    if user.role != UserRole.ADMIN.value and user.subscription_status != "active":
        raise PortalException(
            "Subscription Anda tidak aktif. Silakan perpanjang subscription.",
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="SUBSCRIPTION_INACTIVE",
            details={"subscription_status": user.subscription_status},
        )

    now = datetime.now(timezone.utc)
    session_user = _build_session(user, now)
    try:
        token = encrypt(session_user.to_claims(), settings)
    except EncodingError:
        logger.exception("Could not issue session for user %s", user.id)
        raise PortalException("Terjadi kesalahan server")

    set_session_cookie(response, token, settings)
    await users.record_login(user, now.replace(tzinfo=None))
    await log_activity(logs, request, session_user, action_type="LOGIN", table_affected="users", record_id=user.id)

    logger.info("User %s logged in", user.id, extra={"role": user.role})
    return LoginResponse(user=_build_user_out(user))


@router.delete("/login")
@router.post("/logout")
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    clear_session_cookie(response, settings)
    return {"success": True, "message": "Logout berhasil"}


@router.get("/session", response_model=SessionResponse)
async def session(user: SessionUser | None = Depends(current_session)):
    return SessionResponse(success=True, user=user.to_claims() if user else None)
