"""Account routes.

Route overview:
  GET  /   — developer: rows of the ``account`` sheet, hashes masked
  PUT  /   — developer: edit an ``account`` sheet row, re-hashing passwords
  POST /   — admin / super_admin / developer: create a login account
  GET  /session — the current session user, or null
  DELETE /session — clear the session cookie
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, Response, status

from portal.auth.deps import clear_session_cookie, current_session, require_role
from portal.auth.password import hash_password
from portal.config import Settings, get_settings
from portal.middleware.exceptions import ValidationFailedError
from portal.models.user import User, UserRole
from portal.repositories.base import ActivityLogRepository, RecordRepository, UserRepository
from portal.repositories.deps import (
    get_account_repository,
    get_activity_log_repository,
    get_user_repository,
)
from portal.schemas.account import AccountCreate, AccountOut, AccountUpdate
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.validators import missing_fields, validate_area_code, validate_email
from portal.sheets.records import HIDDEN
from portal.utils.activity import log_activity

router = APIRouter()

MIN_PASSWORD_LENGTH = 8
VALID_ROLES = {r.value for r in UserRole}
RT_ROLES = {UserRole.ADMIN_RT.value, UserRole.KETUA_RT.value}
RW_ROLES = {UserRole.ADMIN_RW.value, UserRole.KETUA_RW.value}

_developer = require_role(UserRole.DEVELOPER)


def account_errors(body: AccountCreate) -> list[str]:
    """Every problem with a new-account request, in one list."""
    errors = missing_fields(body.model_dump(), ("email", "password", "nama_lengkap", "role"))

    if body.email:
        try:
            validate_email(body.email)
        except ValueError as exc:
            errors.append(str(exc))
    if body.password and len(body.password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password minimal {MIN_PASSWORD_LENGTH} karakter")
    if body.role and body.role not in VALID_ROLES:
        errors.append(f"Role tidak valid: {body.role}")

    needs_rt = body.role in RT_ROLES
    needs_rw = needs_rt or body.role in RW_ROLES
    for field, needed in (("rt_akses", needs_rt), ("rw_akses", needs_rw)):
        value = getattr(body, field)
        if needed and not value:
            errors.append(f"Field {field} is required for role {body.role}")
        elif value:
            try:
                validate_area_code(value)
            except ValueError as exc:
                errors.append(f"{field}: {exc}")
    return errors


@router.get("")
async def list_accounts(
    _user: SessionUser = Depends(_developer),
    repo: RecordRepository = Depends(get_account_repository),
):
    return [{**row, "password_hash": HIDDEN} for row in await repo.list_rows()]


@router.put("", response_model=MessageResponse)
async def update_account(
    body: AccountUpdate,
    _user: SessionUser = Depends(_developer),
    repo: RecordRepository = Depends(get_account_repository),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"id", "password"})
    if body.password:
        if len(body.password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(f"Password minimal {MIN_PASSWORD_LENGTH} karakter")
        changes["password_hash"] = hash_password(body.password)
    if "email" in changes:
        changes["email"] = changes["email"].lower()
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()

    await repo.update(body.id, changes)
    return MessageResponse(message="Account berhasil diupdate")


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    body: AccountCreate,
    request: Request,
    user: SessionUser = Depends(
        require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.DEVELOPER)
    ),
    users: UserRepository = Depends(get_user_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    errors = account_errors(body)
    if errors:
        raise ValidationFailedError("Data akun tidak valid", errors)

    email = validate_email(body.email)
    if await users.get_by_email(email):
        raise ValidationFailedError("Email sudah terdaftar")

    account = await users.create(
        User(
            email=email,
            password_hash=hash_password(body.password),
            nama_lengkap=body.nama_lengkap.strip(),
            role=body.role,
            rt_akses=body.rt_akses or None,
            rw_akses=body.rw_akses or None,
            status_aktif="Aktif",
            subscription_status="inactive",
        )
    )

    await log_activity(
        logs, request, user,
        action_type="CREATE",
        table_affected="users",
        record_id=account.id,
        new_data={"email": account.email, "role": account.role},
    )
    return MessageResponse(
        message="Akun berhasil dibuat",
        data=AccountOut.model_validate(account).model_dump(),
    )


# ── Session (older clients) ─────────────────────────────────

@router.get("/session")
async def account_session(user: SessionUser | None = Depends(current_session)):
    return {"user": user.to_claims() if user else None}


@router.delete("/session")
async def end_account_session(response: Response, settings: Settings = Depends(get_settings)):
    clear_session_cookie(response, settings)
    return {"success": True}
