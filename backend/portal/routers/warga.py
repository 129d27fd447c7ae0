"""Residents registry routes.

Route overview:
  GET    /           — residents visible to the caller (masked)
  POST   /           — register a resident (admin_rt, admin)
  PUT    /{id}       — update a resident; moving RT/RW is an RW-level change
  DELETE /           — deactivate residents by id (soft delete)
  POST   /verify     — public NIK + KK self-check, rate limited per IP
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request, status

from portal.auth.deps import require_active_subscription
from portal.auth.permissions import can_create_warga, can_update_warga, check_rw_access
from portal.middleware.exceptions import (
    AuthorizationError,
    ResourceNotFoundError,
    TooManyAttemptsError,
    ValidationFailedError,
    create_error_response,
)
from portal.models.user import UserRole
from portal.repositories.base import ActivityLogRepository, WargaRepository
from portal.repositories.deps import get_activity_log_repository, get_warga_repository
from portal.schemas.auth import SessionUser
from portal.schemas.common import ListResponse, MessageResponse
from portal.schemas.warga import VerifyRequest, WargaCreate, WargaDeleteRequest, WargaUpdate
from portal.services.verification import VerificationGuard, get_verification_guard
from portal.services.warga import (
    VerificationOutcome,
    filter_warga_data,
    partial_identifier,
    verify_warga_data,
)
from portal.sheets.records import paginate_records, sanitize_warga_data, search_records, sort_records
from portal.utils.activity import log_activity, resolve_client_ip

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Data tidak ditemukan atau NIK/KK tidak sesuai"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── List ────────────────────────────────────────────────────

@router.get("", response_model=ListResponse)
async def list_warga(
    search: str | None = Query(None, max_length=100),
    sort: str | None = Query(None, max_length=50),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    page: int | None = Query(None, ge=1),
    limit: int = Query(50, ge=1, le=500),
    user: SessionUser = Depends(require_active_subscription),
    repo: WargaRepository = Depends(get_warga_repository),
):
    """Active residents within the caller's RT/RW scope. NIK/KK always hidden."""
    visible = filter_warga_data(user, await repo.list_residents())
    rows = [w.model_dump() for w in visible]

    if search:
        rows = search_records(rows, "nama", search)
    if sort:
        rows = sort_records(rows, sort, order)
    if page is None:
        return ListResponse(data=rows)

    paged = paginate_records(rows, page, limit)
    return ListResponse(data=paged["data"], pagination=paged["pagination"])


# ── Create ──────────────────────────────────────────────────

@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_warga(
    body: WargaCreate,
    request: Request,
    user: SessionUser = Depends(require_active_subscription),
    repo: WargaRepository = Depends(get_warga_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    if not can_create_warga(user):
        raise AuthorizationError()

    data = body.model_dump()
    if user.role == UserRole.ADMIN_RT.value:
        # RT admins register residents into their own RT only
        data["rt"] = user.rt_akses
        data["rw"] = user.rw_akses

    missing = [f"Field {f} is required" for f in ("rt", "rw") if not data.get(f)]
    if missing:
        raise ValidationFailedError("Data warga tidak lengkap", missing)

    now = _now_iso()
    data.update(status_aktif="Aktif", created_at=now, updated_at=now)
    row = await repo.create(data)

    await log_activity(
        logs, request, user,
        action_type="CREATE",
        table_affected="warga",
        record_id=row.get("id"),
        new_data=sanitize_warga_data([row])[0],
    )
    return MessageResponse(message="Data warga berhasil ditambahkan", data={"id": row.get("id")})


# ── Update ──────────────────────────────────────────────────

@router.put("/{warga_id}", response_model=MessageResponse)
async def update_warga(
    warga_id: int,
    body: WargaUpdate,
    request: Request,
    user: SessionUser = Depends(require_active_subscription),
    repo: WargaRepository = Depends(get_warga_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailedError("Tidak ada data yang diubah")

    existing = await repo.get(warga_id)
    if existing is None:
        raise ResourceNotFoundError("Data warga tidak ditemukan")

    moves_area = any(
        key in changes and str(changes[key]) != str(getattr(existing, key))
        for key in ("rt", "rw")
    )
    update_type = "rt_transfer" if moves_area else "basic"
    if not can_update_warga(user, update_type):
        raise AuthorizationError()

    # The resident must currently be visible to the caller...
    if not filter_warga_data(user, [existing]):
        raise AuthorizationError()
    # ...and must stay inside the caller's RW.
    if "rw" in changes and not check_rw_access(user, changes["rw"]):
        raise AuthorizationError()

    changes["updated_at"] = _now_iso()
    await repo.update(warga_id, changes)

    await log_activity(
        logs, request, user,
        action_type="UPDATE",
        table_affected="warga",
        record_id=warga_id,
        old_data={k: getattr(existing, k) for k in changes if hasattr(existing, k)},
        new_data=changes,
    )
    return MessageResponse(message="Data warga berhasil diperbarui")


# ── Soft delete ─────────────────────────────────────────────

@router.delete("", response_model=MessageResponse)
async def deactivate_warga(
    body: WargaDeleteRequest,
    request: Request,
    user: SessionUser = Depends(require_active_subscription),
    repo: WargaRepository = Depends(get_warga_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    """Flip residents to ``Non-Aktif``. Rows are never removed."""
    if not body.ids:
        raise ValidationFailedError("IDs warga diperlukan")
    if not can_create_warga(user):
        raise AuthorizationError()

    visible_ids = {w.id for w in filter_warga_data(user, await repo.list_residents())}
    unknown = [i for i in body.ids if i not in visible_ids]
    if unknown:
        raise ResourceNotFoundError(f"Data warga tidak ditemukan: {', '.join(map(str, unknown))}")

    await repo.deactivate(body.ids)

    await log_activity(
        logs, request, user,
        action_type="DEACTIVATE",
        table_affected="warga",
        record_id=",".join(map(str, body.ids)),
        new_data={"status_aktif": "Non-Aktif"},
    )
    return MessageResponse(
        message=f"{len(body.ids)} data warga berhasil dihapus (dinonaktifkan)"
    )


# ── Public verification ─────────────────────────────────────

@router.post("/verify")
async def verify_warga(
    body: VerifyRequest,
    request: Request,
    repo: WargaRepository = Depends(get_warga_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
    guard: VerificationGuard = Depends(get_verification_guard),
    ip: str = Depends(resolve_client_ip),
):
    """Self-check by NIK + KK.

    "No match" and "registry unavailable" answer identically so the endpoint
    cannot be used to discover which NIKs exist. Only real misses count towards
    the per-IP block.
    """
    nik, kk = body.nik.strip(), body.kk.strip()
    if not nik or not kk:
        raise ValidationFailedError("NIK dan Nomor KK harus diisi")

    if await guard.is_blocked(ip):
        raise TooManyAttemptsError("Terlalu banyak percobaan verifikasi. Coba lagi dalam 24 jam.")

    nik_partial, kk_partial = partial_identifier(nik), partial_identifier(kk)
    logger.info(
        "Verification attempt nik=%s kk=%s ip=%s", nik_partial, kk_partial, ip,
        extra={"ip_address": ip},
    )
    await log_activity(
        logs, request,
        action_type="VERIFY_ATTEMPT",
        table_affected="warga",
        new_data={"nik_partial": nik_partial, "kk_partial": kk_partial},
    )

    result = await verify_warga_data(repo.raw_rows, nik, kk)
    if result.found:
        return {"success": True, "message": "Data berhasil ditemukan", "data": result.record}

    if result.outcome is VerificationOutcome.NOT_FOUND:
        await guard.record_failure(ip, nik_partial, kk_partial)

    # Returned rather than raised so the attempt above is committed.
    return create_error_response(
        status_code=status.HTTP_404_NOT_FOUND,
        message=NOT_FOUND_MESSAGE,
        error_code="RESOURCE_NOT_FOUND",
    )
