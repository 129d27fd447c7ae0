"""News routes. Published news is public; RW leadership publishes directly,
every other author's news waits for approval."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request

from portal.auth.deps import require_session
from portal.auth.permissions import can_manage_berita, check_role
from portal.middleware.exceptions import AuthorizationError, ValidationFailedError
from portal.models.content import Berita
from portal.models.user import UserRole
from portal.repositories.base import ActivityLogRepository, BeritaRepository, LembagaRepository
from portal.repositories.deps import (
    get_activity_log_repository,
    get_berita_repository,
    get_lembaga_repository,
)
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.content import BeritaCreate, BeritaOut
from portal.utils.activity import log_activity

router = APIRouter()

_AUTHORS = (UserRole.ADMIN_RW, UserRole.KETUA_RW, UserRole.ADMIN, UserRole.SUPER_ADMIN)


@router.get("", response_model=list[BeritaOut])
async def list_berita(repo: BeritaRepository = Depends(get_berita_repository)):
    """Published news, newest first."""
    return [BeritaOut.model_validate(b) for b in await repo.list_published()]


@router.post("", response_model=MessageResponse)
async def create_berita(
    body: BeritaCreate,
    request: Request,
    user: SessionUser = Depends(require_session),
    repo: BeritaRepository = Depends(get_berita_repository),
    lembaga_repo: LembagaRepository = Depends(get_lembaga_repository),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    """Institution admins must post under a ``lembaga_id`` whose name is theirs."""
    is_lembaga_admin = user.role == UserRole.ADMIN_LEMBAGA.value
    if not (is_lembaga_admin or check_role(user, _AUTHORS)):
        raise AuthorizationError()

    lembaga = None
    if body.lembaga_id is not None:
        lembaga = await lembaga_repo.get(body.lembaga_id)
        if lembaga is None:
            raise ValidationFailedError("Lembaga tidak ditemukan")

    if is_lembaga_admin and (lembaga is None or not can_manage_berita(user, lembaga.nama_lembaga)):
        raise AuthorizationError("Hanya boleh menulis berita untuk lembaga sendiri")

    now = datetime.utcnow()
    publish_now = user.role == UserRole.KETUA_RW.value
    berita = Berita(
        judul=body.judul,
        konten=body.konten,
        kategori=body.kategori,
        foto_url=body.foto_url,
        penulis=user.nama_lengkap,
        status_publish="Published" if publish_now else "Pending",
        views=0,
        admin_approver=user.nama_lengkap if publish_now else "",
        published_at=now if publish_now else None,
        lembaga_id=body.lembaga_id,
        created_at=now,
        updated_at=now,
    )
    berita = await repo.create(berita)

    await log_activity(
        logs, request, user,
        action_type="CREATE",
        table_affected="berita",
        record_id=berita.id,
        new_data={"judul": berita.judul, "status_publish": berita.status_publish},
    )
    return MessageResponse(
        message="Berita berhasil ditambahkan",
        data=BeritaOut.model_validate(berita).model_dump(mode="json"),
    )
