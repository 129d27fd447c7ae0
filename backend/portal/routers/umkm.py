"""Small-business directory. Only verified entries are public."""

from datetime import datetime

from fastapi import APIRouter, Depends

from portal.auth.deps import require_role
from portal.models.content import Umkm
from portal.models.user import UserRole
from portal.repositories.base import UmkmRepository
from portal.repositories.deps import get_umkm_repository
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.content import UmkmCreate, UmkmOut

router = APIRouter()


@router.get("")
async def list_umkm(repo: UmkmRepository = Depends(get_umkm_repository)):
    return {"data": [UmkmOut.model_validate(u) for u in await repo.list_verified()]}


@router.post("", response_model=MessageResponse)
async def create_umkm(
    body: UmkmCreate,
    user: SessionUser = Depends(
        require_role(UserRole.KETUA_RT, UserRole.KETUA_RW, UserRole.ADMIN, UserRole.SUPER_ADMIN)
    ),
    repo: UmkmRepository = Depends(get_umkm_repository),
):
    now = datetime.utcnow()
    umkm = await repo.create(
        Umkm(
            **body.model_dump(),
            status_verifikasi="pending",
            admin_approver=user.nama_lengkap,
            created_at=now,
            updated_at=now,
        )
    )
    return MessageResponse(
        message="UMKM berhasil ditambahkan",
        data=UmkmOut.model_validate(umkm).model_dump(mode="json"),
    )
