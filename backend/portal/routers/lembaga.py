"""Village institutions (lembaga desa)."""

from datetime import datetime

from fastapi import APIRouter, Depends

from portal.auth.deps import require_role
from portal.models.content import LembagaDesa
from portal.models.user import UserRole
from portal.repositories.base import LembagaRepository
from portal.repositories.deps import get_lembaga_repository
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.content import LembagaCreate, LembagaOut

router = APIRouter()


@router.get("", response_model=list[LembagaOut])
async def list_lembaga(repo: LembagaRepository = Depends(get_lembaga_repository)):
    """Active institutions, by name."""
    return [LembagaOut.model_validate(lembaga) for lembaga in await repo.list_active()]


@router.post("", response_model=MessageResponse)
async def create_lembaga(
    body: LembagaCreate,
    _user: SessionUser = Depends(
        require_role(UserRole.KETUA_RW, UserRole.ADMIN, UserRole.SUPER_ADMIN)
    ),
    repo: LembagaRepository = Depends(get_lembaga_repository),
):
    lembaga = await repo.create(
        LembagaDesa(**body.model_dump(), status_aktif="Aktif", created_at=datetime.utcnow())
    )
    return MessageResponse(
        message="Data lembaga berhasil ditambahkan",
        data=LembagaOut.model_validate(lembaga).model_dump(mode="json"),
    )
