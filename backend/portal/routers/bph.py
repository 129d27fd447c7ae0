"""RW board of officers (``bph`` sheet)."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from portal.auth.deps import require_role
from portal.models.user import UserRole
from portal.repositories.base import RecordRepository
from portal.repositories.deps import get_bph_repository
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.content import BphCreate
from portal.sheets.records import filter_active_records, next_id

router = APIRouter()


@router.get("")
async def list_bph(repo: RecordRepository = Depends(get_bph_repository)):
    return filter_active_records(await repo.list_rows())


@router.post("", response_model=MessageResponse)
async def create_bph(
    body: BphCreate,
    _user: SessionUser = Depends(
        require_role(UserRole.KETUA_RW, UserRole.ADMIN, UserRole.SUPER_ADMIN)
    ),
    repo: RecordRepository = Depends(get_bph_repository),
):
    row = {
        "id": next_id(await repo.fetch_rows()),
        **body.model_dump(),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    await repo.append(row)
    return MessageResponse(message="Data BPH berhasil ditambahkan", data=row)
