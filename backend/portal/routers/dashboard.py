"""Dashboard summary counts, scoped to what the caller may see."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from portal.auth.deps import require_session
from portal.repositories.base import BeritaRepository, RecordRepository, UmkmRepository, WargaRepository
from portal.repositories.deps import (
    get_berita_repository,
    get_loker_repository,
    get_umkm_repository,
    get_warga_repository,
)
from portal.routers.loker import is_open
from portal.schemas.auth import SessionUser
from portal.services.warga import filter_warga_data

router = APIRouter()


@router.get("")
async def dashboard_summary(
    user: SessionUser = Depends(require_session),
    warga: WargaRepository = Depends(get_warga_repository),
    loker: RecordRepository = Depends(get_loker_repository),
    umkm: UmkmRepository = Depends(get_umkm_repository),
    berita: BeritaRepository = Depends(get_berita_repository),
):
    today = datetime.now(timezone.utc).date()
    return {
        "totalWarga": len(filter_warga_data(user, await warga.list_residents())),
        "totalUmkm": await umkm.count_verified(),
        "totalLoker": sum(1 for row in await loker.list_rows() if is_open(row, today)),
        "totalBerita": await berita.count_published(),
    }
