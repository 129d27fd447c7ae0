"""Job postings (``loker`` sheet)."""

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends

from portal.auth.deps import current_session, require_role
from portal.middleware.exceptions import ResourceNotFoundError
from portal.models.user import UserRole
from portal.repositories.base import RecordRepository
from portal.repositories.deps import get_loker_repository
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.schemas.content import LOKER_HEADERS, IdRequest, LokerCreate, LokerUpdate
from portal.sheets.records import next_id

router = APIRouter()

_EDITORS = (UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.ADMIN_RW, UserRole.KETUA_RW)
_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y")


def parse_deadline(value) -> date | None:
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def is_open(row: dict, today: date) -> bool:
    """Active and the deadline is today or later. No readable deadline → closed."""
    if row.get("status_aktif") != "Aktif":
        return False
    deadline = parse_deadline(row.get("deadline"))
    return deadline is not None and deadline >= today


@router.get("")
async def list_loker(
    user: SessionUser | None = Depends(current_session),
    repo: RecordRepository = Depends(get_loker_repository),
):
    rows = await repo.list_rows()
    if user and user.role in (UserRole.ADMIN.value, UserRole.SUPER_ADMIN.value):
        return rows
    today = datetime.now(timezone.utc).date()
    return [row for row in rows if is_open(row, today)]


@router.post("", response_model=MessageResponse)
async def create_loker(
    body: LokerCreate,
    user: SessionUser = Depends(require_role(*_EDITORS)),
    repo: RecordRepository = Depends(get_loker_repository),
):
    payload = body.model_dump(mode="json")
    if not payload["admin_poster"]:
        payload["admin_poster"] = user.nama_lengkap

    now = datetime.now(timezone.utc).isoformat()
    row = {
        h: payload.get(h) if payload.get(h) is not None else "" for h in LOKER_HEADERS
    }
    row.update(id=next_id(await repo.fetch_rows()), created_at=now, updated_at=now)

    await repo.append(row)
    return MessageResponse(message="Lowongan kerja berhasil ditambahkan", data=row)


@router.put("", response_model=MessageResponse)
async def update_loker(
    body: LokerUpdate,
    _user: SessionUser = Depends(require_role(*_EDITORS)),
    repo: RecordRepository = Depends(get_loker_repository),
):
    rows = await repo.fetch_rows()
    existing = next((r for r in rows if str(r.get("id")) == str(body.id)), None)
    if existing is None:
        raise ResourceNotFoundError("Loker tidak ditemukan")

    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    row = {h: changes.get(h, existing.get(h, "")) for h in LOKER_HEADERS}
    row["updated_at"] = datetime.now(timezone.utc).isoformat()

    await repo.update(body.id, row)
    return MessageResponse(message="Lowongan kerja berhasil diperbarui", data=row)


@router.delete("", response_model=MessageResponse)
async def delete_loker(
    body: IdRequest,
    _user: SessionUser = Depends(require_role(*_EDITORS)),
    repo: RecordRepository = Depends(get_loker_repository),
):
    await repo.delete(body.id)
    return MessageResponse(message="Lowongan kerja berhasil dihapus")
