"""RW subscriptions (``subscriptions`` sheet). Admin only."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from portal.auth.deps import require_role
from portal.middleware.exceptions import ValidationFailedError
from portal.models.user import UserRole
from portal.repositories.base import RecordRepository
from portal.repositories.deps import get_subscription_repository
from portal.schemas.account import SubscriptionCreate, SubscriptionUpdate
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.sheets.records import next_id

router = APIRouter()

_admin = require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN)


@router.get("")
async def list_subscriptions(
    _user: SessionUser = Depends(_admin),
    repo: RecordRepository = Depends(get_subscription_repository),
):
    return await repo.list_rows()


@router.post("", response_model=MessageResponse)
async def create_subscription(
    body: SubscriptionCreate,
    _user: SessionUser = Depends(_admin),
    repo: RecordRepository = Depends(get_subscription_repository),
):
    rows = await repo.fetch_rows()
    if any(str(row.get("rw_code")) == body.rw_code for row in rows):
        raise ValidationFailedError("RW sudah terdaftar")

    now = datetime.now(timezone.utc).isoformat()
    row = {
        **body.model_dump(mode="json"),
        "id": next_id(rows),
        "created_at": now,
        "updated_at": now,
    }
    if row["email"] is None:
        row["email"] = ""
    await repo.append(row)
    return MessageResponse(message="Subscription berhasil ditambahkan", data=row)


@router.put("", response_model=MessageResponse)
async def update_subscription(
    body: SubscriptionUpdate,
    _user: SessionUser = Depends(_admin),
    repo: RecordRepository = Depends(get_subscription_repository),
):
    changes = body.model_dump(mode="json", exclude_unset=True, exclude_none=True, exclude={"id"})
    changes["updated_at"] = datetime.now(timezone.utc).isoformat()
    await repo.update(body.id, changes)
    return MessageResponse(message="Subscription berhasil diupdate")
