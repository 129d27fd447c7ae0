"""Activity log. Anyone may append; only admins and developers may read."""

from fastapi import APIRouter, Depends, Query, Request

from portal.auth.deps import current_session, require_role
from portal.models.user import UserRole
from portal.repositories.base import ActivityLogRepository
from portal.repositories.deps import get_activity_log_repository
from portal.schemas.audit import LogCreate, LogOut
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.utils.activity import log_activity

router = APIRouter()


@router.get("", response_model=list[LogOut])
async def list_logs(
    limit: int = Query(500, ge=1, le=5000),
    _user: SessionUser = Depends(
        require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.DEVELOPER)
    ),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    return [LogOut.model_validate(entry) for entry in await logs.list_recent(limit)]


@router.post("", response_model=MessageResponse)
async def create_log(
    body: LogCreate,
    request: Request,
    user: SessionUser | None = Depends(current_session),
    logs: ActivityLogRepository = Depends(get_activity_log_repository),
):
    """Record a client-side action. A signed-in caller's identity wins over the body."""
    await log_activity(
        logs, request, user,
        action_type=body.action_type,
        table_affected=body.table_affected,
        record_id=body.record_id,
        old_data=body.old_data,
        new_data=body.new_data,
        user_email=body.user_email,
        user_role=body.user_role,
    )
    return MessageResponse(message="Log berhasil dicatat")
