"""Verification blocklist: per-IP failed attempt counters.

Route overview:
  GET  /   — admin / super_admin / developer: offenders, most recent first
  POST /   — admin / super_admin / developer: record a failure for an IP
"""

from fastapi import APIRouter, Depends

from portal.auth.deps import require_role
from portal.models.user import UserRole
from portal.repositories.base import BlokirRepository
from portal.repositories.deps import get_blokir_repository
from portal.schemas.audit import BlokirOut, BlokirReport
from portal.schemas.auth import SessionUser
from portal.schemas.common import MessageResponse
from portal.services.verification import VerificationGuard, get_verification_guard

router = APIRouter()

require_blocklist_admin = require_role(UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.DEVELOPER)


@router.get("", response_model=list[BlokirOut])
async def list_blokir_attempts(
    _user: SessionUser = Depends(require_blocklist_admin),
    repo: BlokirRepository = Depends(get_blokir_repository),
):
    return [BlokirOut.model_validate(a) for a in await repo.list_all()]


@router.post("", response_model=MessageResponse)
async def report_failed_attempt(
    body: BlokirReport,
    _user: SessionUser = Depends(require_blocklist_admin),
    guard: VerificationGuard = Depends(get_verification_guard),
):
    """Manual entry; the verify route records its own failures server-side."""
    attempt = await guard.record_failure(body.ip_address, body.nik_attempted, body.kk_attempted)
    return MessageResponse(
        message="Security log updated",
        data={"status": attempt.status, "failed_count": attempt.failed_count},
    )
