"""Failed resident-verification tracking, one counter per client IP.

An IP is blocked for ``verify_block_hours`` once its failure count reaches
``verify_max_failures``. Every further failure while over the limit renews
the block. After a block has run out, the next failure starts a fresh count.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import Depends

from portal.config import Settings, get_settings
from portal.models.audit import BlokirAttempt
from portal.repositories.base import BlokirRepository
from portal.repositories.deps import get_blokir_repository

logger = logging.getLogger(__name__)

MONITORING = "monitoring"
BLOCKED = "blocked"


def is_blocked(attempt: BlokirAttempt | None, now: datetime) -> bool:
    return (
        attempt is not None
        and attempt.status == BLOCKED
        and attempt.blocked_until is not None
        and attempt.blocked_until > now
    )


class VerificationGuard:
    def __init__(self, repo: BlokirRepository, settings: Settings):
        self.repo = repo
        self.max_failures = settings.verify_max_failures
        self.block_for = timedelta(hours=settings.verify_block_hours)

    async def is_blocked(self, ip_address: str, now: datetime | None = None) -> bool:
        now = now or datetime.utcnow()
        return is_blocked(await self.repo.get(ip_address), now)

    async def record_failure(
        self,
        ip_address: str,
        nik_attempted: str | None = None,
        kk_attempted: str | None = None,
        now: datetime | None = None,
    ) -> BlokirAttempt:
        now = now or datetime.utcnow()
        attempt = await self.repo.get(ip_address)

        if attempt is None:
            attempt = BlokirAttempt(
                ip_address=ip_address,
                nik_attempted=nik_attempted,
                kk_attempted=kk_attempted,
                failed_count=0,
                total_blocks=0,
                status=MONITORING,
                blocked_until=None,
                first_attempt=now,
            )
        elif attempt.status == BLOCKED and not is_blocked(attempt, now):
            # expired block
            attempt.failed_count = 0
            attempt.status = MONITORING
            attempt.blocked_until = None

        attempt.failed_count = (attempt.failed_count or 0) + 1
        attempt.last_attempt = now
        attempt.nik_attempted = nik_attempted or attempt.nik_attempted
        attempt.kk_attempted = kk_attempted or attempt.kk_attempted

        if attempt.failed_count >= self.max_failures:
            attempt.status = BLOCKED
            attempt.blocked_until = now + self.block_for
            attempt.total_blocks = (attempt.total_blocks or 0) + 1
            logger.warning(
                "Verification blocked for %s after %d failures",
                ip_address,
                attempt.failed_count,
                extra={"ip_address": ip_address, "blocked_until": attempt.blocked_until.isoformat()},
            )

        return await self.repo.save(attempt)


def get_verification_guard(
    repo: BlokirRepository = Depends(get_blokir_repository),
    settings: Settings = Depends(get_settings),
) -> VerificationGuard:
    return VerificationGuard(repo, settings)
