"""Tests for per-IP failed verification tracking."""

from datetime import datetime, timedelta

import pytest

from portal.services.verification import BLOCKED, MONITORING, VerificationGuard

from conftest import FakeBlokirRepository

IP = "203.0.113.7"
T0 = datetime(2026, 3, 1, 8, 0, 0)


@pytest.fixture
def guard(settings) -> VerificationGuard:
    return VerificationGuard(FakeBlokirRepository(), settings)


@pytest.mark.unit
@pytest.mark.asyncio
class TestVerificationGuard:
    async def test_first_failure_starts_monitoring(self, guard):
        attempt = await guard.record_failure(IP, "3277***", "3277***", now=T0)

        assert attempt.status == MONITORING
        assert attempt.failed_count == 1
        assert attempt.first_attempt == T0
        assert await guard.is_blocked(IP, now=T0) is False

    async def test_fifth_failure_blocks_for_a_day(self, guard):
        for i in range(4):
            attempt = await guard.record_failure(IP, now=T0 + timedelta(minutes=i))
        assert attempt.status == MONITORING

        attempt = await guard.record_failure(IP, now=T0 + timedelta(minutes=5))

        assert attempt.status == BLOCKED
        assert attempt.failed_count == 5
        assert attempt.total_blocks == 1
        assert attempt.blocked_until == T0 + timedelta(minutes=5, hours=24)
        assert await guard.is_blocked(IP, now=T0 + timedelta(hours=1)) is True

    async def test_block_lapses(self, guard):
        for _ in range(5):
            await guard.record_failure(IP, now=T0)
        assert await guard.is_blocked(IP, now=T0 + timedelta(hours=24, seconds=1)) is False

    async def test_failure_after_expired_block_starts_fresh_count(self, guard):
        for _ in range(5):
            await guard.record_failure(IP, now=T0)

        later = T0 + timedelta(days=2)
        attempt = await guard.record_failure(IP, now=later)

        assert attempt.status == MONITORING
        assert attempt.failed_count == 1
        assert attempt.blocked_until is None
        assert attempt.total_blocks == 1

    async def test_failures_are_counted_per_ip(self, guard):
        for _ in range(5):
            await guard.record_failure(IP, now=T0)
        other = await guard.record_failure("198.51.100.1", now=T0)

        assert other.failed_count == 1
        assert await guard.is_blocked("198.51.100.1", now=T0) is False

    async def test_limits_come_from_settings(self, settings):
        strict = VerificationGuard(
            FakeBlokirRepository(),
            settings.model_copy(update={"verify_max_failures": 2, "verify_block_hours": 1}),
        )
        await strict.record_failure(IP, now=T0)
        attempt = await strict.record_failure(IP, now=T0)

        assert attempt.status == BLOCKED
        assert attempt.blocked_until == T0 + timedelta(hours=1)
