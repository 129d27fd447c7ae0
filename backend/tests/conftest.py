"""Pytest configuration and fixtures for portal tests.

Nothing here needs PostgreSQL, Redis or Google: routes run against
in-memory repositories swapped in through ``app.dependency_overrides``,
and the spreadsheet client is exercised with ``httpx.MockTransport``.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from portal.auth.password import hash_password
from portal.auth.session import encrypt
from portal.config import Settings, get_settings
from portal.main import app
from portal.middleware.exceptions import UpstreamUnavailableError
from portal.models.audit import BlokirAttempt, LogAktivitas
from portal.models.content import Berita, LembagaDesa, Umkm
from portal.models.user import User
from portal.repositories.deps import (
    get_account_repository,
    get_activity_log_repository,
    get_berita_repository,
    get_blokir_repository,
    get_bph_repository,
    get_lembaga_repository,
    get_loker_repository,
    get_subscription_repository,
    get_umkm_repository,
    get_user_repository,
    get_warga_repository,
)
from portal.schemas.auth import SessionUser
from portal.schemas.warga import WargaData
from portal.sheets.records import filter_active_records, next_id, parse_rows
from portal.utils.rate_limit import RateLimiter, get_rate_limiter

TEST_PASSWORD = "rahasia123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ── In-memory repositories ───────────────────────────────────

class FakeRecordRepository:
    def __init__(self, name: str, rows: list[dict] | None = None):
        self.name = name
        self.rows = [dict(r) for r in rows or []]
        self.unavailable = False
        self.updates: list[tuple[int, dict]] = []
        self.deleted: list[int] = []

    async def list_rows(self) -> list[dict]:
        return [] if self.unavailable else [dict(r) for r in self.rows]

    async def fetch_rows(self) -> list[dict]:
        if self.unavailable:
            raise UpstreamUnavailableError()
        return [dict(r) for r in self.rows]

    async def append(self, row: dict) -> None:
        if self.unavailable:
            raise UpstreamUnavailableError()
        self.rows.append(dict(row))

    async def update(self, row_id: int, data: dict) -> None:
        if self.unavailable:
            raise UpstreamUnavailableError()
        self.updates.append((row_id, dict(data)))
        for row in self.rows:
            if str(row.get("id")) == str(row_id):
                row.update(data)

    async def delete(self, row_id: int) -> None:
        if self.unavailable:
            raise UpstreamUnavailableError()
        self.deleted.append(row_id)
        self.rows = [r for r in self.rows if str(r.get("id")) != str(row_id)]


class FakeWargaRepository:
    def __init__(self, rows: list[dict] | None = None):
        self.rows = [dict(r) for r in rows or []]
        self.unavailable = False
        self.deactivated: list[int] = []

    async def list_residents(self) -> list[WargaData]:
        if self.unavailable:
            return []
        residents, _ = parse_rows(WargaData, filter_active_records(self.rows))
        return residents

    async def raw_rows(self) -> list[dict[str, Any]]:
        if self.unavailable:
            raise UpstreamUnavailableError()
        return [dict(r) for r in self.rows]

    async def get(self, warga_id: int) -> WargaData | None:
        residents, _ = parse_rows(WargaData, self.rows)
        return next((w for w in residents if w.id == warga_id), None)

    async def create(self, data: dict) -> dict:
        row = {"id": next_id(self.rows), **data}
        self.rows.append(row)
        return row

    async def update(self, warga_id: int, data: dict) -> None:
        for row in self.rows:
            if row["id"] == warga_id:
                row.update(data)

    async def deactivate(self, ids: list[int]) -> None:
        self.deactivated.extend(ids)
        for row in self.rows:
            if row["id"] in ids:
                row["status_aktif"] = "Non-Aktif"


class FakeUserRepository:
    def __init__(self, users: list[User] | None = None):
        self.users = list(users or [])
        self.logins: list[tuple[int, datetime]] = []

    async def get_by_email(self, email: str) -> User | None:
        email = email.strip().lower()
        return next((u for u in self.users if u.email.lower() == email), None)

    async def create(self, user: User) -> User:
        user.id = max((u.id for u in self.users), default=0) + 1
        self.users.append(user)
        return user

    async def record_login(self, user: User, when: datetime) -> None:
        user.last_login = when
        self.logins.append((user.id, when))


class FakeModelRepository:
    """Shared storage for the simple database-backed content tables."""

    def __init__(self, items: list | None = None):
        self.items = list(items or [])

    async def create(self, item):
        item.id = len(self.items) + 1
        self.items.append(item)
        return item


class FakeBeritaRepository(FakeModelRepository):
    async def list_published(self) -> list[Berita]:
        published = [b for b in self.items if b.status_publish == "Published"]
        return sorted(published, key=lambda b: b.published_at or datetime.min, reverse=True)

    async def count_published(self) -> int:
        return len(await self.list_published())


class FakeUmkmRepository(FakeModelRepository):
    async def list_verified(self) -> list[Umkm]:
        return [u for u in self.items if u.status_verifikasi == "Verified"]

    async def count_verified(self) -> int:
        return len(await self.list_verified())


class FakeLembagaRepository(FakeModelRepository):
    async def get(self, lembaga_id: int) -> LembagaDesa | None:
        return next((lembaga for lembaga in self.items if lembaga.id == lembaga_id), None)

    async def list_active(self) -> list[LembagaDesa]:
        active = [lembaga for lembaga in self.items if lembaga.status_aktif == "Aktif"]
        return sorted(active, key=lambda lembaga: lembaga.nama_lembaga)


class FakeActivityLogRepository:
    def __init__(self):
        self.entries: list[LogAktivitas] = []

    async def add(self, entry: LogAktivitas) -> None:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)

    async def list_recent(self, limit: int = 500) -> list[LogAktivitas]:
        return sorted(self.entries, key=lambda e: e.timestamp, reverse=True)[:limit]

    def actions(self) -> list[str]:
        return [e.action_type for e in self.entries]


class FakeBlokirRepository:
    def __init__(self):
        self.attempts: dict[str, BlokirAttempt] = {}

    async def get(self, ip_address: str) -> BlokirAttempt | None:
        return self.attempts.get(ip_address)

    async def save(self, attempt: BlokirAttempt) -> BlokirAttempt:
        if attempt.id is None:
            attempt.id = len(self.attempts) + 1
        self.attempts[attempt.ip_address] = attempt
        return attempt

    async def list_all(self) -> list[BlokirAttempt]:
        return sorted(self.attempts.values(), key=lambda a: a.last_attempt, reverse=True)


class FakeRateRedis:
    """The sorted-set commands RateLimiter uses, held in memory."""

    def __init__(self):
        self.sets: dict[str, dict[str, float]] = {}

    async def zremrangebyscore(self, key, low, high):
        members = self.sets.get(key, {})
        for member, score in list(members.items()):
            if low <= score <= high:
                del members[member]

    async def zcard(self, key):
        return len(self.sets.get(key, {}))

    async def zadd(self, key, mapping):
        self.sets.setdefault(key, {}).update(mapping)

    async def expire(self, key, seconds):
        return True


# ── Data ─────────────────────────────────────────────────────

def warga_row(id: int, rt: str, rw: str, **overrides) -> dict:
    row = {
        "id": id,
        "nik_encrypted": f"32770101010000{id:02d}",
        "kk_encrypted": f"32770202020000{id:02d}",
        "nama": f"Warga {id}",
        "jenis_kelamin": "L",
        "alamat": f"Jl. Mawar No. {id}",
        "rt": rt,
        "rw": rw,
        "no_hp": f"0812000000{id:02d}",
        "status_aktif": "Aktif",
    }
    row.update(overrides)
    return row


def make_user(
    email: str = "ketua.rt01@example.com",
    role: str = "admin_rt",
    **overrides,
) -> User:
    fields = dict(
        id=1,
        email=email,
        password_hash=TEST_PASSWORD_HASH,
        nama_lengkap="Budi Santoso",
        role=role,
        rt_akses="01",
        rw_akses="16",
        status_aktif="Aktif",
        subscription_status="active",
        subscription_end=(datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
    )
    fields.update(overrides)
    return User(**fields)


# ── Settings ─────────────────────────────────────────────────

@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        secret_key="test-secret-key",
        sheet_id="sheet-123",
        google_api_key="api-key",
        apps_script_url="https://script.example.com/exec",
        sheet_cache_ttl=0,
    )


# ── Sessions ─────────────────────────────────────────────────

@pytest.fixture
def make_session(settings):
    """Factory: SessionUser for a role, with an active subscription."""

    def _make(role: str = "admin_rt", **overrides) -> SessionUser:
        fields = dict(
            id=7,
            email=f"{role}@example.com",
            role=role,
            rt_akses="01",
            rw_akses="16",
            nama_lengkap=f"User {role}",
            subscription_status="active",
            subscription_end=(datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
            login_time=datetime.now(timezone.utc),
        )
        fields.update(overrides)
        return SessionUser(**fields)

    return _make


@pytest.fixture
def auth_headers(settings, make_session):
    """Factory: Cookie header carrying a signed session for a role."""

    def _headers(role: str = "admin_rt", **overrides) -> dict:
        token = encrypt(make_session(role, **overrides).to_claims(), settings)
        return {"Cookie": f"{settings.session_cookie_name}={token}"}

    return _headers


# ── Repositories ─────────────────────────────────────────────

@pytest.fixture
def warga_repo() -> FakeWargaRepository:
    return FakeWargaRepository([
        warga_row(1, "01", "16"),
        warga_row(2, "02", "16"),
        warga_row(3, "01", "17"),
        warga_row(4, "01", "16", status_aktif="Non-Aktif"),
    ])


@pytest.fixture
def loker_repo() -> FakeRecordRepository:
    return FakeRecordRepository("loker", [
        {"id": 1, "posisi": "Kasir", "perusahaan": "Toko Maju", "status_aktif": "Aktif", "deadline": "2999-12-31"},
        {"id": 2, "posisi": "Sopir", "perusahaan": "CV Jaya", "status_aktif": "Aktif", "deadline": "2000-01-01"},
        {"id": 5, "posisi": "Satpam", "perusahaan": "PT Aman", "status_aktif": "Non-Aktif", "deadline": "2999-12-31"},
    ])


@pytest.fixture
def bph_repo() -> FakeRecordRepository:
    return FakeRecordRepository("bph", [
        {"id": 1, "nama": "Pak RW", "jabatan": "Ketua", "status_aktif": "Aktif"},
        {"id": 2, "nama": "Bu Lama", "jabatan": "Bendahara", "status_aktif": "Non-Aktif"},
    ])


@pytest.fixture
def account_repo() -> FakeRecordRepository:
    return FakeRecordRepository("account", [
        {"id": 1, "email": "rt01@example.com", "password_hash": "$argon2id$secret", "role": "admin_rt"},
    ])


@pytest.fixture
def subscription_repo() -> FakeRecordRepository:
    return FakeRecordRepository("subscriptions", [
        {"id": 1, "rw_code": "16", "nama_rw": "RW 16", "status": "active"},
    ])


@pytest.fixture
def user_repo() -> FakeUserRepository:
    return FakeUserRepository([make_user()])


@pytest.fixture
def berita_repo() -> FakeBeritaRepository:
    return FakeBeritaRepository()


@pytest.fixture
def umkm_repo() -> FakeUmkmRepository:
    return FakeUmkmRepository()


@pytest.fixture
def lembaga_repo() -> FakeLembagaRepository:
    return FakeLembagaRepository()


@pytest.fixture
def activity_repo() -> FakeActivityLogRepository:
    return FakeActivityLogRepository()


@pytest.fixture
def blokir_repo() -> FakeBlokirRepository:
    return FakeBlokirRepository()


@pytest.fixture
def rate_redis() -> FakeRateRedis:
    return FakeRateRedis()


# ── App + client ─────────────────────────────────────────────

@pytest.fixture
def portal_app(
    settings,
    warga_repo,
    loker_repo,
    bph_repo,
    account_repo,
    subscription_repo,
    user_repo,
    berita_repo,
    umkm_repo,
    lembaga_repo,
    activity_repo,
    blokir_repo,
    rate_redis,
):
    overrides = {
        get_settings: lambda: settings,
        get_warga_repository: lambda: warga_repo,
        get_loker_repository: lambda: loker_repo,
        get_bph_repository: lambda: bph_repo,
        get_account_repository: lambda: account_repo,
        get_subscription_repository: lambda: subscription_repo,
        get_user_repository: lambda: user_repo,
        get_berita_repository: lambda: berita_repo,
        get_umkm_repository: lambda: umkm_repo,
        get_lembaga_repository: lambda: lembaga_repo,
        get_activity_log_repository: lambda: activity_repo,
        get_blokir_repository: lambda: blokir_repo,
        get_rate_limiter: lambda: RateLimiter(rate_redis),
    }
    app.dependency_overrides.update(overrides)
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(portal_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=portal_app),
        base_url="http://test",
    ) as ac:
        yield ac


def peer_client(portal_app, ip: str) -> AsyncClient:
    """Client whose socket peer address is ``ip``."""
    return AsyncClient(
        transport=ASGITransport(app=portal_app, client=(ip, 50000)),
        base_url="http://test",
    )
