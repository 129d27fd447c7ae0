"""PostgreSQL-backed repositories (SQLAlchemy async session per request)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.middleware.exceptions import UpstreamUnavailableError
from portal.models.audit import BlokirAttempt, LogAktivitas
from portal.models.content import Berita, LembagaDesa, Umkm
from portal.models.user import User
from portal.models.warga import Warga
from portal.schemas.warga import WargaData

_WARGA_COLUMNS = {c.key for c in Warga.__table__.columns} - {"id", "created_at", "updated_at"}


def _warga_row(warga: Warga) -> dict[str, Any]:
    row = {c.key: getattr(warga, c.key) for c in Warga.__table__.columns}
    for key in ("created_at", "updated_at"):
        if row[key] is not None:
            row[key] = row[key].isoformat()
    return row


class SqlWargaRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_residents(self) -> list[WargaData]:
        result = await self.db.execute(
            select(Warga).where(Warga.status_aktif == "Aktif").order_by(Warga.id)
        )
        return [WargaData.model_validate(w) for w in result.scalars().all()]

    async def raw_rows(self) -> list[dict[str, Any]]:
        try:
            result = await self.db.execute(select(Warga).order_by(Warga.id))
        except OperationalError as exc:
            raise UpstreamUnavailableError() from exc
        return [_warga_row(w) for w in result.scalars().all()]

    async def get(self, warga_id: int) -> WargaData | None:
        warga = await self.db.get(Warga, warga_id)
        return WargaData.model_validate(warga) if warga else None

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        warga = Warga(**{k: v for k, v in data.items() if k in _WARGA_COLUMNS})
        self.db.add(warga)
        await self.db.flush()
        return _warga_row(warga)

    async def update(self, warga_id: int, data: dict[str, Any]) -> None:
        values = {k: v for k, v in data.items() if k in _WARGA_COLUMNS}
        values["updated_at"] = datetime.utcnow()
        await self.db.execute(update(Warga).where(Warga.id == warga_id).values(**values))

    async def deactivate(self, ids: list[int]) -> None:
        await self.db.execute(
            update(Warga)
            .where(Warga.id.in_(ids))
            .values(status_aktif="Non-Aktif", updated_at=datetime.utcnow())
        )


class SqlUserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self.db.add(user)
        await self.db.flush()
        return user

    async def record_login(self, user: User, when: datetime) -> None:
        user.last_login = when


class SqlBeritaRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_published(self) -> list[Berita]:
        result = await self.db.execute(
            select(Berita)
            .where(Berita.status_publish == "Published")
            .order_by(Berita.published_at.desc().nulls_last())
        )
        return list(result.scalars().all())

    async def create(self, berita: Berita) -> Berita:
        self.db.add(berita)
        await self.db.flush()
        return berita

    async def count_published(self) -> int:
        return await self.db.scalar(
            select(func.count(Berita.id)).where(Berita.status_publish == "Published")
        ) or 0


class SqlUmkmRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_verified(self) -> list[Umkm]:
        result = await self.db.execute(
            select(Umkm)
            .where(Umkm.status_verifikasi == "Verified")
            .order_by(Umkm.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, umkm: Umkm) -> Umkm:
        self.db.add(umkm)
        await self.db.flush()
        return umkm

    async def count_verified(self) -> int:
        return await self.db.scalar(
            select(func.count(Umkm.id)).where(Umkm.status_verifikasi == "Verified")
        ) or 0


class SqlLembagaRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_active(self) -> list[LembagaDesa]:
        result = await self.db.execute(
            select(LembagaDesa)
            .where(LembagaDesa.status_aktif == "Aktif")
            .order_by(LembagaDesa.nama_lembaga.asc())
        )
        return list(result.scalars().all())

    async def get(self, lembaga_id: int) -> LembagaDesa | None:
        return await self.db.get(LembagaDesa, lembaga_id)

    async def create(self, lembaga: LembagaDesa) -> LembagaDesa:
        self.db.add(lembaga)
        await self.db.flush()
        return lembaga


class SqlActivityLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, entry: LogAktivitas) -> None:
        # committed with the enclosing request transaction
        self.db.add(entry)

    async def list_recent(self, limit: int = 500) -> list[LogAktivitas]:
        result = await self.db.execute(
            select(LogAktivitas).order_by(LogAktivitas.timestamp.desc()).limit(limit)
        )
        return list(result.scalars().all())


class SqlBlokirRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, ip_address: str) -> BlokirAttempt | None:
        result = await self.db.execute(
            select(BlokirAttempt).where(BlokirAttempt.ip_address == ip_address)
        )
        return result.scalar_one_or_none()

    async def save(self, attempt: BlokirAttempt) -> BlokirAttempt:
        self.db.add(attempt)
        await self.db.flush()
        return attempt

    async def list_all(self) -> list[BlokirAttempt]:
        result = await self.db.execute(
            select(BlokirAttempt).order_by(BlokirAttempt.last_attempt.desc())
        )
        return list(result.scalars().all())
