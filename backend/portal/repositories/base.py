"""Storage interfaces, one per entity type.

Routers depend on these protocols only. Which store backs an entity
(spreadsheet or PostgreSQL) is decided in ``portal.repositories.deps``,
so moving an entity between stores does not touch the routes.

Read failures of the spreadsheet are absorbed into empty lists by the
``list_*`` methods; methods that must tell "failed" from "empty" raise
``UpstreamUnavailableError``. Failed writes always raise it.
"""

from datetime import datetime
from typing import Any, Protocol

from portal.models.audit import BlokirAttempt, LogAktivitas
from portal.models.content import Berita, LembagaDesa, Umkm
from portal.models.user import User
from portal.schemas.warga import WargaData


class WargaRepository(Protocol):
    async def list_residents(self) -> list[WargaData]: ...

    async def raw_rows(self) -> list[dict[str, Any]]:
        """Every resident row with identity columns intact. Raises when unreadable."""
        ...

    async def get(self, warga_id: int) -> WargaData | None: ...

    async def create(self, data: dict[str, Any]) -> dict[str, Any]: ...

    async def update(self, warga_id: int, data: dict[str, Any]) -> None: ...

    async def deactivate(self, ids: list[int]) -> None: ...


class RecordRepository(Protocol):
    """Free-form rows of one sheet (loker, bph, account, subscriptions)."""

    name: str

    async def list_rows(self) -> list[dict[str, Any]]: ...

    async def fetch_rows(self) -> list[dict[str, Any]]: ...

    async def append(self, row: dict[str, Any]) -> None: ...

    async def update(self, row_id: int, data: dict[str, Any]) -> None: ...

    async def delete(self, row_id: int) -> None: ...


class UserRepository(Protocol):
    async def get_by_email(self, email: str) -> User | None: ...

    async def create(self, user: User) -> User: ...

    async def record_login(self, user: User, when: datetime) -> None: ...


class BeritaRepository(Protocol):
    async def list_published(self) -> list[Berita]: ...

    async def create(self, berita: Berita) -> Berita: ...

    async def count_published(self) -> int: ...


class UmkmRepository(Protocol):
    async def list_verified(self) -> list[Umkm]: ...

    async def create(self, umkm: Umkm) -> Umkm: ...

    async def count_verified(self) -> int: ...


class LembagaRepository(Protocol):
    async def list_active(self) -> list[LembagaDesa]: ...

    async def get(self, lembaga_id: int) -> LembagaDesa | None: ...

    async def create(self, lembaga: LembagaDesa) -> LembagaDesa: ...


class ActivityLogRepository(Protocol):
    async def add(self, entry: LogAktivitas) -> None: ...

    async def list_recent(self, limit: int = 500) -> list[LogAktivitas]: ...


class BlokirRepository(Protocol):
    async def get(self, ip_address: str) -> BlokirAttempt | None: ...

    async def save(self, attempt: BlokirAttempt) -> BlokirAttempt: ...

    async def list_all(self) -> list[BlokirAttempt]: ...
