"""Repository dependencies: the one place where stores are chosen.

Tests replace any of these through ``app.dependency_overrides``.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.config import Settings, get_settings
from portal.database import get_db
from portal.repositories.base import (
    ActivityLogRepository,
    BeritaRepository,
    BlokirRepository,
    LembagaRepository,
    RecordRepository,
    UmkmRepository,
    UserRepository,
    WargaRepository,
)
from portal.repositories.database import (
    SqlActivityLogRepository,
    SqlBeritaRepository,
    SqlBlokirRepository,
    SqlLembagaRepository,
    SqlUmkmRepository,
    SqlUserRepository,
    SqlWargaRepository,
)
from portal.repositories.sheets import (
    ACCOUNT_SHEET,
    BPH_SHEET,
    LOKER_SHEET,
    SUBSCRIPTIONS_SHEET,
    SheetRecordRepository,
    SheetWargaRepository,
)
from portal.sheets.client import GoogleSheetsClient, get_sheets_client


# ── Residents: sheet or database ────────────────────────────

def get_sheet_warga_repository(
    client: GoogleSheetsClient = Depends(get_sheets_client),
) -> WargaRepository:
    return SheetWargaRepository(client)


def get_sql_warga_repository(db: AsyncSession = Depends(get_db)) -> WargaRepository:
    return SqlWargaRepository(db)


def warga_repository_dependency(settings: Settings):
    """Residents dependency for the configured store, picked once at startup."""
    if settings.warga_store == "database":
        return get_sql_warga_repository
    return get_sheet_warga_repository


get_warga_repository = warga_repository_dependency(get_settings())


# ── Sheet-only entities ─────────────────────────────────────

def get_loker_repository(
    client: GoogleSheetsClient = Depends(get_sheets_client),
) -> RecordRepository:
    return SheetRecordRepository(client, LOKER_SHEET)


def get_bph_repository(
    client: GoogleSheetsClient = Depends(get_sheets_client),
) -> RecordRepository:
    return SheetRecordRepository(client, BPH_SHEET)


def get_account_repository(
    client: GoogleSheetsClient = Depends(get_sheets_client),
) -> RecordRepository:
    return SheetRecordRepository(client, ACCOUNT_SHEET)


def get_subscription_repository(
    client: GoogleSheetsClient = Depends(get_sheets_client),
) -> RecordRepository:
    return SheetRecordRepository(client, SUBSCRIPTIONS_SHEET)


# ── Database-only entities ──────────────────────────────────

def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SqlUserRepository(db)


def get_berita_repository(db: AsyncSession = Depends(get_db)) -> BeritaRepository:
    return SqlBeritaRepository(db)


def get_umkm_repository(db: AsyncSession = Depends(get_db)) -> UmkmRepository:
    return SqlUmkmRepository(db)


def get_lembaga_repository(db: AsyncSession = Depends(get_db)) -> LembagaRepository:
    return SqlLembagaRepository(db)


def get_activity_log_repository(db: AsyncSession = Depends(get_db)) -> ActivityLogRepository:
    return SqlActivityLogRepository(db)


def get_blokir_repository(db: AsyncSession = Depends(get_db)) -> BlokirRepository:
    return SqlBlokirRepository(db)
