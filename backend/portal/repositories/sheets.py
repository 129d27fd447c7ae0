"""Spreadsheet-backed repositories."""

from __future__ import annotations

import logging
from typing import Any

from portal.middleware.exceptions import UpstreamUnavailableError
from portal.schemas.warga import WargaData
from portal.sheets.client import GoogleSheetsClient, SheetsUnavailableError, WriteResult
from portal.sheets.records import filter_active_records, next_id, parse_rows

logger = logging.getLogger(__name__)

WARGA_SHEET = "warga"
LOKER_SHEET = "loker"
BPH_SHEET = "bph"
ACCOUNT_SHEET = "account"
SUBSCRIPTIONS_SHEET = "subscriptions"


def _raise_on_failure(result: WriteResult, sheet_name: str, action: str) -> None:
    if not result.success:
        logger.error("Sheet %s %s failed: %s", sheet_name, action, result.message)
        raise UpstreamUnavailableError("Gagal menyimpan data. Coba lagi nanti.")


class SheetRecordRepository:
    def __init__(self, client: GoogleSheetsClient, name: str):
        self._client = client
        self.name = name

    async def list_rows(self) -> list[dict[str, Any]]:
        return await self._client.read_sheet(self.name)

    async def fetch_rows(self) -> list[dict[str, Any]]:
        try:
            return await self._client.fetch_rows(self.name)
        except SheetsUnavailableError as exc:
            raise UpstreamUnavailableError() from exc

    async def append(self, row: dict[str, Any]) -> None:
        result = await self._client.append_row(self.name, row)
        _raise_on_failure(result, self.name, "append")

    async def update(self, row_id: int, data: dict[str, Any]) -> None:
        result = await self._client.update_row(self.name, row_id, data)
        _raise_on_failure(result, self.name, "update")

    async def delete(self, row_id: int) -> None:
        result = await self._client.delete_row(self.name, row_id)
        _raise_on_failure(result, self.name, "delete")


class SheetWargaRepository:
    """Residents kept in the ``warga`` sheet."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client
        self._rows = SheetRecordRepository(client, WARGA_SHEET)

    async def list_residents(self) -> list[WargaData]:
        rows = filter_active_records(await self._rows.list_rows())
        residents, errors = parse_rows(WargaData, rows)
        if errors:
            logger.warning("%d malformed resident row(s) skipped", len(errors))
        return residents

    async def raw_rows(self) -> list[dict[str, Any]]:
        return await self._rows.fetch_rows()

    async def get(self, warga_id: int) -> WargaData | None:
        residents, _ = parse_rows(WargaData, await self._rows.fetch_rows())
        return next((w for w in residents if w.id == warga_id), None)

    async def create(self, data: dict[str, Any]) -> dict[str, Any]:
        row = {"id": next_id(await self._rows.fetch_rows()), **data}
        await self._rows.append(row)
        return row

    async def update(self, warga_id: int, data: dict[str, Any]) -> None:
        await self._rows.update(warga_id, data)

    async def deactivate(self, ids: list[int]) -> None:
        result = await self._client.batch_update_status(WARGA_SHEET, ids, "Non-Aktif")
        _raise_on_failure(result, WARGA_SHEET, "batch_update_status")
