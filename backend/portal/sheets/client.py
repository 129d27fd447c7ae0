"""Google Sheets as a row store.

Reads use the Sheets REST API (API key, read-only). Writes go through an
Apps Script web app bound to the same spreadsheet, which understands the
actions ``append``, ``update``, ``delete`` and ``batch_update_status``.

The first row of a sheet is the header row; every following row becomes a
dict keyed by header. Cell text is coerced with ``coerce_cell``.

There is no retry: one request, fixed timeout. ``read_sheet`` turns every
failure into ``[]`` and logs the detail; ``fetch_rows`` raises
``SheetsUnavailableError`` for callers that must tell "empty" from "failed".
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import httpx

from portal.config import Settings, get_settings
from portal.utils.cache import JSONCache, cache_key, get_redis

logger = logging.getLogger(__name__)

USER_AGENT = "RT-RW-Portal/1.0"

# digits, or digits.digits: no sign, no exponent, no hex
_PLAIN_NUMBER = re.compile(r"^\d+(\.\d+)?$")

SheetRow = dict[str, Any]


class SheetsUnavailableError(Exception):
    """The spreadsheet could not be read (config, transport or API error)."""


@dataclass(frozen=True)
class WriteResult:
    success: bool
    message: str


def coerce_cell(value: Any) -> Any:
    """Turn plain numeric text into a number, keep everything else as-is.

    Text with a leading zero (phone numbers, RT codes) stays text so the zero
    is not lost; ``"0"`` itself is a number. Signs and exponents stay text.
    """
    if not isinstance(value, str) or not _PLAIN_NUMBER.match(value):
        return value
    if value != "0" and value.startswith("0"):
        return value
    if "." in value:
        return float(value)
    return int(value)


def rows_from_values(values: list[list[Any]]) -> list[SheetRow]:
    """Header row + data rows → list of dicts. Short rows are padded with ""."""
    if not values:
        return []

    headers = [str(h) for h in values[0]]
    rows = []
    for raw in values[1:]:
        row: SheetRow = {}
        for i, header in enumerate(headers):
            cell = raw[i] if i < len(raw) else ""
            row[header] = coerce_cell("" if cell is None else cell)
        rows.append(row)
    return rows


class GoogleSheetsClient:
    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        cache: JSONCache | None = None,
    ):
        self._settings = settings
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=settings.sheets_timeout_seconds,
            headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        )
        self._cache = cache

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ── Reads ─────────────────────────────────────────────────

    def _values_url(self, sheet_name: str, cell_range: str) -> str:
        encoded_range = quote(f"{sheet_name}!{cell_range}", safe="")
        return f"{self._settings.sheets_base_url}/{self._settings.sheet_id}/values/{encoded_range}"

    def _cache_key(self, sheet_name: str) -> str:
        return cache_key("sheets", self._settings.sheet_id, sheet_name)

    async def _get_values(self, sheet_name: str, cell_range: str, params: dict) -> list[list[Any]]:
        if not self._settings.sheets_configured:
            logger.error(
                "Missing Google Sheets configuration",
                extra={
                    "has_sheet_id": bool(self._settings.sheet_id),
                    "has_api_key": bool(self._settings.google_api_key),
                },
            )
            raise SheetsUnavailableError("Google Sheets is not configured")

        url = self._values_url(sheet_name, cell_range)
        try:
            response = await self._http.get(
                url,
                params={"key": self._settings.google_api_key, **params},
                timeout=self._settings.sheets_timeout_seconds,
            )
        except httpx.HTTPError as exc:
            logger.error("Error reading sheet %s: %s", sheet_name, exc.__class__.__name__)
            raise SheetsUnavailableError(f"Transport error reading {sheet_name}") from exc

        if response.status_code >= 400:
            logger.error(
                "Google Sheets API error for %s: status=%s body=%s",
                sheet_name,
                response.status_code,
                response.text[:500],
            )
            raise SheetsUnavailableError(f"HTTP {response.status_code} reading {sheet_name}")

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Google Sheets returned non-JSON body for %s", sheet_name)
            raise SheetsUnavailableError(f"Invalid response reading {sheet_name}") from exc

        if not isinstance(data, dict):
            raise SheetsUnavailableError(f"Invalid response reading {sheet_name}")
        if data.get("error"):
            logger.error("Google Sheets API error for %s: %s", sheet_name, data["error"])
            raise SheetsUnavailableError(f"API error reading {sheet_name}")

        return data.get("values") or []

    async def fetch_rows(self, sheet_name: str) -> list[SheetRow]:
        """Read a whole sheet as typed rows. Raises SheetsUnavailableError."""
        key = self._cache_key(sheet_name)
        if self._cache is not None:
            cached_rows = await self._cache.get(key)
            if cached_rows is not None:
                return cached_rows

        values = await self._get_values(
            sheet_name,
            "A:Z",
            {
                "valueRenderOption": "UNFORMATTED_VALUE",
                "dateTimeRenderOption": "FORMATTED_STRING",
            },
        )
        rows = rows_from_values(values)

        if self._cache is not None and self._settings.sheet_cache_ttl > 0:
            await self._cache.set(key, rows, self._settings.sheet_cache_ttl)
        return rows

    async def read_sheet(self, sheet_name: str) -> list[SheetRow]:
        """Read a whole sheet; any failure yields [] (see logs for why)."""
        try:
            return await self.fetch_rows(sheet_name)
        except SheetsUnavailableError:
            return []

    async def read_range(self, sheet_name: str, cell_range: str = "A:Z") -> list[list[Any]]:
        """Raw cell values of a range, uncoerced and uncached. [] on failure."""
        try:
            return await self._get_values(
                sheet_name, cell_range, {"valueRenderOption": "UNFORMATTED_VALUE"}
            )
        except SheetsUnavailableError:
            return []

    # ── Writes (Apps Script) ─────────────────────────────────

    async def _post_script(self, sheet_name: str, payload: dict) -> WriteResult:
        if not self._settings.apps_script_url:
            return WriteResult(False, "Apps Script URL not configured")

        try:
            response = await self._http.post(
                self._settings.apps_script_url,
                json={"sheetName": sheet_name, **payload},
                headers={"Content-Type": "application/json"},
                timeout=self._settings.sheets_timeout_seconds,
                follow_redirects=True,
            )
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Apps Script %s on %s failed: %s", payload.get("action"), sheet_name, exc)
            return WriteResult(False, "Internal server error")

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            logger.warning(
                "Apps Script %s on %s rejected: status=%s error=%s",
                payload.get("action"),
                sheet_name,
                response.status_code,
                error,
            )
            return WriteResult(False, error or "Gagal menulis data")

        if self._cache is not None:
            await self._cache.invalidate(self._cache_key(sheet_name))
        return WriteResult(True, "Operasi berhasil")

    async def append_row(self, sheet_name: str, data: SheetRow) -> WriteResult:
        return await self._post_script(sheet_name, {"action": "append", "data": data})

    async def update_row(self, sheet_name: str, row_id: int | str, data: SheetRow) -> WriteResult:
        return await self._post_script(
            sheet_name, {"action": "update", "id": row_id, "data": data}
        )

    async def delete_row(self, sheet_name: str, row_id: int | str) -> WriteResult:
        return await self._post_script(sheet_name, {"action": "delete", "id": row_id})

    async def batch_update_status(
        self, sheet_name: str, ids: list[int], status: str
    ) -> WriteResult:
        return await self._post_script(
            sheet_name, {"action": "batch_update_status", "ids": ids, "status": status}
        )


# ── Dependency ──────────────────────────────────────────────

_client: GoogleSheetsClient | None = None


def get_sheets_client() -> GoogleSheetsClient:
    """Process-wide client, created on first use. Override in tests."""
    global _client
    if _client is None:
        settings = get_settings()
        cache = None
        if settings.sheet_cache_ttl > 0 and settings.redis_url:
            cache = JSONCache(get_redis(settings.redis_url), prefix="portal")
        _client = GoogleSheetsClient(settings, cache=cache)
    return _client


async def close_sheets_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
