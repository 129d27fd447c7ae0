"""Tests for the spreadsheet client, using httpx.MockTransport."""

import json

import httpx
import pytest

from portal.sheets.client import (
    GoogleSheetsClient,
    SheetsUnavailableError,
    coerce_cell,
    rows_from_values,
)

VALUES = {
    "range": "warga!A1:D3",
    "values": [
        ["id", "nama", "rt", "no_hp"],
        ["1", "Siti", "01", "08123456789"],
        ["2", "Joko"],
    ],
}


class FakeCache:
    """Stands in for JSONCache; records what the client asks of it."""

    def __init__(self):
        self.store: dict = {}
        self.invalidated: list[str] = []

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ttl):
        self.store[key] = value

    async def invalidate(self, pattern):
        self.invalidated.append(pattern)
        self.store.pop(pattern, None)
        return 1


def make_client(settings, handler, cache=None) -> GoogleSheetsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleSheetsClient(settings, http_client=http, cache=cache)


@pytest.mark.unit
@pytest.mark.sheets
class TestCellCoercion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("42", 42),
            ("0", 0),
            ("3.5", 3.5),
            ("08123456789", "08123456789"),
            ("01", "01"),
            ("1e10", "1e10"),
            ("-5", "-5"),
            ("0x1F", "0x1F"),
            ("", ""),
            ("Siti", "Siti"),
            (7, 7),
        ],
    )
    def test_coerce_cell(self, raw, expected):
        assert coerce_cell(raw) == expected
        assert type(coerce_cell(raw)) is type(expected)

    def test_rows_from_values_pads_short_rows(self):
        rows = rows_from_values(VALUES["values"])
        assert rows == [
            {"id": 1, "nama": "Siti", "rt": "01", "no_hp": "08123456789"},
            {"id": 2, "nama": "Joko", "rt": "", "no_hp": ""},
        ]

    def test_rows_from_values_empty(self):
        assert rows_from_values([]) == []
        assert rows_from_values([["id", "nama"]]) == []


@pytest.mark.sheets
@pytest.mark.asyncio
class TestSheetReads:
    async def test_read_sheet(self, settings):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=VALUES)

        client = make_client(settings, handler)
        rows = await client.read_sheet("warga")

        assert [r["nama"] for r in rows] == ["Siti", "Joko"]
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert "/sheet-123/values/" in str(seen[0].url)
        assert seen[0].url.params["key"] == "api-key"
        assert seen[0].url.params["valueRenderOption"] == "UNFORMATTED_VALUE"

    async def test_http_error_yields_empty(self, settings):
        client = make_client(settings, lambda request: httpx.Response(500, text="boom"))
        assert await client.read_sheet("warga") == []

    async def test_api_error_body_yields_empty(self, settings):
        client = make_client(
            settings,
            lambda request: httpx.Response(200, json={"error": {"code": 403, "message": "denied"}}),
        )
        assert await client.read_sheet("warga") == []

    async def test_non_json_body_yields_empty(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, text="<html>"))
        assert await client.read_sheet("warga") == []

    async def test_transport_error_yields_empty(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(settings, handler)
        assert await client.read_sheet("warga") == []

    async def test_unconfigured_makes_no_request(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=VALUES)

        unconfigured = settings.model_copy(update={"google_api_key": ""})
        client = make_client(unconfigured, handler)

        assert await client.read_sheet("warga") == []
        assert calls == []

    async def test_fetch_rows_raises_on_failure(self, settings):
        client = make_client(settings, lambda request: httpx.Response(404, json={}))
        with pytest.raises(SheetsUnavailableError):
            await client.fetch_rows("warga")

    async def test_sheet_without_values(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, json={"range": "x"}))
        assert await client.fetch_rows("warga") == []

    async def test_read_range_returns_raw_cells(self, settings):
        client = make_client(settings, lambda request: httpx.Response(200, json=VALUES))
        cells = await client.read_range("warga", "A1:D3")
        assert cells[1] == ["1", "Siti", "01", "08123456789"]

    async def test_rows_are_cached(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=VALUES)

        cache = FakeCache()
        client = make_client(settings.model_copy(update={"sheet_cache_ttl": 60}), handler, cache)

        first = await client.read_sheet("warga")
        second = await client.read_sheet("warga")

        assert first == second
        assert len(calls) == 1
        assert "sheets:sheet-123:warga" in cache.store


@pytest.mark.sheets
@pytest.mark.asyncio
class TestSheetWrites:
    async def test_append_posts_to_apps_script(self, settings):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        cache = FakeCache()
        client = make_client(settings, handler, cache)
        result = await client.append_row("loker", {"id": 3, "posisi": "Kasir"})

        assert result.success is True
        assert str(seen[0].url) == "https://script.example.com/exec"
        assert json.loads(seen[0].content) == {
            "sheetName": "loker",
            "action": "append",
            "data": {"id": 3, "posisi": "Kasir"},
        }
        assert cache.invalidated == ["sheets:sheet-123:loker"]

    async def test_batch_update_status_payload(self, settings):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"success": True})

        client = make_client(settings, handler)
        await client.batch_update_status("warga", [1, 2], "Non-Aktif")

        assert bodies == [{
            "sheetName": "warga",
            "action": "batch_update_status",
            "ids": [1, 2],
            "status": "Non-Aktif",
        }]

    async def test_rejected_write(self, settings):
        client = make_client(
            settings,
            lambda request: httpx.Response(200, json={"success": False, "error": "Row not found"}),
        )
        result = await client.update_row("loker", 99, {"posisi": "X"})

        assert result.success is False
        assert result.message == "Row not found"

    async def test_write_transport_error(self, settings):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(settings, handler)
        result = await client.delete_row("loker", 1)

        assert result.success is False
        assert result.message == "Internal server error"

    async def test_write_without_script_url(self, settings):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"success": True})

        client = make_client(settings.model_copy(update={"apps_script_url": ""}), handler)
        result = await client.append_row("loker", {"id": 1})

        assert result.success is False
        assert result.message == "Apps Script URL not configured"
        assert calls == []
