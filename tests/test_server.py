"""Tests for the aiohttp routes in core.infra.server."""

import asyncio
from pathlib import Path

from aiohttp import test_utils

from core.errors import TransportError
from core.infra.scheduler import ScanGuard
from core.infra.server import create_app
from core.models import ScanResult


async def _ok_scan():
    return ScanResult(missing_count=3, report_file_path=Path("/tmp/missing-metafields_2024-05-06.xlsx"))


async def _failing_scan():
    raise TransportError("HTTP 503: unavailable", status=503)


async def _request(app, method, path):
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        resp = await client.request(method, path)
        if resp.content_type == "application/json":
            return resp.status, await resp.json()
        return resp.status, await resp.text()


def test_index_help_text():
    status, text = asyncio.run(_request(create_app(_ok_scan, ScanGuard()), "GET", "/"))
    assert status == 200
    assert "GET  /health" in text
    assert "POST /scan" in text


def test_health():
    status, body = asyncio.run(_request(create_app(_ok_scan, ScanGuard()), "GET", "/health"))
    assert (status, body) == (200, {"ok": True})


def test_scan_get_and_post():
    for method in ("GET", "POST"):
        status, body = asyncio.run(_request(create_app(_ok_scan, ScanGuard()), method, "/scan"))
        assert status == 200
        assert body == {
            "ok": True,
            "missingCount": 3,
            "reportFilePath": "/tmp/missing-metafields_2024-05-06.xlsx",
        }


def test_scan_failure_is_500():
    status, body = asyncio.run(_request(create_app(_failing_scan, ScanGuard()), "POST", "/scan"))
    assert status == 500
    assert body["ok"] is False
    assert "503" in body["error"]


def test_scan_while_busy_is_409():
    async def go():
        guard = ScanGuard()
        app = create_app(_ok_scan, guard)
        async with guard.hold():
            return await _request(app, "GET", "/scan")

    status, body = asyncio.run(go())
    assert status == 409
    assert body["ok"] is False
