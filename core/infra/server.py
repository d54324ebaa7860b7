"""
HTTP surface: help text, health check and on-demand scans (aiohttp.web).
"""

import logging
from typing import Any, Awaitable, Callable

from aiohttp import web

from ..models import ScanResult
from .scheduler import ScanGuard, ScanInProgress


logger = logging.getLogger(__name__)

HELP_TEXT = (
    "shopify-missing-metafields\n"
    "\n"
    "Endpoints:\n"
    "  GET  /health\n"
    "  GET  /scan\n"
    "  POST /scan\n"
)

RUN_SCAN_KEY = web.AppKey("run_scan", Callable[[], Awaitable[ScanResult]])
GUARD_KEY = web.AppKey("scan_guard", ScanGuard)


async def index(_request: web.Request) -> web.Response:
    return web.Response(text=HELP_TEXT, content_type="text/plain")


async def health(_request: web.Request) -> web.Response:
    return web.json_response({"ok": True})


async def scan(request: web.Request) -> web.Response:
    """Run one scan synchronously and report its outcome."""
    run_scan = request.app[RUN_SCAN_KEY]
    guard = request.app[GUARD_KEY]

    try:
        async with guard.hold():
            result = await run_scan()
    except ScanInProgress as e:
        return web.json_response({"ok": False, "error": str(e)}, status=409)
    except Exception as e:
        logger.exception("Scan error")
        return web.json_response({"ok": False, "error": str(e) or "error"}, status=500)

    body: dict[str, Any] = {"ok": True, **result.as_response()}
    return web.json_response(body)


def create_app(run_scan: Callable[[], Awaitable[ScanResult]], guard: ScanGuard) -> web.Application:
    app = web.Application()
    app[RUN_SCAN_KEY] = run_scan
    app[GUARD_KEY] = guard
    app.add_routes([
        web.get("/", index),
        web.get("/health", health),
        web.get("/scan", scan, allow_head=False),
        web.post("/scan", scan),
    ])
    return app
