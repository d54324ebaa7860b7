"""
Main entry point for the missing-metafields auditor.

Usage:
    python main.py [serve]    - HTTP server + weekly scheduled scan (default)
    python main.py scan       - run one scan, email the report and exit
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from dotenv import load_dotenv

# Add project root to PYTHONPATH so imports work when running this script directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from aiohttp import web

from checkers import build_checkers
from core.errors import AuditError, ConfigError
from core.infra.graphql import GraphQLClient
from core.infra.scheduler import Scheduler, ScanGuard, schedule_scan
from core.infra.server import create_app
from core.orchestrator import Scanner
from core.settings import Settings, load_requirements
from sinks.email_notifier import EmailNotifier
from sinks.excel_report import ExcelReportWriter


logger = logging.getLogger("main")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s"
    )
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


def build_scanner(settings: Settings, client: GraphQLClient) -> Scanner:
    """Wire checkers, report writer and notifier from configuration."""
    requirements = load_requirements(settings.metafields_config)
    return Scanner(
        checkers=build_checkers(client, requirements),
        reporter=ExcelReportWriter(settings.report_dir),
        notifier=EmailNotifier(settings, requirements),
    )


async def run_once(settings: Settings) -> int:
    """Run a single scan; returns the process exit code."""
    async with GraphQLClient.from_settings(settings) as client:
        try:
            scanner = build_scanner(settings, client)
            result = await scanner.run_scan()
        except AuditError as e:
            logger.error(f"Scan failed: {e}")
            return 1
        except Exception:
            logger.exception("Scan failed with an unexpected error")
            return 1
    logger.info(f"Done: {result.as_response()}")
    return 0


async def serve(settings: Settings) -> None:
    """HTTP server plus the periodic scan until SIGINT/SIGTERM."""
    client = GraphQLClient.from_settings(settings)
    scanner = build_scanner(settings, client)
    guard = ScanGuard()

    scheduler = Scheduler(timezone=settings.timezone)
    schedule_scan(scheduler, scanner.run_scan, guard, settings.scan_cron)

    runner = web.AppRunner(create_app(scanner.run_scan, guard))
    await runner.setup()
    site = web.TCPSite(runner, port=settings.port)

    stop_event = asyncio.Event()

    def signal_handler():
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        asyncio.get_running_loop().add_signal_handler(sig, signal_handler)

    try:
        await site.start()
        logger.info(f"Server running on http://localhost:{settings.port}")
        await scheduler.start()
        logger.info(f"Scan scheduled: {settings.scan_cron} ({settings.timezone})")

        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await scheduler.stop()
        await runner.cleanup()
        await client.close()
        logger.info("Shutdown complete")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Audit Shopify resources for missing metafields")
    parser.add_argument("command", nargs="?", default="serve", choices=["serve", "scan"])
    args = parser.parse_args(argv)

    load_dotenv()
    setup_logging()
    try:
        settings = Settings.from_env()
    except ConfigError as e:
        logger.error(str(e))
        return 1
    setup_logging(settings.log_level)

    if args.command == "scan":
        return asyncio.run(run_once(settings))

    try:
        asyncio.run(serve(settings))
    except AuditError as e:
        logger.error(f"Service failed to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
