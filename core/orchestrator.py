"""
Orchestrator for a full scan: checkers -> report -> notification.
"""

import asyncio
import logging
from typing import Dict, List, Sequence

from .interfaces import Checker, Notifier, ReportWriter
from .models import MissingRecord, ResourceType, ScanResult, ScanSummary


logger = logging.getLogger(__name__)

# Higher ranks first in the report
STATUS_PRECEDENCE: Dict[str, int] = {
    "Activo": 3,
    "Visible": 2,
    "Publicada": 1,
}


def sort_by_status(records: List[MissingRecord]) -> List[MissingRecord]:
    """Stable sort by status precedence; unknown statuses go last."""
    return sorted(records, key=lambda r: -STATUS_PRECEDENCE.get(r.status, 0))


class Scanner:
    """Runs every checker concurrently and hands the merged result on."""

    def __init__(
        self,
        checkers: Sequence[Checker],
        reporter: ReportWriter,
        notifier: Notifier,
    ):
        self.checkers = list(checkers)
        self.reporter = reporter
        self.notifier = notifier

    async def run_scan(self) -> ScanResult:
        """Run one scan.

        Fail-fast: the first checker error propagates and neither the
        report nor the notification is produced.
        """
        logger.info(f"Starting scan with {len(self.checkers)} checker(s)")

        results: List[List[MissingRecord]] = await asyncio.gather(
            *(checker.check() for checker in self.checkers)
        )

        rows = sort_by_status([record for result in results for record in result])

        counts: Dict[str, int] = {rtype.count_key: 0 for rtype in ResourceType}
        for checker, result in zip(self.checkers, results):
            counts[checker.resource_type.count_key] += len(result)
        logger.info(f"Missing metafields: {counts} (total {len(rows)})")

        path = await self.reporter.write(rows)
        await self.notifier.send(
            ScanSummary(file_path=path, total_count=len(rows), per_type_counts=counts)
        )

        logger.info(f"Scan complete: {len(rows)} record(s), report at {path}")
        return ScanResult(missing_count=len(rows), report_file_path=path)
