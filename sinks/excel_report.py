"""
Excel sink writing the missing-metafields report with openpyxl.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font

from core.errors import ReportError
from core.interfaces import ReportWriter
from core.models import MissingRecord


logger = logging.getLogger(__name__)

SHEET_TITLE = "Missing Metafields"

# (header, width)
COLUMNS = [
    ("Type", 12),
    ("Status", 14),
    ("ID", 36),
    ("Handle", 30),
    ("Title", 40),
    ("Missing", 50),
]


def report_filename(day: date) -> str:
    return f"missing-metafields_{day.isoformat()}.xlsx"


def _clean(value: str) -> str:
    # worksheets reject ASCII control characters
    return ILLEGAL_CHARACTERS_RE.sub("", value)


class ExcelReportWriter(ReportWriter):
    """Writes one worksheet per run into ``output_dir``."""

    name = "ExcelReportWriter"

    def __init__(self, output_dir: Path, today: Optional[Callable[[], date]] = None):
        self.output_dir = Path(output_dir)
        self._today = today or date.today

    async def write(self, records: List[MissingRecord]) -> Path:
        path = self.output_dir / report_filename(self._today())
        await asyncio.to_thread(self._write_file, records, path)
        logger.info(f"Wrote {len(records)} rows to {path}")
        return path

    def _write_file(self, records: List[MissingRecord], path: Path) -> None:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        header_font = Font(bold=True)
        for col, (header, width) in enumerate(COLUMNS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            ws.column_dimensions[cell.column_letter].width = width

        try:
            for record in records:
                ws.append([
                    record.type.value,
                    _clean(record.status),
                    _clean(record.id),
                    _clean(record.handle),
                    _clean(record.title),
                    _clean(", ".join(record.missing)),
                ])
            path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(path)
        except (OSError, ValueError) as e:
            raise ReportError(f"Failed to write report {path}: {e}") from e
