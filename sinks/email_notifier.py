"""
Email sink that mails the report as an attachment over SMTP (STARTTLS).
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime
from email.message import EmailMessage
from typing import Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from core.errors import ConfigError, NotifyError
from core.interfaces import Notifier
from core.models import MetafieldRequirement, ResourceType, ScanSummary
from core.settings import Settings


logger = logging.getLogger(__name__)

XLSX_MIME = ("application", "vnd.openxmlformats-officedocument.spreadsheetml.sheet")

# (resource type, label used in the body)
SECTIONS = [
    (ResourceType.PRODUCT, "Products (active & published)"),
    (ResourceType.COLLECTION, "Collections (published)"),
    (ResourceType.PAGE, "Pages (visible)"),
]


def build_subject(total: int, counts: Dict[str, int]) -> str:
    return (
        "[Shopify] Missing metafields - "
        f"Prod {counts.get('products', 0)} · "
        f"Col {counts.get('collections', 0)} · "
        f"Pages {counts.get('pages', 0)} (Total {total})"
    )


def build_body(
    summary: ScanSummary,
    requirements: Dict[ResourceType, Sequence[MetafieldRequirement]],
    schedule: str,
    generated_at: datetime,
) -> str:
    lines = ["Summary:"]
    for rtype, label in SECTIONS:
        count = summary.per_type_counts.get(rtype.count_key, 0)
        keys = ", ".join(f"'{r.label}'" for r in requirements.get(rtype, ()))
        lines.append(f"• {label}: {count}  → missing {keys or '(nothing required)'}")
    lines += [
        "",
        f"Attachment: {summary.file_path.name}",
        "Action: fill in the metafields listed in the spreadsheet.",
        "",
        f"Schedule: {schedule}",
        f"Generated: {generated_at:%Y-%m-%d %H:%M:%S %Z}",
    ]
    return "\n".join(lines)


class EmailNotifier(Notifier):
    """Sends the report to ``REPORT_TO_EMAIL`` recipients."""

    name = "EmailNotifier"

    def __init__(
        self,
        settings: Settings,
        requirements: Dict[ResourceType, Sequence[MetafieldRequirement]],
        now: Optional[Callable[[ZoneInfo], datetime]] = None,
    ):
        self.settings = settings
        self.requirements = requirements
        self._now = now or (lambda tz: datetime.now(tz))

    @property
    def schedule(self) -> str:
        return f"cron '{self.settings.scan_cron}' ({self.settings.timezone})"

    def build_message(self, summary: ScanSummary, recipients: List[str]) -> EmailMessage:
        generated_at = self._now(ZoneInfo(self.settings.timezone))

        msg = EmailMessage()
        msg["From"] = self.settings.sender
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = build_subject(summary.total_count, summary.per_type_counts)
        msg.set_content(build_body(summary, self.requirements, self.schedule, generated_at))

        try:
            data = summary.file_path.read_bytes()
        except OSError as e:
            raise NotifyError(f"Cannot read report {summary.file_path}: {e}") from e
        msg.add_attachment(
            data,
            maintype=XLSX_MIME[0],
            subtype=XLSX_MIME[1],
            filename=summary.file_path.name,
        )
        return msg

    async def send(self, summary: ScanSummary) -> None:
        recipients = self.settings.report_to
        if not recipients:
            raise ConfigError("Missing REPORT_TO_EMAIL")
        if not self.settings.smtp_host:
            raise ConfigError("Missing SMTP_HOST")
        if not self.settings.sender:
            raise ConfigError("Missing REPORT_FROM_EMAIL (or SMTP_USER) for the From address")

        msg = self.build_message(summary, recipients)
        await asyncio.to_thread(self._deliver, msg)
        logger.info(f"Report emailed to {len(recipients)} recipient(s)")

    def _deliver(self, msg: EmailMessage) -> None:
        s = self.settings
        context = ssl.create_default_context()
        try:
            with smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.http_timeout) as server:
                server.starttls(context=context)
                if s.smtp_user:
                    server.login(s.smtp_user, s.smtp_pass)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifyError(f"Failed to send report email: {e}") from e
