"""
Core interfaces for the metafield auditor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from .models import MissingRecord, ResourceType, ScanSummary


class Checker(ABC):
    """Abstract base class for per-type metafield checkers.

    A checker walks every resource of one type and yields the ones that are
    visible but lack required metafields.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this checker."""
        pass

    @property
    @abstractmethod
    def resource_type(self) -> ResourceType:
        """Resource type audited by this checker."""
        pass

    @abstractmethod
    async def check(self) -> List[MissingRecord]:
        """Return missing-metafield records in traversal order."""
        pass


class ReportWriter(ABC):
    """Abstract base class for report sinks."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def write(self, records: List[MissingRecord]) -> Path:
        """Render records into a file and return its path."""
        pass


class Notifier(ABC):
    """Abstract base class for notification sinks."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    async def send(self, summary: ScanSummary) -> None:
        """Deliver the report described by ``summary``."""
        pass
