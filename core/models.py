"""
Core data models for the metafield auditor.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ResourceType(str, Enum):
    """Catalog resource kinds that carry required metafields."""

    PRODUCT = "PRODUCT"
    COLLECTION = "COLLECTION"
    PAGE = "PAGE"

    @property
    def connection(self) -> str:
        """Root connection name in the Admin GraphQL API."""
        return _CONNECTIONS[self]

    @property
    def count_key(self) -> str:
        """Key used for this type in per-type notification counts."""
        return _CONNECTIONS[self]


_CONNECTIONS = {
    ResourceType.PRODUCT: "products",
    ResourceType.COLLECTION: "collections",
    ResourceType.PAGE: "pages",
}


class MetafieldRequirement(BaseModel):
    """One metafield (namespace + key) that every resource of a type must have."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    key: str

    @property
    def label(self) -> str:
        return f"{self.namespace}.{self.key}"


class MissingRecord(BaseModel):
    """A visible resource lacking at least one required metafield."""

    type: ResourceType
    status: str
    id: str
    handle: str = ""
    title: str = ""
    missing: List[str] = Field(min_length=1)


class ScanSummary(BaseModel):
    """What the notifier needs to know about a finished scan."""

    file_path: Path
    total_count: int
    per_type_counts: Dict[str, int]


class ScanResult(BaseModel):
    """Outcome handed back to whoever triggered a scan."""

    missing_count: int
    report_file_path: Path

    def as_response(self) -> Dict[str, object]:
        return {
            "missingCount": self.missing_count,
            "reportFilePath": str(self.report_file_path),
        }
