"""
Shared machinery for the per-type metafield checkers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.aliasing import AliasedSelection
from core.interfaces import Checker
from core.models import MetafieldRequirement, MissingRecord, ResourceType
from core.pagination import QueryExecutor, fetch_all_pages

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("id", "handle", "title")


class TypeChecker(Checker):
    """Paginate one connection and report visible nodes lacking metafields.

    Subclasses set the class attributes below; visibility is enforced either
    server-side through ``filter_query`` or client-side by overriding
    :meth:`is_visible`.
    """

    name = "TypeChecker"
    resource_type: ResourceType
    status_label: str = ""
    sort_key: Optional[str] = None
    filter_query: Optional[str] = None
    extra_fields: Sequence[str] = ()

    def __init__(
        self,
        client: QueryExecutor,
        requirements: Sequence[MetafieldRequirement],
    ) -> None:
        self._client = client
        self._selection = AliasedSelection(requirements)

    @property
    def connection(self) -> str:
        return self.resource_type.connection

    @property
    def requirements(self) -> List[MetafieldRequirement]:
        return self._selection.requirements

    def node_fields(self) -> str:
        return "\n".join([*IDENTITY_FIELDS, *self.extra_fields, self._selection.selection()])

    def is_visible(self, node: Mapping[str, Any]) -> bool:
        return True

    def _record(self, node: Mapping[str, Any], missing: List[str]) -> MissingRecord:
        return MissingRecord(
            type=self.resource_type,
            status=self.status_label,
            id=node["id"],
            handle=node.get("handle") or "",
            title=node.get("title") or "",
            missing=missing,
        )

    async def check(self) -> List[MissingRecord]:
        if not len(self._selection):
            logger.info("%s: no required metafields, skipping", self.name)
            return []

        nodes: List[Dict[str, Any]] = await fetch_all_pages(
            self._client,
            self.connection,
            self.node_fields(),
            sort_key=self.sort_key,
            filter_query=self.filter_query,
        )

        records: List[MissingRecord] = []
        hidden = 0
        for node in nodes:
            if not self.is_visible(node):
                hidden += 1
                continue
            missing = self._selection.extract_missing(node)
            if missing:
                records.append(self._record(node, missing))

        logger.info(
            "%s: %d scanned, %d hidden, %d missing metafields",
            self.name, len(nodes), hidden, len(records),
        )
        return records
