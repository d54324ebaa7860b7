"""
Built-in metafield checkers, one per catalog resource type.

* :class:`ProductChecker`    – active + published products (server-side filter)
* :class:`CollectionChecker` – published collections (server-side filter)
* :class:`PageChecker`       – pages with a ``publishedAt`` timestamp (client-side filter)
"""

from typing import Dict, List, Sequence

from core.models import MetafieldRequirement, ResourceType
from core.pagination import QueryExecutor

from .base import TypeChecker
from .collection import CollectionChecker
from .page import PageChecker
from .product import ProductChecker

CHECKERS = {
    ResourceType.PRODUCT: ProductChecker,
    ResourceType.COLLECTION: CollectionChecker,
    ResourceType.PAGE: PageChecker,
}


def build_checkers(
    client: QueryExecutor,
    requirements: Dict[ResourceType, Sequence[MetafieldRequirement]],
) -> List[TypeChecker]:
    """Instantiate every built-in checker with its requirement list."""
    return [cls(client, requirements.get(rtype, ())) for rtype, cls in CHECKERS.items()]


__all__ = [
    "CHECKERS",
    "CollectionChecker",
    "PageChecker",
    "ProductChecker",
    "TypeChecker",
    "build_checkers",
]
