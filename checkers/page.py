"""
Pages: the connection is walked unsorted and unfiltered; a page counts as
visible when it has a ``publishedAt`` timestamp.
"""

from typing import Any, Mapping

from core.models import ResourceType

from .base import TypeChecker


class PageChecker(TypeChecker):
    name = "PageChecker"
    resource_type = ResourceType.PAGE
    status_label = "Visible"
    extra_fields = ("publishedAt",)

    def is_visible(self, node: Mapping[str, Any]) -> bool:
        return node.get("publishedAt") is not None
