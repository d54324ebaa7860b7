"""
aliasing.py – query several metafields of one resource in a single round trip.

GraphQL refuses two selections of ``metafield`` with different arguments under
the same response key, so every requirement gets its own alias (``mf0``,
``mf1`` …).  The alias is derived from the requirement's position, which lets
:func:`extract_missing` read the answers back in the same order.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence

from .errors import ConfigError
from .models import MetafieldRequirement

__all__ = ["AliasedSelection", "build_aliased_selection", "extract_missing"]

ALIAS_PREFIX = "mf"


def _literal(value: str) -> str:
    """Quote ``value`` as a GraphQL string literal."""
    return json.dumps(value)


class AliasedSelection:
    """Ordered mapping from requirement index to a generated alias."""

    def __init__(self, requirements: Sequence[MetafieldRequirement]) -> None:
        self._requirements: List[MetafieldRequirement] = list(requirements)

        seen = set()
        for req in self._requirements:
            pair = (req.namespace, req.key)
            if pair in seen:
                raise ConfigError(f"Duplicate metafield requirement: {req.label}")
            seen.add(pair)

        self._aliases: Dict[int, str] = {
            i: f"{ALIAS_PREFIX}{i}" for i in range(len(self._requirements))
        }

    def __len__(self) -> int:
        return len(self._requirements)

    @property
    def requirements(self) -> List[MetafieldRequirement]:
        return list(self._requirements)

    @property
    def aliases(self) -> List[str]:
        return [self._aliases[i] for i in range(len(self._requirements))]

    def selection(self) -> str:
        """GraphQL fragment selecting each requirement under its alias."""
        return "\n".join(
            f"{self._aliases[i]}: metafield(namespace: {_literal(req.namespace)}, "
            f"key: {_literal(req.key)}) {{ id }}"
            for i, req in enumerate(self._requirements)
        )

    def extract_missing(self, node: Mapping[str, Any]) -> List[str]:
        """``namespace.key`` labels whose aliased field is absent or null."""
        return [
            req.label
            for i, req in enumerate(self._requirements)
            if not node.get(self._aliases[i])
        ]


def build_aliased_selection(requirements: Sequence[MetafieldRequirement]) -> str:
    return AliasedSelection(requirements).selection()


def extract_missing(
    node: Mapping[str, Any], requirements: Sequence[MetafieldRequirement]
) -> List[str]:
    return AliasedSelection(requirements).extract_missing(node)
