"""
Cursor pagination over Admin API connections.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol

from .errors import APIError

logger = logging.getLogger(__name__)

PAGE_SIZE = 200  # fixed, not configurable


class QueryExecutor(Protocol):
    async def execute(self, document: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        ...


def build_connection_query(
    connection: str,
    node_fields: str,
    *,
    sort_key: Optional[str] = None,
    with_filter: bool = False,
) -> str:
    """Query document for one page of ``connection``.

    ``$query`` is only declared when a filter is supplied; GraphQL rejects
    declared variables that are never used.
    """
    header = "query($cursor: String, $query: String)" if with_filter else "query($cursor: String)"
    args = [f"first: {PAGE_SIZE}", "after: $cursor"]
    if sort_key:
        args.append(f"sortKey: {sort_key}")
    if with_filter:
        args.append("query: $query")

    return f"""
{header} {{
  {connection}({", ".join(args)}) {{
    edges {{ cursor node {{ {node_fields} }} }}
    pageInfo {{ hasNextPage }}
  }}
}}
"""


async def fetch_all_pages(
    client: QueryExecutor,
    connection: str,
    node_fields: str,
    *,
    sort_key: Optional[str] = None,
    filter_query: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Walk every page of ``connection`` and return all nodes in edge order.

    Any request error propagates immediately; nothing is returned on failure.
    """
    with_filter = bool(filter_query)
    document = build_connection_query(
        connection, node_fields, sort_key=sort_key, with_filter=with_filter
    )

    nodes: List[Dict[str, Any]] = []
    cursor: Optional[str] = None
    has_next = True
    page = 0

    while has_next:
        variables: Dict[str, Any] = {"cursor": cursor}
        if with_filter:
            variables["query"] = filter_query

        data = await client.execute(document, variables)
        conn = data.get(connection)
        if conn is None:
            raise APIError(f"Response has no '{connection}' connection")

        edges = conn.get("edges") or []
        nodes.extend(edge["node"] for edge in edges)
        page += 1
        logger.debug("%s page %d: %d nodes", connection, page, len(edges))

        has_next = bool((conn.get("pageInfo") or {}).get("hasNextPage"))
        if has_next:
            if not edges:
                raise APIError(f"{connection}: hasNextPage is true but the page has no edges")
            next_cursor = edges[-1]["cursor"]
            if not next_cursor or next_cursor == cursor:
                raise APIError(f"{connection}: pagination cursor did not advance")
            cursor = next_cursor

    logger.info("Fetched %d %s in %d page(s)", len(nodes), connection, page)
    return nodes
