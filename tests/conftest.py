"""Shared test doubles."""

import copy

import pytest


class FakeGraphQLClient:
    """Replays canned ``data`` payloads per connection and records requests."""

    def __init__(self, pages=None, error=None):
        # pages: {connection: [data-for-page-1, data-for-page-2, ...]}
        self._pages = {conn: list(seq) for conn, seq in (pages or {}).items()}
        self.error = error
        self.calls = []

    async def execute(self, document, variables):
        self.calls.append((document, copy.deepcopy(dict(variables))))
        if self.error is not None:
            raise self.error
        for conn, seq in self._pages.items():
            if f" {conn}(" in document:
                return {conn: seq.pop(0)}
        raise AssertionError(f"unexpected query: {document}")


def page(nodes, has_next=False, cursor_prefix="c"):
    """Connection payload with one edge per node."""
    return {
        "edges": [
            {"cursor": f"{cursor_prefix}{i}", "node": node} for i, node in enumerate(nodes)
        ],
        "pageInfo": {"hasNextPage": has_next},
    }


@pytest.fixture
def fake_client():
    return FakeGraphQLClient


@pytest.fixture
def make_page():
    return page
