"""Shared test fixtures."""

from typing import Any

import pytest

from outline_mover.models.document import Collection
from tests.unit.fakes import FakeOutlineApi

# Source collection, nested the way collections.documents returns it:
#
#   A
#   +-- B
#   |   +-- D
#   +-- C
#   E
SOURCE_LISTING: list[dict[str, Any]] = [
    {
        "id": "A",
        "title": "Handbook",
        "url": "/doc/handbook-A",
        "children": [
            {
                "id": "B",
                "title": "Engineering",
                "url": "/doc/engineering-B",
                "children": [
                    {"id": "D", "title": "On-call", "url": "/doc/on-call-D", "children": []},
                ],
            },
            {"id": "C", "title": "", "url": "/doc/untitled-C", "children": []},
        ],
    },
    {"id": "E", "title": "Changelog", "url": "/doc/changelog-E", "children": []},
]

# Destination collection: P has a sub-folder Q, which has R.
DESTINATION_LISTING: list[dict[str, Any]] = [
    {
        "id": "P",
        "title": "Archive",
        "children": [
            {"id": "Q", "title": "2023", "children": [{"id": "R", "title": "Q1", "children": []}]},
        ],
    },
    {"id": "S", "title": "Scratch", "children": []},
]


@pytest.fixture
def fake_api() -> FakeOutlineApi:
    """Return a FakeOutlineApi with a source and a destination collection."""
    api = FakeOutlineApi()
    api.collections = [Collection(id="src", name="Team"), Collection(id="dst", name="Archive")]
    api.documents = {"src": SOURCE_LISTING, "dst": DESTINATION_LISTING}
    return api
