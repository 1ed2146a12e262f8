"""Shared fixtures for the test suite."""

from __future__ import annotations

from typing import Any

import pytest

from capture_viewer.models import records

# ── Raw Payload Factories ───────────────────────────────────────


@pytest.fixture()
def flat_payload() -> list[dict[str, Any]]:
    """Flat records across two profiles, as a collector would send them."""
    return [
        {
            "_id": "r1",
            "url": "example.com",
            "data": "sid=abc123; theme=dark",
            "localData": '{"token": "t-1", "count": 2}',
            "updatedAt": "2026-01-01T10:00:00Z",
            "sameSite": "Lax",
            "profile": "alice",
        },
        {
            "_id": "r2",
            "url": "shop.example.com",
            "data": "cart=42",
            "localData": None,
            "updatedAt": "2026-01-02T10:00:00Z",
            "profile": "bob",
        },
        {
            "_id": "r3",
            "url": "mail.example.com",
            "data": "auth=eyJhbGciOi==; lang=en",
            "localData": "not json",
            "updatedAt": "2026-01-03T10:00:00Z",
            "sameSite": "None",
            "profile": "alice",
        },
    ]


@pytest.fixture()
def nested_payload() -> list[dict[str, Any]]:
    """A grouping record whose sub-records carry the data."""
    return [
        {
            "_id": "g1",
            "profile": "carol",
            "updatedAt": "2026-01-05T00:00:00Z",
            "cookiesList": [
                {
                    "_id": "c1",
                    "url": "a.example.com",
                    "data": "x=1",
                    "updatedAt": "2026-01-01T00:00:00Z",
                },
                {
                    "_id": "c2",
                    "url": "b.example.com",
                    "data": "y=2",
                    "updatedAt": "2026-01-04T00:00:00Z",
                },
            ],
        },
    ]


@pytest.fixture()
def flat_records(flat_payload: list[dict[str, Any]]) -> list[records.RawRecord]:
    """Validated flat records."""
    return [records.RawRecord.model_validate(item) for item in flat_payload]


@pytest.fixture()
def nested_records(nested_payload: list[dict[str, Any]]) -> list[records.RawRecord]:
    """Validated nested records."""
    return [records.RawRecord.model_validate(item) for item in nested_payload]


@pytest.fixture()
def sample_normalized() -> records.NormalizedRecord:
    """A normalized record with cookies and local data."""
    return records.NormalizedRecord(
        id="r1",
        url="example.com",
        updated_at=records.parse_timestamp("2026-01-01T10:00:00Z"),
        same_site="Strict",
        profile="alice",
        cookies={"sid": "abc123", "theme": "dark"},
        local_data={"token": "t-1", "nested": {"a": [1, 2]}},
    )
