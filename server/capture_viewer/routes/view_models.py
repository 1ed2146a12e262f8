"""
View-model serialization for the HTTP API.

Pure functions with no side-effects: they shape core results into
camelCase JSON for the rendering layer and look up records for
export.
"""

from __future__ import annotations

from typing import Any

from capture_viewer.models import records


def serialize_record(record: records.NormalizedRecord) -> dict[str, Any]:
    """Serialize a normalized record to a camelCase dict."""
    return record.model_dump(mode="json", by_alias=True)


def serialize_profile(profile: records.Profile) -> dict[str, Any]:
    """Serialize a profile with its record count."""
    return {
        "name": profile.name,
        "recordCount": profile.record_count,
        "records": [serialize_record(r) for r in profile.records],
    }


def serialize_profiles(profiles: list[records.Profile]) -> list[dict[str, Any]]:
    """Serialize profiles, keeping their first-seen order."""
    return [serialize_profile(p) for p in profiles]


def find_record(profiles: list[records.Profile], record_id: str) -> records.NormalizedRecord | None:
    """Return the first record whose id matches *record_id*."""
    for profile in profiles:
        for record in profile.records:
            if record.id == record_id:
                return record
    return None
