"""
Profile aggregation: group normalized records by capture profile.

Producers ship two shapes. Flat records name their profile in a
``profile`` field and carry their own data. Nested records carry
only the profile key plus a ``cookiesList`` of sub-records. The
shape is resolved once up front so the grouping fold only sees
``(profile_key, record)`` pairs.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence

from capture_viewer.models import records
from capture_viewer.records import normalizer
from capture_viewer.utils import logger

log = logger.create_logger("Aggregator")

DEFAULT_PROFILE = "default"


# ============================================================================
# Record shapes
# ============================================================================


@dataclasses.dataclass(frozen=True)
class FlatShape:
    """A record that belongs directly to its own profile."""

    record: records.RawRecord


@dataclasses.dataclass(frozen=True)
class NestedShape:
    """A grouping record whose sub-records carry the data."""

    profile_key: str | None
    sub_records: tuple[records.RawRecord, ...]


RecordShape = FlatShape | NestedShape


def resolve_shape(record: records.RawRecord) -> RecordShape:
    """Classify *record* as flat or nested."""
    if record.cookies_list is not None:
        return NestedShape(profile_key=record.profile, sub_records=tuple(record.cookies_list))
    return FlatShape(record=record)


def resolve_shapes(raw_records: Iterable[records.RawRecord]) -> list[RecordShape]:
    """Classify every input record, preserving order."""
    return [resolve_shape(r) for r in raw_records]


def profile_key(value: str | None, default_profile: str = DEFAULT_PROFILE) -> str:
    """Return the trimmed profile name, or *default_profile* when blank."""
    name = (value or "").strip()
    return name or default_profile


def iter_profile_pairs(
    shapes: Iterable[RecordShape],
    default_profile: str = DEFAULT_PROFILE,
) -> Iterator[tuple[str, records.RawRecord]]:
    """Flatten resolved shapes into ``(profile_key, record)`` pairs."""
    for shape in shapes:
        if isinstance(shape, NestedShape):
            key = profile_key(shape.profile_key, default_profile)
            for sub in shape.sub_records:
                yield key, sub
        else:
            yield profile_key(shape.record.profile, default_profile), shape.record


# ============================================================================
# Grouping
# ============================================================================


def count_records(raw_records: Iterable[records.RawRecord]) -> int:
    """Count leaf records, expanding nested ``cookiesList`` entries."""
    return sum(
        len(r.cookies_list) if r.cookies_list is not None else 1
        for r in raw_records
    )


def count_profile_records(profiles: Iterable[records.Profile]) -> int:
    """Count records across all *profiles*."""
    return sum(p.record_count for p in profiles)


def sort_by_recency(
    normalized: Sequence[records.NormalizedRecord],
) -> list[records.NormalizedRecord]:
    """Order records most recently updated first.

    Python's sort is stable, including with ``reverse=True``,
    so records sharing a timestamp keep their input order.
    """
    return sorted(normalized, key=lambda r: r.updated_at, reverse=True)


def group_by_profile(
    raw_records: Sequence[records.RawRecord],
    default_profile: str = DEFAULT_PROFILE,
) -> list[records.Profile]:
    """Group raw records into profiles.

    Profiles appear in the order their key is first seen in
    *raw_records*; within a profile, records are sorted by
    ``updatedAt`` descending.

    Args:
        raw_records: Records as delivered by the collector,
            flat or nested.
        default_profile: Name used for records without a
            profile key.

    Returns:
        One ``Profile`` per distinct key.
    """
    buckets: dict[str, list[records.NormalizedRecord]] = {}
    for key, raw in iter_profile_pairs(resolve_shapes(raw_records), default_profile):
        buckets.setdefault(key, []).append(normalizer.normalize_record(raw, key))

    profiles = [
        records.Profile(name=name, records=sort_by_recency(bucket))
        for name, bucket in buckets.items()
    ]

    log.debug(
        "Grouped records by profile",
        {"profiles": len(profiles), "records": count_profile_records(profiles)},
    )
    return profiles
