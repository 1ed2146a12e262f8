"""
Record normalization: turn raw capture payloads into structured maps.

Both parsers are total. Malformed cookie segments are dropped
silently, and an undecodable local-storage payload is logged and
replaced with an empty mapping.
"""

from __future__ import annotations

from capture_viewer.models import records
from capture_viewer.utils import json_parsing, logger

log = logger.create_logger("Normalizer")


def parse_cookie_field(raw: str | None) -> records.CookieMap:
    """Parse a ``name=value; name=value`` cookie string.

    Only the first ``=`` in a segment separates name from
    value, so base64 values survive intact. Segments with an
    empty name or value after trimming are skipped, and a
    repeated name keeps its last value.

    Args:
        raw: The record's ``data`` field.

    Returns:
        Cookie names mapped to values, in first-seen order.
    """
    if not raw:
        return {}

    cookies: records.CookieMap = {}
    for segment in raw.split(";"):
        name, sep, value = segment.partition("=")
        if not sep:
            continue
        name, value = name.strip(), value.strip()
        if name and value:
            cookies[name] = value
    return cookies


def decode_local_data(raw: str | None) -> json_parsing.JsonResult:
    """Decode a local-storage payload, keeping the failure reason.

    Any doubled backslashes are collapsed before decoding.
    Anything other than a JSON object is an error.
    """
    if not raw:
        return json_parsing.JsonErr("no local data")

    text = raw
    if json_parsing.looks_double_escaped(raw):
        text = json_parsing.collapse_double_escapes(raw)
    result = json_parsing.decode_json(text)
    if isinstance(result, json_parsing.JsonOk) and not isinstance(result.value, dict):
        return json_parsing.JsonErr(f"expected a JSON object, got {type(result.value).__name__}")
    return result


def parse_local_data(raw: str | None) -> records.LocalDataMap:
    """Parse a local-storage snapshot, returning ``{}`` on any failure."""
    if not raw:
        return {}

    result = decode_local_data(raw)
    if isinstance(result, json_parsing.JsonErr):
        log.warn("Failed to parse local data", {"reason": result.reason, "length": len(raw)})
        return {}
    return result.value


def normalize_record(raw: records.RawRecord, profile: str) -> records.NormalizedRecord:
    """Build the normalized view of *raw* under the given profile key."""
    return records.NormalizedRecord(
        id=raw.id,
        url=raw.url,
        updated_at=raw.updated_at,
        same_site=raw.same_site,
        profile=profile,
        cookies=parse_cookie_field(raw.data),
        local_data=parse_local_data(raw.local_data),
    )
