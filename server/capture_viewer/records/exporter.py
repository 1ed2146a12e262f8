"""
Export formatting for browser cookie-import tools.

Produces cookie objects in the import schema used by common
cookie-editor extensions, and the pretty-printed JSON text an
operator pastes into them.
"""

from __future__ import annotations

import time
from typing import Any

from capture_viewer.models import records
from capture_viewer.utils import serialization

# No per-cookie expiry survives capture, so exports get a fixed horizon.
EXPIRY_HORIZON_SECONDS = 3600


def normalize_same_site(value: str | None) -> records.SameSite:
    """Lower-case *value*, falling back to ``"unspecified"``."""
    if value:
        lowered = value.lower()
        if lowered in records.SAME_SITE_VALUES:
            return lowered  # type: ignore[return-value]
    return "unspecified"


def to_import_cookies(
    url: str,
    cookie_map: records.CookieMap,
    same_site: str | None,
    now: float | None = None,
) -> list[records.ExportCookie]:
    """Convert a cookie mapping into import-schema cookies.

    Args:
        url: Domain the cookies were captured from.
        cookie_map: Parsed cookie names and values.
        same_site: Raw ``sameSite`` value from the record.
        now: Current unix time; defaults to the wall clock.

    Returns:
        One ``ExportCookie`` per mapping entry, in mapping order.
    """
    current = time.time() if now is None else now
    expiration = int(current) + EXPIRY_HORIZON_SECONDS
    policy = normalize_same_site(same_site)
    return [
        records.ExportCookie(
            domain=url,
            expiration_date=expiration,
            name=name,
            same_site=policy,
            value=value,
        )
        for name, value in cookie_map.items()
    ]


def record_import_cookies(
    record: records.NormalizedRecord,
    now: float | None = None,
) -> list[records.ExportCookie]:
    """Import-schema cookies for a normalized record."""
    return to_import_cookies(record.url, record.cookies, record.same_site, now=now)


def to_clipboard_text(value: list[records.ExportCookie] | records.LocalDataMap | Any) -> str:
    """Render export cookies or local data as clipboard-ready JSON."""
    return serialization.to_pretty_json(value)
