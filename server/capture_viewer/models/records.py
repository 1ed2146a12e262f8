"""Pydantic models for captured records, profiles, and cookie exports."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Literal

import pydantic

from capture_viewer.utils import serialization

SameSite = Literal["lax", "no_restriction", "strict", "unspecified"]

SAME_SITE_VALUES: frozenset[str] = frozenset(("lax", "no_restriction", "strict", "unspecified"))

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Numeric timestamps above this are taken to be milliseconds.
_MILLISECOND_THRESHOLD = 100_000_000_000

CookieMap = dict[str, str]
LocalDataMap = dict[str, Any]


def parse_timestamp(value: object) -> datetime:
    """Convert a collector timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings, unix seconds, or unix
    milliseconds. Anything unparseable becomes the epoch so
    the record still sorts, just last.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, bool) or value is None:
        return EPOCH
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return EPOCH
        try:
            value = float(text)
        except ValueError:
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                return EPOCH
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > _MILLISECOND_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return EPOCH
    return EPOCH


class RawRecord(pydantic.BaseModel):
    """One capture entry exactly as delivered by the collection endpoint.

    A record either carries cookie/local-storage data itself,
    or (older producers) only a profile key plus a nested
    ``cookiesList`` of sub-records that carry the data.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    id: str | None = pydantic.Field(default=None, alias="_id")
    url: str = ""
    data: str | None = None
    local_data: str | None = None
    updated_at: datetime = EPOCH
    same_site: str | None = None
    profile: str | None = None
    cookies_list: list[RawRecord] | None = None

    @pydantic.field_validator("id", "same_site", "profile", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @pydantic.field_validator("url", mode="before")
    @classmethod
    def _url_or_empty(cls, value: object) -> object:
        return "" if value is None else value

    @pydantic.field_validator("data", "local_data", mode="before")
    @classmethod
    def _payload_to_text(cls, value: object) -> object:
        # Some producers ship localData already decoded.
        if isinstance(value, (dict, list)):
            return json.dumps(value)
        return value

    @pydantic.field_validator("updated_at", mode="before")
    @classmethod
    def _parse_updated_at(cls, value: object) -> datetime:
        return parse_timestamp(value)


class NormalizedRecord(pydantic.BaseModel):
    """A raw record with its cookie and local-storage payloads parsed."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str | None = None
    url: str
    updated_at: datetime
    same_site: str | None = None
    profile: str
    cookies: CookieMap
    local_data: LocalDataMap


class Profile(pydantic.BaseModel):
    """A named group of normalized records, most recent first."""

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str
    records: list[NormalizedRecord]

    @property
    def record_count(self) -> int:
        """Number of records in this profile."""
        return len(self.records)


class ExportCookie(pydantic.BaseModel):
    """A cookie in the schema expected by browser cookie-import extensions.

    Field order matches the import schema and is preserved
    when dumped.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=serialization.snake_to_camel,
        populate_by_name=True,
        frozen=True,
    )

    domain: str
    expiration_date: int
    host_only: bool = True
    http_only: bool = False
    name: str
    path: Literal["/"] = "/"
    same_site: SameSite = "unspecified"
    secure: bool = True
    session: bool = False
    store_id: None = None
    value: str
