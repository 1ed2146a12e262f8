"""
Client for the remote collection endpoint.

Performs a single GET with the configured credential header and
validates the response into ``RawRecord`` models. There is no
retry: the caller either gets the complete record list or a
``CollectorError``.
"""

from __future__ import annotations

from typing import Any

import aiohttp
import pydantic

from capture_viewer import config
from capture_viewer.models import records
from capture_viewer.utils import errors, logger

log = logger.create_logger("Collector")

_RECORD_LIST = pydantic.TypeAdapter(list[records.RawRecord])


def parse_records(payload: Any) -> list[records.RawRecord]:
    """Validate a decoded JSON payload as a list of raw records.

    Raises:
        CollectorError: If the payload is not an array of
            record objects.
    """
    if not isinstance(payload, list):
        raise errors.CollectorError(f"Expected a JSON array of records, got {type(payload).__name__}")
    try:
        return _RECORD_LIST.validate_python(payload)
    except pydantic.ValidationError as exc:
        raise errors.CollectorError(f"Invalid record list: {exc.error_count()} validation error(s)") from exc


def build_headers(cfg: config.CollectorConfig, credential: str | None = None) -> dict[str, str]:
    """Build request headers, forwarding the credential verbatim."""
    value = credential if credential is not None else cfg.credential
    headers = {"Accept": "application/json"}
    if value:
        headers[cfg.credential_header] = value
    return headers


async def _get_json(
    http_session: aiohttp.ClientSession,
    cfg: config.CollectorConfig,
    headers: dict[str, str],
) -> Any:
    timeout = aiohttp.ClientTimeout(total=cfg.timeout_seconds)
    async with http_session.get(cfg.api_url, headers=headers, timeout=timeout) as response:
        if response.status >= 400:
            raise errors.CollectorError("Failed to fetch data", status=response.status)
        return await response.json(content_type=None)


async def fetch_records(
    cfg: config.CollectorConfig,
    credential: str | None = None,
    http_session: aiohttp.ClientSession | None = None,
) -> list[records.RawRecord]:
    """Fetch and validate the raw record list.

    Args:
        cfg: Collector configuration.
        credential: Access value supplied by the operator;
            falls back to ``cfg.credential``.
        http_session: Optional shared session. A private one
            is opened and closed when omitted.

    Returns:
        The validated raw records, in collector order.

    Raises:
        CollectorError: On any transport, status, or payload
            failure.
    """
    if not cfg.validate_config():
        raise errors.CollectorError("Collector endpoint is not configured")

    headers = build_headers(cfg, credential)
    log.start_timer("fetch-records")
    try:
        if http_session is not None:
            payload = await _get_json(http_session, cfg, headers)
        else:
            async with aiohttp.ClientSession() as session:
                payload = await _get_json(session, cfg, headers)
    except errors.CollectorError as exc:
        log.end_timer("fetch-records", "Record fetch failed")
        log.error("Collector returned an error", {"status": exc.status})
        raise
    except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
        log.end_timer("fetch-records", "Record fetch failed")
        log.error("Error fetching data", {"error": errors.get_error_message(exc)})
        raise errors.CollectorError(f"Error fetching data: {errors.get_error_message(exc)}") from exc

    log.end_timer("fetch-records", "Records fetched")
    raw_records = parse_records(payload)
    log.info("Records received", {"records": len(raw_records)})
    return raw_records
