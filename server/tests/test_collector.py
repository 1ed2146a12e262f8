"""Tests for capture_viewer.services.collector — record list fetching."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import pytest

from capture_viewer.config import CollectorConfig
from capture_viewer.services import collector
from capture_viewer.utils.errors import CollectorError

# ── helpers ─────────────────────────────────────────────────────


class _FakeResponse:
    def __init__(self, status: int, payload: Any = None) -> None:
        self.status = status
        self._payload = payload

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, headers: dict[str, str] | None = None, timeout: Any = None) -> _FakeResponse:
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response


def _config(**overrides: Any) -> CollectorConfig:
    values: dict[str, Any] = {"api_url": "https://collector.test/api/v1/data/", "credential": "key123"}
    values.update(overrides)
    return CollectorConfig(**values)


def _fetch(cfg: CollectorConfig, session: _FakeSession, credential: str | None = None) -> Any:
    return asyncio.run(collector.fetch_records(cfg, credential=credential, http_session=session))  # type: ignore[arg-type]


# ── parse_records ───────────────────────────────────────────────


class TestParseRecords:
    """Tests for parse_records()."""

    def test_valid_list(self, flat_payload: list[dict[str, Any]]) -> None:
        result = collector.parse_records(flat_payload)
        assert [r.id for r in result] == ["r1", "r2", "r3"]

    def test_empty_list(self) -> None:
        assert collector.parse_records([]) == []

    def test_non_list_rejected(self) -> None:
        with pytest.raises(CollectorError, match="JSON array"):
            collector.parse_records({"records": []})

    def test_non_object_element_rejected(self) -> None:
        with pytest.raises(CollectorError, match="Invalid record list"):
            collector.parse_records([{"_id": "ok"}, "garbage"])


# ── build_headers ───────────────────────────────────────────────


class TestBuildHeaders:
    """Tests for build_headers()."""

    def test_configured_credential(self) -> None:
        headers = collector.build_headers(_config())
        assert headers["spec"] == "key123"

    def test_caller_credential_forwarded_verbatim(self) -> None:
        headers = collector.build_headers(_config(), credential="  Operator Key  ")
        assert headers["spec"] == "  Operator Key  "

    def test_custom_header_name(self) -> None:
        headers = collector.build_headers(_config(credential_header="x-access-key"))
        assert headers["x-access-key"] == "key123"
        assert "spec" not in headers

    def test_no_credential_no_header(self) -> None:
        headers = collector.build_headers(_config(credential=""))
        assert "spec" not in headers


# ── fetch_records ───────────────────────────────────────────────


class TestFetchRecords:
    """Tests for fetch_records()."""

    def test_success(self, flat_payload: list[dict[str, Any]]) -> None:
        session = _FakeSession(_FakeResponse(200, flat_payload))
        result = _fetch(_config(), session)
        assert len(result) == 3
        assert session.calls[0]["url"] == "https://collector.test/api/v1/data/"
        assert session.calls[0]["headers"]["spec"] == "key123"

    def test_uses_configured_timeout(self) -> None:
        session = _FakeSession(_FakeResponse(200, []))
        _fetch(_config(timeout_seconds=3), session)
        assert session.calls[0]["timeout"].total == 3

    def test_credential_override(self) -> None:
        session = _FakeSession(_FakeResponse(200, []))
        _fetch(_config(), session, credential="from-operator")
        assert session.calls[0]["headers"]["spec"] == "from-operator"

    def test_error_status(self) -> None:
        session = _FakeSession(_FakeResponse(401))
        with pytest.raises(CollectorError) as exc_info:
            _fetch(_config(), session)
        assert exc_info.value.status == 401

    def test_transport_error(self) -> None:
        session = _FakeSession(error=aiohttp.ClientConnectionError("refused"))
        with pytest.raises(CollectorError, match="refused"):
            _fetch(_config(), session)

    def test_timeout(self) -> None:
        session = _FakeSession(error=TimeoutError())
        with pytest.raises(CollectorError):
            _fetch(_config(), session)

    def test_invalid_json_body(self) -> None:
        session = _FakeSession(_FakeResponse(200, ValueError("Expecting value")))
        with pytest.raises(CollectorError, match="Expecting value"):
            _fetch(_config(), session)

    def test_non_array_body(self) -> None:
        session = _FakeSession(_FakeResponse(200, {"error": "nope"}))
        with pytest.raises(CollectorError, match="JSON array"):
            _fetch(_config(), session)

    def test_unconfigured(self) -> None:
        session = _FakeSession(_FakeResponse(200, []))
        with pytest.raises(CollectorError, match="not configured"):
            _fetch(_config(api_url=""), session)
        assert session.calls == []
