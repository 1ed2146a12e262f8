"""JSON parsing helpers for captured local-storage payloads.

Decoding is expressed as an explicit result (``JsonOk`` or
``JsonErr``) so callers can tell a clean decode apart from a
failure before collapsing both to a neutral value.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

_DOUBLED_BACKSLASH = "\\\\"


def _reject_constant(token: str) -> Any:
    # json.loads accepts NaN and Infinity, which strict JSON forbids.
    raise ValueError(f"non-standard JSON constant: {token}")


@dataclasses.dataclass(frozen=True)
class JsonOk:
    """A successfully decoded JSON value."""

    value: Any


@dataclasses.dataclass(frozen=True)
class JsonErr:
    """A failed decode with a human-readable reason."""

    reason: str


JsonResult = JsonOk | JsonErr


def looks_double_escaped(text: str) -> bool:
    """Return whether *text* contains a doubled backslash sequence."""
    return _DOUBLED_BACKSLASH in text


def collapse_double_escapes(text: str) -> str:
    """Remove every pair of consecutive backslashes from *text*.

    Some capture producers escape the JSON payload twice.
    This is a best-effort heuristic rather than an escape
    parser: a payload that legitimately contains a literal
    doubled backslash is corrupted by it.

    Args:
        text: Raw payload as received from the collector.

    Returns:
        The payload with each ``\\\\`` pair removed.
    """
    return text.replace(_DOUBLED_BACKSLASH, "")


def decode_json(text: str | None) -> JsonResult:
    """Decode *text* as JSON without raising.

    Args:
        text: JSON text, possibly empty or ``None``.

    Returns:
        ``JsonOk`` with the decoded value, or ``JsonErr``
        describing why decoding failed.
    """
    content = (text or "").strip()
    if not content:
        return JsonErr("empty payload")
    try:
        return JsonOk(json.loads(content, parse_constant=_reject_constant))
    except (json.JSONDecodeError, ValueError) as exc:
        return JsonErr(str(exc))
    except RecursionError:
        return JsonErr("payload nested too deeply")
