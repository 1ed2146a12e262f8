"""Shared serialization helpers.

Provides the ``snake_to_camel`` alias generator used by the
Pydantic record models, and the pretty-printed JSON rendering
used for clipboard exports.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

import pydantic

CLIPBOARD_INDENT = 2


def snake_to_camel(name: str) -> str:
    """Convert a snake_case string to camelCase.

    Args:
        name: A snake_case identifier such as
            ``"local_data"``.

    Returns:
        The camelCase equivalent, e.g. ``"localData"``.
    """
    parts = name.split("_")
    return parts[0] + "".join(w.capitalize() for w in parts[1:])


def to_jsonable(value: Any) -> Any:
    """Dump Pydantic models (by alias) so the result is plain JSON data.

    Mappings and sequences are walked so that a list of
    models serialises the same way as a single model.
    """
    if isinstance(value, pydantic.BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [to_jsonable(v) for v in value]
    return value


def to_pretty_json(value: Any) -> str:
    """Render *value* as JSON with stable two-space indentation."""
    return json.dumps(to_jsonable(value), indent=CLIPBOARD_INDENT, ensure_ascii=False, allow_nan=False)
