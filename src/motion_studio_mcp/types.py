"""Shared type aliases and helpers for tool parameters and models."""

from __future__ import annotations

import json
from typing import Annotated, Literal, Union

from pydantic import Field


def coerce_json_param(value: str | dict | list | None, expected_type: type) -> dict | list | None:
    """Parse MCP JSON-RPC string params back to dict/list.

    MCP JSON-RPC transport may serialize dict/list params as JSON strings.
    Pydantic v2 rejects these — this helper coerces them back.

    Returns:
        Parsed value if coercion succeeded, original value otherwise.
    """
    if not isinstance(value, str):
        return value
    try:
        parsed = json.loads(value)
        if isinstance(parsed, expected_type):
            return parsed
    except (json.JSONDecodeError, TypeError):
        pass
    return value

# ── Literal enums ────────────────────────────────────────────────────────────

AspectRatio = Literal["16:9", "9:16", "1:1"]
ElementKind = Literal["shape", "text", "image"]
ShapeVariant = Literal["rectangle", "circle"]

# A resolved CSS-style value: numbers for numeric properties, strings otherwise.
StyleValue = Union[str, float]
StyleMap = dict[str, StyleValue]

# ── Annotated aliases ────────────────────────────────────────────────────────

StoryboardParam = Annotated[dict | str | None, Field(
    description="VideoResult storyboard as a JSON object (or JSON string)",
)]
StoryboardFilePath = Annotated[str | None, Field(
    description="Path to a local JSON file holding a VideoResult storyboard",
)]
FrameParam = Annotated[int, Field(ge=0, description="Master-timeline frame number")]
