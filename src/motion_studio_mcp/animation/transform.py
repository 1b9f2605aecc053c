"""Transform algebra — compound CSS transform strings as named numeric channels.

``"translateX(10px) rotate(45deg) scale(1.2)"`` decomposes into three
independently animatable channels. Each channel carries one number and a
unit; multi-argument functions (``translate(10px, 20px)``, ``matrix(...)``)
are not channels and are dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.storyboard import Keyframe

logger = logging.getLogger(__name__)

_TERM_RE = re.compile(r"([A-Za-z][\w-]*)\(([^()]*)\)")
_ARG_RE = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([A-Za-z%]*)\s*$"
)


@dataclass(frozen=True)
class TransformValue:
    """One channel value, e.g. ``translateX(12.5px)`` -> ``(12.5, "px")``."""

    value: float
    unit: str = ""


@dataclass
class ChannelTrack:
    """Positions (in frames) and carried-forward values for one channel."""

    name: str
    unit: str
    stops: list[tuple[float, float]] = field(default_factory=list)


def parse_transform(text: Any) -> dict[str, TransformValue]:
    """Decompose a transform string into channels, in order of appearance.

    Malformed terms are dropped; absent or non-string input yields ``{}``.
    """
    channels: dict[str, TransformValue] = {}
    if not isinstance(text, str) or not text.strip():
        return channels
    for name, argument in _TERM_RE.findall(text):
        match = _ARG_RE.match(argument)
        if match is None:
            logger.debug("Dropping unparseable transform term %s(%s)", name, argument)
            continue
        channels[name] = TransformValue(float(match.group(1)), match.group(2))
    return channels


def format_number(value: float) -> str:
    """Render a channel value without trailing zeros (``50``, ``0.5``)."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def compose_transform(channels: Mapping[str, TransformValue]) -> str:
    """Serialise channels back to a transform string, preserving mapping order."""
    return " ".join(
        f"{name}({format_number(tv.value)}{tv.unit})" for name, tv in channels.items()
    )


def channel_default(name: str) -> TransformValue:
    """Identity value and unit for a channel no keyframe has defined yet."""
    value = 1.0 if "scale" in name else 0.0
    if "rotate" in name:
        unit = "deg"
    elif "translate" in name:
        unit = "px"
    else:
        unit = ""
    return TransformValue(value, unit)


def channel_tracks(keyframes: Sequence[Keyframe], duration: float) -> list[ChannelTrack]:
    """Build one track per channel across every keyframe of an element.

    Args:
        keyframes: All keyframes of the element, sorted by ``at``. Keyframes
            without a ``transform`` still contribute a stop so that omitted
            channels hold their value.
        duration: Scene duration in frames.

    Returns:
        Tracks in first-observed channel order. A channel's value carries
        forward from the last keyframe that set it, or is the identity
        default before any keyframe has. Its unit is the first non-empty unit
        written for it, else the default unit.
    """
    parsed = [(kf.at * duration, parse_transform(kf.style.get("transform"))) for kf in keyframes]

    names: list[str] = []
    for _, channels in parsed:
        for name in channels:
            if name not in names:
                names.append(name)

    tracks: list[ChannelTrack] = []
    for name in names:
        default = channel_default(name)
        unit: str | None = None
        last: float | None = None
        stops: list[tuple[float, float]] = []
        for position, channels in parsed:
            tv = channels.get(name)
            if tv is not None:
                last = tv.value
                if unit is None and tv.unit:
                    unit = tv.unit
            elif last is None:
                last = default.value
            stops.append((position, last))
        tracks.append(ChannelTrack(name, default.unit if unit is None else unit, stops))
    return tracks
