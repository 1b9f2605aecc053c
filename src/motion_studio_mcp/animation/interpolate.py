"""Per-property keyframe interpolation.

Positions are in frames on both sides: a keyframe sits at ``at * duration``
and is compared with the scene-relative frame. The strategy is chosen by the
property name, never by its value:

- numeric (``opacity``): piecewise linear, clamped to the first/last value
- color (``color``, ``backgroundColor``): RGBA linear, clamped
- ``transform``: each channel linear and clamped, then recomposed
- anything else: step — the latest keyframe at or before the frame

Keyframes sharing the same ``at`` resolve to the one that came last in the
input list.
"""

from __future__ import annotations

import logging
import math
import re
from bisect import bisect_right
from collections.abc import Sequence
from typing import Any, Literal, TypeVar

from ..models.storyboard import Keyframe
from ..types import StyleValue
from .color import format_color, mix_colors, parse_color
from .transform import TransformValue, channel_tracks, compose_transform

logger = logging.getLogger(__name__)

NUMERIC_PROPERTIES = frozenset({"opacity"})
COLOR_PROPERTIES = frozenset({"color", "backgroundColor"})
TRANSFORM_PROPERTY = "transform"
DEFAULT_NUMBER = 1.0

PropertyKind = Literal["numeric", "color", "transform", "step"]
T = TypeVar("T")

_LEADING_NUMBER_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def property_kind(name: str) -> PropertyKind:
    """Interpolation strategy for a property name."""
    if name in NUMERIC_PROPERTIES:
        return "numeric"
    if name in COLOR_PROPERTIES:
        return "color"
    if name == TRANSFORM_PROPERTY:
        return "transform"
    return "step"


def coerce_number(value: Any, default: float = DEFAULT_NUMBER) -> float:
    """Read a numeric style value leniently.

    Accepts numbers, numeric strings (``"0.4"``, ``"0.4 "``, ``"40%"``) and
    strings with a leading number; anything else gives *default*.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        match = _LEADING_NUMBER_RE.match(text)
        if match is None:
            return default
        number = float(match.group(0))
        if text[match.end():].strip() == "%":
            number /= 100.0
    else:
        return default
    return number if math.isfinite(number) else default


def sort_keyframes(keyframes: Sequence[Keyframe]) -> list[Keyframe]:
    """Stable sort by position; equal positions keep their input order."""
    return sorted(keyframes, key=lambda kf: kf.at)


def collapse_ties(stops: Sequence[tuple[float, T]]) -> list[tuple[float, T]]:
    """Keep only the last stop of each run of equal positions."""
    collapsed: list[tuple[float, T]] = []
    for position, value in stops:
        if collapsed and collapsed[-1][0] == position:
            collapsed[-1] = (position, value)
        else:
            collapsed.append((position, value))
    return collapsed


def _locate(frame: float, positions: Sequence[float]) -> tuple[int, float]:
    """Left stop index and fraction towards the next stop, clamped at both ends."""
    if frame <= positions[0]:
        return 0, 0.0
    if frame >= positions[-1]:
        return len(positions) - 1, 0.0
    i = bisect_right(positions, frame) - 1
    return i, (frame - positions[i]) / (positions[i + 1] - positions[i])


def interpolate_linear(frame: float, stops: Sequence[tuple[float, float]]) -> float:
    """Piecewise-linear value at *frame*; no extrapolation past the end stops."""
    stops = collapse_ties(stops)
    i, t = _locate(frame, [p for p, _ in stops])
    if t == 0.0:
        return stops[i][1]
    start, end = stops[i][1], stops[i + 1][1]
    return start + (end - start) * t


def interpolate_step(frame: float, stops: Sequence[tuple[float, T]]) -> T:
    """Value of the latest stop at or before *frame*; the first stop before it."""
    stops = collapse_ties(stops)
    value = stops[0][1]
    for position, candidate in stops:
        if frame >= position:
            value = candidate
    return value


def interpolate_color(frame: float, stops: Sequence[tuple[float, Any]]) -> str | None:
    """Blend colors in RGBA; ``None`` when any stop is not a parseable color."""
    parsed = [(position, parse_color(value)) for position, value in stops]
    if any(color is None for _, color in parsed):
        return None
    parsed = collapse_ties(parsed)
    i, t = _locate(frame, [p for p, _ in parsed])
    if t == 0.0:
        return format_color(parsed[i][1])
    return format_color(mix_colors(parsed[i][1], parsed[i + 1][1], t))


def interpolate_transform(
    frame: float,
    keyframes: Sequence[Keyframe],
    duration: float,
) -> str | None:
    """Interpolate every transform channel independently and recompose.

    Returns ``None`` when no keyframe holds a parseable channel.
    """
    tracks = channel_tracks(keyframes, duration)
    if not tracks:
        return None
    channels = {
        track.name: TransformValue(interpolate_linear(frame, track.stops), track.unit)
        for track in tracks
    }
    return compose_transform(channels)


def interpolate_property(
    name: str,
    keyframes: Sequence[Keyframe],
    frame: float,
    duration: float,
    *,
    all_keyframes: Sequence[Keyframe] | None = None,
) -> StyleValue | None:
    """Value of one property at a scene-relative frame.

    Args:
        name: Style property name; selects the interpolation strategy.
        keyframes: Keyframes to read the property from (any order; those not
            defining *name* are ignored).
        frame: Scene-relative frame.
        duration: Scene duration in frames.
        all_keyframes: Every keyframe of the owner. Transform channels are
            tracked across all of them, not only those defining ``transform``.
            Defaults to *keyframes*.

    Returns:
        The resolved value, or ``None`` when no keyframe defines the property.
    """
    ordered = sort_keyframes(keyframes)
    defining = [kf for kf in ordered if name in kf.style]
    if not defining:
        return None

    kind = property_kind(name)
    if len(defining) == 1:
        value = defining[0].style[name]
        return coerce_number(value) if kind == "numeric" else value

    stops = [(kf.at * duration, kf.style[name]) for kf in defining]

    if kind == "numeric":
        return interpolate_linear(frame, [(p, coerce_number(v)) for p, v in stops])

    if kind == "color":
        blended = interpolate_color(frame, stops)
        if blended is not None:
            return blended
        logger.debug("Unparseable color in %r keyframes, stepping instead", name)

    if kind == "transform":
        owner = sort_keyframes(all_keyframes) if all_keyframes is not None else ordered
        composed = interpolate_transform(frame, owner, duration)
        if composed is not None:
            return composed
        logger.debug("No animatable transform channels, stepping instead")

    return interpolate_step(frame, stops)
