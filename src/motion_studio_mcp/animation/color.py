"""CSS color parsing and RGBA mixing."""

from __future__ import annotations

import colorsys
import re
from typing import NamedTuple

from .transform import format_number


class RGBA(NamedTuple):
    """Channels 0-255, alpha 0-1."""

    r: float
    g: float
    b: float
    a: float = 1.0


# Named colors the storyboard generator actually emits; the full CSS list is not needed.
NAMED_COLORS: dict[str, tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 128, 0),
    "lime": (0, 255, 0),
    "blue": (0, 0, 255),
    "yellow": (255, 255, 0),
    "cyan": (0, 255, 255),
    "aqua": (0, 255, 255),
    "magenta": (255, 0, 255),
    "fuchsia": (255, 0, 255),
    "silver": (192, 192, 192),
    "gray": (128, 128, 128),
    "grey": (128, 128, 128),
    "maroon": (128, 0, 0),
    "olive": (128, 128, 0),
    "purple": (128, 0, 128),
    "teal": (0, 128, 128),
    "navy": (0, 0, 128),
    "orange": (255, 165, 0),
    "pink": (255, 192, 203),
    "gold": (255, 215, 0),
    "indigo": (75, 0, 130),
    "violet": (238, 130, 238),
    "crimson": (220, 20, 60),
    "coral": (255, 127, 80),
    "turquoise": (64, 224, 208),
    "skyblue": (135, 206, 235),
    "darkblue": (0, 0, 139),
    "darkgray": (169, 169, 169),
    "darkgrey": (169, 169, 169),
    "lightgray": (211, 211, 211),
    "lightgrey": (211, 211, 211),
    "whitesmoke": (245, 245, 245),
}

_FUNC_RE = re.compile(r"^(rgba?|hsla?)\((.*)\)$")
_HEX_RE = re.compile(r"^#([0-9a-f]{3,4}|[0-9a-f]{6}|[0-9a-f]{8})$")


def _split_args(body: str) -> list[str]:
    """Split ``1, 2, 3`` / ``1 2 3 / 0.5`` into components."""
    body = body.replace("/", " ").replace(",", " ")
    return body.split()


def _channel(token: str) -> float:
    if token.endswith("%"):
        return float(token[:-1]) * 255.0 / 100.0
    return float(token)


def _alpha(token: str) -> float:
    if token.endswith("%"):
        return float(token[:-1]) / 100.0
    return float(token)


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _parse_hex(digits: str) -> RGBA:
    if len(digits) in (3, 4):
        digits = "".join(ch * 2 for ch in digits)
    r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
    a = int(digits[6:8], 16) / 255.0 if len(digits) == 8 else 1.0
    return RGBA(r, g, b, a)


def _parse_function(name: str, body: str) -> RGBA | None:
    parts = _split_args(body)
    if len(parts) not in (3, 4):
        return None
    try:
        alpha = _clamp(_alpha(parts[3]), 0.0, 1.0) if len(parts) == 4 else 1.0
        if name.startswith("rgb"):
            r, g, b = (_clamp(_channel(p), 0.0, 255.0) for p in parts[:3])
            return RGBA(r, g, b, alpha)
        hue = float(parts[0].removesuffix("deg")) % 360.0
        sat = _clamp(float(parts[1].rstrip("%")) / 100.0, 0.0, 1.0)
        light = _clamp(float(parts[2].rstrip("%")) / 100.0, 0.0, 1.0)
    except ValueError:
        return None
    r, g, b = colorsys.hls_to_rgb(hue / 360.0, light, sat)
    return RGBA(r * 255.0, g * 255.0, b * 255.0, alpha)


def parse_color(text: object) -> RGBA | None:
    """Parse a CSS color string; ``None`` when it is not a color this module knows."""
    if not isinstance(text, str):
        return None
    value = text.strip().lower()
    if value == "transparent":
        return RGBA(0, 0, 0, 0.0)
    match = _HEX_RE.match(value)
    if match:
        return _parse_hex(match.group(1))
    match = _FUNC_RE.match(value)
    if match:
        return _parse_function(match.group(1), match.group(2))
    if value in NAMED_COLORS:
        return RGBA(*NAMED_COLORS[value])
    return None


def mix_colors(start: RGBA, end: RGBA, t: float) -> RGBA:
    """Linear blend of two colors, channel by channel; *t* is clamped to [0, 1]."""
    t = _clamp(t, 0.0, 1.0)
    return RGBA(*(a + (b - a) * t for a, b in zip(start, end)))


def format_color(color: RGBA) -> str:
    """Render as ``rgba(r, g, b, a)`` with integer RGB channels."""
    r, g, b = (int(round(c)) for c in color[:3])
    return f"rgba({r}, {g}, {b}, {format_number(color.a)})"
