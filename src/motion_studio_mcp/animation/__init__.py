"""Keyframe interpolation engine.

Public API:
    resolve_style() — one keyframe set resolved at a scene-relative frame.
    resolve_element() — an element's base style merged with its animation.
    interpolate_property() — a single property at a frame.
"""

from .interpolate import interpolate_property
from .style import base_style, merge_styles, resolve_element, resolve_style
from .transform import compose_transform, parse_transform

__all__ = [
    "base_style",
    "compose_transform",
    "interpolate_property",
    "merge_styles",
    "parse_transform",
    "resolve_element",
    "resolve_style",
]
