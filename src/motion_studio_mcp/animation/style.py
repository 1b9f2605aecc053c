"""Style resolution — one fully resolved style per element (or camera) per frame."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.frame import ResolvedElement
from ..models.storyboard import (
    AnimationElement,
    ImageElement,
    Keyframe,
    ShapeElement,
    TextElement,
)
from ..types import StyleMap
from .interpolate import interpolate_property, sort_keyframes

logger = logging.getLogger(__name__)

CENTERING_TRANSFORM = "translate(-50%, -50%)"


def resolve_style(
    keyframes: Sequence[Keyframe] | None,
    frame: float,
    duration: float,
) -> StyleMap:
    """Resolve every animated property of one keyframe set at *frame*.

    Pure: the result depends only on the arguments. Properties no keyframe
    defines are absent. A property that fails to resolve is logged and
    left out; the others still resolve.
    """
    style: StyleMap = {}
    if not keyframes:
        return style

    ordered = sort_keyframes(keyframes)
    names: list[str] = []
    for kf in ordered:
        for name in kf.style:
            if name not in names:
                names.append(name)

    for name in names:
        try:
            value = interpolate_property(name, ordered, frame, duration, all_keyframes=ordered)
        except Exception:
            logger.warning("Could not resolve %r at frame %s, omitted", name, frame, exc_info=True)
            continue
        if value is not None:
            style[name] = value
    return style


def base_style(element: AnimationElement, *, text_color: str = "white") -> StyleMap:
    """Type-specific defaults the animated style is overlaid on."""
    style: StyleMap = {
        "position": "absolute",
        "display": "flex",
        "alignItems": "center",
        "justifyContent": "center",
        "top": "50%",
        "left": "50%",
        "transform": CENTERING_TRANSFORM,
    }
    if isinstance(element, ShapeElement) and element.shape == "circle":
        style["borderRadius"] = "50%"
    elif isinstance(element, TextElement):
        style.update({
            "textAlign": "center",
            "fontSize": "clamp(1rem, 5vw, 3.5rem)",
            "fontWeight": "700",
            "lineHeight": "1.2",
            "color": text_color,
        })
    elif isinstance(element, ImageElement):
        style["objectFit"] = "cover"
    return style


def merge_styles(base: StyleMap, animated: StyleMap) -> StyleMap:
    """Overlay *animated* on *base*; transforms concatenate, base first."""
    merged = {**base, **animated}
    if base.get("transform") and animated.get("transform"):
        merged["transform"] = f"{base['transform']} {animated['transform']}"
    return merged


def resolve_element(
    element: AnimationElement,
    frame: float,
    duration: float,
    *,
    text_color: str = "white",
) -> ResolvedElement:
    """Resolve one element into its render-ready form."""
    animated = resolve_style(element.keyframes, frame, duration)
    style = merge_styles(base_style(element, text_color=text_color), animated)
    return ResolvedElement(
        id=element.id,
        kind=element.type,
        style=style,
        text=element.text if isinstance(element, TextElement) else None,
        src=element.image.uri if isinstance(element, ImageElement) else None,
    )
