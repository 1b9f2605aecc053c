"""Tests for style resolution and base-style merging."""

from __future__ import annotations

from unittest.mock import patch

from motion_studio_mcp.animation.interpolate import interpolate_property
from motion_studio_mcp.animation.style import (
    CENTERING_TRANSFORM,
    base_style,
    merge_styles,
    resolve_element,
    resolve_style,
)
from motion_studio_mcp.models.storyboard import (
    ImageElement,
    Keyframe,
    ShapeElement,
    TextElement,
)


def _keyframes():
    return [
        Keyframe(at=0.0, style={"opacity": 0, "transform": "translateX(0px)", "width": "10px"}),
        Keyframe(at=1.0, style={"opacity": 1, "transform": "translateX(90px)", "color": "#ffffff"}),
    ]


class TestResolveStyle:
    def test_repeated_calls_are_identical(self):
        keyframes = _keyframes()
        first = resolve_style(keyframes, 33, 90)
        for _ in range(5):
            assert resolve_style(keyframes, 33, 90) == first

    def test_union_of_properties(self):
        style = resolve_style(_keyframes(), 45, 90)
        assert style == {
            "opacity": 0.5,
            "transform": "translateX(45px)",
            "width": "10px",
            "color": "#ffffff",
        }

    def test_empty_or_missing_keyframes(self):
        assert resolve_style([], 10, 90) == {}
        assert resolve_style(None, 10, 90) == {}

    def test_failing_property_is_omitted(self):
        keyframes = _keyframes()

        def flaky(name, *args, **kwargs):
            if name == "width":
                raise RuntimeError("boom")
            return interpolate_property(name, *args, **kwargs)

        with patch("motion_studio_mcp.animation.style.interpolate_property", side_effect=flaky):
            style = resolve_style(keyframes, 45, 90)
        assert "width" not in style
        assert style["opacity"] == 0.5


class TestBaseStyle:
    def test_elements_are_centred(self):
        style = base_style(ShapeElement(id="r"))
        assert style["position"] == "absolute"
        assert style["top"] == style["left"] == "50%"
        assert style["transform"] == CENTERING_TRANSFORM
        assert "borderRadius" not in style

    def test_circle_gets_full_radius(self):
        assert base_style(ShapeElement(id="c", shape="circle"))["borderRadius"] == "50%"

    def test_text_uses_video_text_color(self):
        style = base_style(TextElement(id="t", text="hi"), text_color="#FFEEAA")
        assert style["color"] == "#FFEEAA"
        assert style["textAlign"] == "center"

    def test_image_covers(self):
        element = ImageElement(id="i", src="https://example.com/a.png")
        assert base_style(element)["objectFit"] == "cover"


class TestMergeStyles:
    def test_transforms_concatenate_base_first(self):
        merged = merge_styles({"transform": "translate(-50%, -50%)"}, {"transform": "scale(2)"})
        assert merged["transform"] == "translate(-50%, -50%) scale(2)"

    def test_animated_overrides_other_properties(self):
        merged = merge_styles({"color": "white", "top": "50%"}, {"color": "red"})
        assert merged == {"color": "red", "top": "50%"}

    def test_base_transform_kept_without_animation(self):
        merged = merge_styles({"transform": "translate(-50%, -50%)"}, {"opacity": 0.5})
        assert merged["transform"] == "translate(-50%, -50%)"


class TestResolveElement:
    def test_text_element(self):
        element = TextElement(
            id="t",
            text="Hello",
            keyframes=[{"at": 0, "style": {"transform": "scale(1)"}}],
        )
        resolved = resolve_element(element, 0, 90, text_color="#123456")
        assert resolved.kind == "text"
        assert resolved.text == "Hello"
        assert resolved.src is None
        assert resolved.style["transform"] == f"{CENTERING_TRANSFORM} scale(1)"
        assert resolved.style["color"] == "#123456"

    def test_image_element_exposes_src(self):
        element = ImageElement(id="i", src="https://example.com/a.png")
        resolved = resolve_element(element, 0, 90)
        assert resolved.kind == "image"
        assert resolved.src == "https://example.com/a.png"

    def test_image_element_without_source(self):
        element = ImageElement(id="i")
        assert element.image.failure_reason == "no image source"
        assert resolve_element(element, 0, 90).src is None
