"""Tests for scene scheduling, crossfades and frame composition."""

from __future__ import annotations

import pytest

from motion_studio_mcp.compositor import (
    Composition,
    CompositionSettings,
    active_scenes,
    compose_frame,
    composition_length,
    dimensions,
    ken_burns,
    sample_timeline,
    scene_opacity,
    scene_window,
)
from motion_studio_mcp.models.frame import CompositeFrame, PlaceholderFrame
from motion_studio_mcp.models.storyboard import parse_video_result


def _layer(frame, index):
    return next(layer for layer in frame.layers if layer.scene_index == index)


class TestTiming:
    def test_composition_length(self, settings):
        assert composition_length(3, settings) == 300
        assert composition_length(1, settings) == 120
        assert composition_length(0, settings) == 90

    def test_scene_windows_overlap_by_transition(self, settings):
        assert scene_window(0, settings) == (0, 120)
        assert scene_window(1, settings) == (90, 210)

    def test_active_scenes(self, settings):
        assert active_scenes(0, 3, settings) == [0]
        assert active_scenes(100, 3, settings) == [0, 1]
        assert active_scenes(120, 3, settings) == [1]
        assert active_scenes(299, 3, settings) == [2]

    @pytest.mark.parametrize(
        ("ratio", "size"),
        [("16:9", (1280, 720)), ("9:16", (720, 1280)), ("1:1", (1080, 1080))],
    )
    def test_dimensions(self, ratio, size):
        assert dimensions(ratio) == size


class TestSceneOpacity:
    def test_first_scene_holds_then_fades_out(self, settings):
        kw = {"is_first": True, "is_last": False, "settings": settings}
        assert scene_opacity(0, **kw) == 1.0
        assert scene_opacity(90, **kw) == 1.0
        assert scene_opacity(105, **kw) == 0.5
        assert scene_opacity(120, **kw) == 0.0

    def test_last_scene_fades_in_then_holds(self, settings):
        kw = {"is_first": False, "is_last": True, "settings": settings}
        assert scene_opacity(0, **kw) == 0.0
        assert scene_opacity(15, **kw) == 0.5
        assert scene_opacity(110, **kw) == 1.0

    def test_interior_scene_takes_minimum(self, settings):
        kw = {"is_first": False, "is_last": False, "settings": settings}
        assert scene_opacity(0, **kw) == 0.0
        assert scene_opacity(60, **kw) == 1.0
        assert scene_opacity(105, **kw) == 0.5

    def test_single_scene_is_opaque(self, settings):
        for frame in (0, 50, 119):
            assert scene_opacity(frame, is_first=True, is_last=True, settings=settings) == 1.0

    def test_zero_transition_is_opaque(self):
        settings = CompositionSettings(transition_duration=0)
        assert scene_opacity(0, is_first=False, is_last=True, settings=settings) == 1.0


class TestComposeFrame:
    def test_crossfade_is_symmetric(self, storyboard, settings):
        video = parse_video_result(storyboard)
        frame = compose_frame(video, 105, settings)
        assert [layer.scene_index for layer in frame.layers] == [0, 1]
        assert _layer(frame, 0).opacity == _layer(frame, 1).opacity == 0.5

    def test_boundary_follows_the_formula(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 90, settings)
        assert _layer(frame, 0).opacity == 1.0
        assert _layer(frame, 1).opacity == 0.0
        assert _layer(frame, 1).local_frame == 0

    def test_empty_storyboard_renders_placeholder(self, settings):
        frame = compose_frame(parse_video_result({"scenes": []}), 0, settings)
        assert isinstance(frame, PlaceholderFrame)
        assert frame.message == "Animation data is missing or invalid."
        assert (frame.width, frame.height) == (1280, 720)

    @pytest.mark.parametrize("frame", [-1, 300])
    def test_out_of_range(self, storyboard, settings, frame):
        with pytest.raises(ValueError, match="out of range"):
            compose_frame(parse_video_result(storyboard), frame, settings)

    def test_elements_are_resolved_in_scene_time(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 45, settings)
        (title,) = _layer(frame, 0).elements
        assert title.style["opacity"] == 0.5
        assert title.style["color"] == "#FFEEAA"
        assert title.text == "Hello"

    def test_transform_channels_in_second_scene(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 90 + 45, settings)
        (dot,) = _layer(frame, 1).elements
        assert dot.style["transform"] == "translate(-50%, -50%) translateX(50px) scale(1)"
        assert dot.style["borderRadius"] == "50%"

    def test_scene_background_and_narration(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 10, settings)
        layer = _layer(frame, 0)
        assert layer.background_color == "#112233"
        assert layer.background_image is None
        assert layer.narration == "First line"
        assert frame.background_color == "black"

    def test_background_image_gets_ken_burns(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 150, settings)
        layer = _layer(frame, 1)
        assert layer.background_image.uri == "https://example.com/bg.png"
        assert layer.background_image.transform == ken_burns(60, 300, 1)

    def test_video_background_overrides_only_imageless_scenes(self, storyboard, settings):
        storyboard["backgroundColor"] = "#abcdef"
        video = parse_video_result(storyboard)
        assert _layer(compose_frame(video, 10, settings), 0).background_color == "#abcdef"
        assert _layer(compose_frame(video, 150, settings), 1).background_color == "transparent"

    def test_transparent_background(self, storyboard, settings):
        storyboard["transparentBackground"] = True
        frame = compose_frame(parse_video_result(storyboard), 0, settings)
        assert frame.background_color == "transparent"

    def test_camera_style(self, storyboard, settings):
        frame = compose_frame(parse_video_result(storyboard), 180 + 45, settings)
        assert _layer(frame, 2).camera_style == {"transform": "scale(1.1)"}

    def test_square_composition(self, settings):
        frame = compose_frame(parse_video_result({"aspectRatio": "1:1", "scenes": [{}]}), 0, settings)
        assert isinstance(frame, CompositeFrame)
        assert (frame.width, frame.height) == (1080, 1080)

    def test_failing_element_is_skipped(self, storyboard, settings, monkeypatch):
        import motion_studio_mcp.compositor as comp_mod

        real = comp_mod.resolve_element

        def flaky(element, *args, **kwargs):
            if element.id == "title":
                raise RuntimeError("boom")
            return real(element, *args, **kwargs)

        monkeypatch.setattr(comp_mod, "resolve_element", flaky)
        frame = compose_frame(parse_video_result(storyboard), 10, settings)
        assert _layer(frame, 0).elements == []


class TestKenBurns:
    def test_even_scene_zooms_in(self):
        assert ken_burns(0, 300, 0) == "scale(1) rotate(-1deg)"
        assert ken_burns(300, 300, 0) == "scale(1.1) rotate(1deg)"

    def test_odd_scene_reverses(self):
        assert ken_burns(0, 300, 1) == "scale(1.1) rotate(1deg)"
        assert ken_burns(150, 300, 1) == "scale(1.05) rotate(0deg)"


class TestTimeline:
    def test_samples(self, storyboard, settings):
        samples = sample_timeline(parse_video_result(storyboard), settings, step=15)
        assert len(samples) == 20
        at_105 = next(s for s in samples if s["frame"] == 105)
        assert at_105["layers"] == [
            {"scene_index": 0, "opacity": 0.5},
            {"scene_index": 1, "opacity": 0.5},
        ]
        assert at_105["seconds"] == 3.5


class TestComposition:
    def test_properties(self, storyboard, settings):
        composition = Composition(storyboard, settings)
        assert composition.fps == 30
        assert composition.duration_in_frames == 300
        assert composition.size == (1280, 720)
        assert not composition.is_placeholder

    def test_frames_are_order_independent(self, storyboard, settings):
        composition = Composition(storyboard, settings)
        forward = [composition.frame(n) for n in (10, 105, 250)]
        backward = [composition.frame(n) for n in (250, 105, 10)]
        assert forward == list(reversed(backward))

    def test_reads_live_config(self, storyboard, clean_config, monkeypatch):
        monkeypatch.setenv("MOTION_SCENE_FRAMES", "60")
        composition = Composition(storyboard)
        assert composition.duration_in_frames == 3 * 60 + 30
