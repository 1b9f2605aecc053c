"""Scene compositor — master-timeline frames to composed scene layers.

Scene *i* occupies ``[i * scene_duration, i * scene_duration +
scene_duration + transition_duration)``; consecutive scenes overlap by the
transition so one fades out while the next fades in. Every function here is
a pure function of its arguments, so frames can be computed in any order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .animation import resolve_element, resolve_style
from .animation.interpolate import interpolate_linear
from .animation.transform import format_number
from .config import get_config
from .models.frame import BackgroundImage, CompositeFrame, PlaceholderFrame, SceneLayer
from .models.storyboard import VideoResult, parse_video_result
from .types import AspectRatio

logger = logging.getLogger(__name__)

KEN_BURNS_ZOOM = 0.1
KEN_BURNS_TILT_DEG = 1.0


@dataclass(frozen=True)
class CompositionSettings:
    """Timing (in frames) and canvas sizing shared by every scene."""

    fps: int = 30
    scene_duration: int = 90
    transition_duration: int = 30
    base_edge: int = 1280
    square_edge: int = 1080

    @classmethod
    def from_config(cls) -> CompositionSettings:
        cfg = get_config()
        return cls(
            fps=cfg.fps,
            scene_duration=cfg.scene_duration_frames,
            transition_duration=cfg.transition_frames,
            base_edge=cfg.base_edge_px,
            square_edge=cfg.square_edge_px,
        )


def composition_length(scene_count: int, settings: CompositionSettings) -> int:
    """Total frames: every scene plus one trailing transition.

    With no scenes, one scene's worth of placeholder.
    """
    if scene_count <= 0:
        return settings.scene_duration
    return scene_count * settings.scene_duration + settings.transition_duration


def dimensions(
    aspect_ratio: AspectRatio,
    *,
    base_edge: int = 1280,
    square_edge: int = 1080,
) -> tuple[int, int]:
    """Pixel size for an aspect ratio: the long edge is *base_edge*, squares are fixed."""
    w, h = (int(part) for part in aspect_ratio.split(":"))
    if w > h:
        return base_edge, round(base_edge * h / w)
    if h > w:
        return round(base_edge * w / h), base_edge
    return square_edge, square_edge


def scene_window(index: int, settings: CompositionSettings) -> tuple[int, int]:
    """Half-open master-timeline window ``[start, end)`` of scene *index*."""
    start = index * settings.scene_duration
    return start, start + settings.scene_duration + settings.transition_duration


def active_scenes(frame: int, scene_count: int, settings: CompositionSettings) -> list[int]:
    """Indices of scenes visible at *frame*, in draw order."""
    visible = []
    for index in range(scene_count):
        start, end = scene_window(index, settings)
        if start <= frame < end:
            visible.append(index)
    return visible


def scene_opacity(
    local_frame: float,
    *,
    is_first: bool,
    is_last: bool,
    settings: CompositionSettings,
) -> float:
    """Crossfade opacity of a scene at a frame relative to its start.

    The first scene only fades out, the last only fades in, interior scenes
    take the minimum of both fades. A lone scene is always opaque.
    """
    if is_first and is_last:
        return 1.0
    d, t = settings.scene_duration, settings.transition_duration
    if t <= 0:
        return 1.0
    fade_in = interpolate_linear(local_frame, [(0, 0.0), (t, 1.0)])
    fade_out = interpolate_linear(local_frame, [(d, 1.0), (d + t, 0.0)])
    if is_first:
        return fade_out
    if is_last:
        return fade_in
    return min(fade_in, fade_out)


def ken_burns(local_frame: float, total_frames: int, index: int) -> str:
    """Slow zoom and tilt for background images.

    Progress is the scene-local frame over the whole composition length.
    Even scenes zoom in and tilt clockwise; odd scenes do the reverse.
    """
    progress = local_frame / total_frames if total_frames > 0 else 0.0
    if index % 2 == 0:
        scale = 1.0 + KEN_BURNS_ZOOM * progress
        rotate = -KEN_BURNS_TILT_DEG + 2 * KEN_BURNS_TILT_DEG * progress
    else:
        scale = 1.0 + KEN_BURNS_ZOOM - KEN_BURNS_ZOOM * progress
        rotate = KEN_BURNS_TILT_DEG - 2 * KEN_BURNS_TILT_DEG * progress
    return f"scale({format_number(scale)}) rotate({format_number(rotate)}deg)"


def _compose_scene(
    video: VideoResult,
    index: int,
    local_frame: int,
    total_frames: int,
    settings: CompositionSettings,
) -> SceneLayer:
    scene = video.scenes[index]
    duration = settings.scene_duration
    has_image = scene.image is not None and scene.image.available

    background_color = scene.background_color
    if not has_image and video.background_color:
        background_color = video.background_color

    background_image = None
    if has_image:
        background_image = BackgroundImage(
            uri=scene.image.uri,
            transform=ken_burns(local_frame, total_frames, index),
        )

    elements = []
    for element in scene.animation_elements:
        try:
            elements.append(
                resolve_element(element, local_frame, duration, text_color=video.text_color)
            )
        except Exception:
            logger.warning(
                "Element %r in scene %d failed to resolve, skipped", element.id, index, exc_info=True,
            )

    return SceneLayer(
        scene_index=index,
        local_frame=local_frame,
        opacity=scene_opacity(
            local_frame,
            is_first=index == 0,
            is_last=index == len(video.scenes) - 1,
            settings=settings,
        ),
        background_color=background_color or "transparent",
        background_image=background_image,
        camera_style=resolve_style(scene.camera_animation, local_frame, duration),
        elements=elements,
        narration=video.narration_for(index),
    )


def compose_frame(
    video: VideoResult,
    frame: int,
    settings: CompositionSettings | None = None,
) -> CompositeFrame | PlaceholderFrame:
    """Compose the master-timeline *frame*.

    Args:
        video: Validated storyboard.
        frame: Master-timeline frame, ``0 <= frame < composition_length``.
        settings: Timing and sizing; defaults to the live config.

    Returns:
        A PlaceholderFrame when the storyboard has no scenes, otherwise a
        CompositeFrame with one layer per active scene (later scenes on top).

    Raises:
        ValueError: If *frame* lies outside the composition.
    """
    settings = settings or CompositionSettings.from_config()
    total = composition_length(len(video.scenes), settings)
    if frame < 0 or frame >= total:
        raise ValueError(f"Frame {frame} out of range [0, {total})")
    width, height = dimensions(
        video.aspect_ratio,
        base_edge=settings.base_edge,
        square_edge=settings.square_edge,
    )

    if not video.scenes:
        return PlaceholderFrame(frame=frame, width=width, height=height)

    layers = []
    for index in active_scenes(frame, len(video.scenes), settings):
        start, _ = scene_window(index, settings)
        layers.append(_compose_scene(video, index, frame - start, total, settings))

    return CompositeFrame(
        frame=frame,
        width=width,
        height=height,
        background_color="transparent" if video.transparent_background else "black",
        layers=layers,
    )


def sample_timeline(
    video: VideoResult,
    settings: CompositionSettings | None = None,
    *,
    step: int = 1,
) -> list[dict]:
    """Scene opacities every *step* frames, for scrub bars and previews.

    Cheaper than :func:`compose_frame`: no element styles are resolved.
    """
    settings = settings or CompositionSettings.from_config()
    count = len(video.scenes)
    total = composition_length(count, settings)
    samples = []
    for frame in range(0, total, max(step, 1)):
        layers = []
        for index in active_scenes(frame, count, settings):
            start, _ = scene_window(index, settings)
            opacity = scene_opacity(
                frame - start,
                is_first=index == 0,
                is_last=index == count - 1,
                settings=settings,
            )
            layers.append({"scene_index": index, "opacity": round(opacity, 4)})
        samples.append({"frame": frame, "seconds": round(frame / settings.fps, 3), "layers": layers})
    return samples


class Composition:
    """A storyboard bound to its settings — what the playback host drives."""

    def __init__(
        self,
        video: VideoResult | dict | str,
        settings: CompositionSettings | None = None,
    ) -> None:
        self.video = parse_video_result(video)
        self.settings = settings or CompositionSettings.from_config()

    @property
    def fps(self) -> int:
        return self.settings.fps

    @property
    def duration_in_frames(self) -> int:
        return composition_length(len(self.video.scenes), self.settings)

    @property
    def size(self) -> tuple[int, int]:
        return dimensions(
            self.video.aspect_ratio,
            base_edge=self.settings.base_edge,
            square_edge=self.settings.square_edge,
        )

    @property
    def is_placeholder(self) -> bool:
        return not self.video.scenes

    def frame(self, frame: int) -> CompositeFrame | PlaceholderFrame:
        return compose_frame(self.video, frame, self.settings)
