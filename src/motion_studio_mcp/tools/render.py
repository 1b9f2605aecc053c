"""Render tools — 5 tools on a FastMCP sub-server.

All tools are read-only and deterministic: the same storyboard and frame
always produce the same output.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..animation import resolve_style
from ..compositor import (
    Composition,
    CompositionSettings,
    compose_frame,
    sample_timeline,
    scene_window,
)
from ..errors import make_tool_error
from ..local_path_policy import storyboard_path
from ..models.storyboard import ImageElement, VideoResult, parse_video_result, validate_keyframes
from ..tracing import tool_span
from ..types import FrameParam, StoryboardFilePath, StoryboardParam, coerce_json_param

logger = logging.getLogger(__name__)
render_server = FastMCP("render")

_READ_ONLY = ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=False,
)


def _load_storyboard(storyboard: dict | str | None, file_path: str | None) -> VideoResult:
    """Resolve the storyboard from exactly one of an inline document or a file."""
    if storyboard is not None and file_path:
        raise ValueError("Ambiguous input: pass storyboard or file_path, not both")
    if file_path:
        path = storyboard_path(file_path)
        logger.debug("Loading storyboard from %s", path)
        return parse_video_result(path.read_text(encoding="utf-8"))
    if storyboard is None:
        raise ValueError("Missing input: pass storyboard or file_path")
    return parse_video_result(coerce_json_param(storyboard, dict))


@render_server.tool(annotations=_READ_ONLY)
@tool_span("storyboard_validate")
async def storyboard_validate(
    storyboard: StoryboardParam = None,
    file_path: StoryboardFilePath = None,
) -> dict:
    """Validate a storyboard and return its normalised form.

    Unknown fields are ignored, null style values removed, and elements or
    keyframes that cannot be read are dropped.

    Args:
        storyboard: VideoResult document (dict or JSON string).
        file_path: Local JSON file holding the document instead.

    Returns:
        Dict with counts, image availability and the normalised storyboard.
    """
    try:
        video = _load_storyboard(storyboard, file_path)
    except Exception as exc:
        return make_tool_error(exc)

    images = [s.image for s in video.scenes if s.image is not None]
    images += [
        el.image
        for s in video.scenes
        for el in s.animation_elements
        if isinstance(el, ImageElement)
    ]
    return {
        "valid": True,
        "scene_count": len(video.scenes),
        "element_count": sum(len(s.animation_elements) for s in video.scenes),
        "images": {
            "available": sum(1 for img in images if img.available),
            "failed": [img.failure_reason for img in images if not img.available],
        },
        "storyboard": video.model_dump(mode="json"),
    }


@render_server.tool(annotations=_READ_ONLY)
@tool_span("composition_info")
async def composition_info(
    storyboard: StoryboardParam = None,
    file_path: StoryboardFilePath = None,
) -> dict:
    """Report the composition's length, frame rate, size and scene windows.

    Args:
        storyboard: VideoResult document (dict or JSON string).
        file_path: Local JSON file holding the document instead.

    Returns:
        Dict with fps, duration_in_frames, duration_seconds, width, height,
        scene windows, and whether the placeholder frame will be shown.
    """
    try:
        composition = Composition(_load_storyboard(storyboard, file_path))
    except Exception as exc:
        return make_tool_error(exc)

    settings = composition.settings
    width, height = composition.size
    return {
        "fps": composition.fps,
        "duration_in_frames": composition.duration_in_frames,
        "duration_seconds": round(composition.duration_in_frames / composition.fps, 3),
        "width": width,
        "height": height,
        "aspect_ratio": composition.video.aspect_ratio,
        "scene_count": len(composition.video.scenes),
        "scene_windows": [
            list(scene_window(i, settings)) for i in range(len(composition.video.scenes))
        ],
        "placeholder": composition.is_placeholder,
        "transparent_background": composition.video.transparent_background,
    }


@render_server.tool(annotations=_READ_ONLY)
@tool_span("render_frame")
async def render_frame(
    frame: FrameParam,
    storyboard: StoryboardParam = None,
    file_path: StoryboardFilePath = None,
) -> dict:
    """Compose one master-timeline frame.

    Args:
        frame: Frame number, 0 <= frame < duration_in_frames.
        storyboard: VideoResult document (dict or JSON string).
        file_path: Local JSON file holding the document instead.

    Returns:
        The composite frame (scene layers with resolved element styles in
        draw order) or the placeholder frame for an empty storyboard.
    """
    try:
        video = _load_storyboard(storyboard, file_path)
        result = compose_frame(video, frame, CompositionSettings.from_config())
    except Exception as exc:
        return make_tool_error(exc)
    return result.model_dump(mode="json")


@render_server.tool(annotations=_READ_ONLY)
@tool_span("render_element_style")
async def render_element_style(
    keyframes: Annotated[list | str, Field(
        description="Keyframe list: [{'at': 0..1, 'style': {...}}, ...]",
    )],
    frame: Annotated[float, Field(ge=0, description="Scene-relative frame")],
    scene_duration: Annotated[int | None, Field(
        ge=1, description="Scene duration in frames (defaults to the configured value)",
    )] = None,
) -> dict:
    """Resolve one keyframe set (an element or a camera) at a scene-relative frame.

    Args:
        keyframes: Keyframes of one element or camera.
        frame: Frame within the scene.
        scene_duration: Scene length in frames.

    Returns:
        Dict with the resolved ``style`` and the keyframe count that was used.
    """
    try:
        parsed = validate_keyframes(coerce_json_param(keyframes, list))
        duration = scene_duration or CompositionSettings.from_config().scene_duration
        style = resolve_style(parsed, frame, duration)
    except Exception as exc:
        return make_tool_error(exc)
    return {"style": style, "keyframes_used": len(parsed), "scene_duration": duration}


@render_server.tool(annotations=_READ_ONLY)
@tool_span("render_timeline")
async def render_timeline(
    storyboard: StoryboardParam = None,
    file_path: StoryboardFilePath = None,
    step: Annotated[int, Field(ge=1, le=600, description="Sample every N frames")] = 15,
) -> dict:
    """Sample scene crossfade opacities across the whole composition.

    Args:
        storyboard: VideoResult document (dict or JSON string).
        file_path: Local JSON file holding the document instead.
        step: Sampling interval in frames.

    Returns:
        Dict with duration_in_frames and one sample per step listing the
        visible scenes and their opacity.
    """
    try:
        composition = Composition(_load_storyboard(storyboard, file_path))
        samples = sample_timeline(composition.video, composition.settings, step=step)
    except Exception as exc:
        return make_tool_error(exc)
    return {
        "duration_in_frames": composition.duration_in_frames,
        "fps": composition.fps,
        "samples": samples,
    }
