"""Frame descriptors handed to the host rendering engine.

One descriptor per requested master-timeline frame. Never persisted.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ..types import StyleValue


class ResolvedElement(BaseModel):
    """One element with its final style for the current frame."""

    id: str
    kind: Literal["shape", "text", "image"]
    style: dict[str, StyleValue] = Field(default_factory=dict)
    text: str | None = None
    src: str | None = None


class BackgroundImage(BaseModel):
    """A scene background image with its procedural pan/zoom transform."""

    uri: str
    transform: str
    overlay: str = Field(
        default="linear-gradient(to top, rgba(0,0,0,0.4) 0%, transparent 50%)",
        description="Darkening gradient drawn above the image, below the elements",
    )


class SceneLayer(BaseModel):
    """One active scene, drawn with its crossfade opacity."""

    scene_index: int = Field(ge=0)
    local_frame: int = Field(ge=0)
    opacity: float = Field(ge=0.0, le=1.0)
    background_color: str = "transparent"
    background_image: BackgroundImage | None = None
    camera_style: dict[str, StyleValue] = Field(default_factory=dict)
    elements: list[ResolvedElement] = Field(default_factory=list)
    narration: str | None = None


class CompositeFrame(BaseModel):
    """The composed frame: active scene layers in draw order (last on top)."""

    kind: Literal["composite"] = "composite"
    frame: int = Field(ge=0)
    width: int
    height: int
    background_color: str = "black"
    layers: list[SceneLayer] = Field(default_factory=list)


class PlaceholderFrame(BaseModel):
    """Rendered instead of a composite when the storyboard has no scenes."""

    kind: Literal["placeholder"] = "placeholder"
    frame: int = Field(ge=0)
    width: int
    height: int
    background_color: str = "black"
    text_color: str = "white"
    message: str = "Animation data is missing or invalid."
