"""Storyboard models — the validated VideoResult document consumed by the renderer.

The generation pipeline emits loosely-typed JSON (camelCase from the player,
snake_case from the storyboard schema, nullable style fields). Everything is
normalised here, once, so the interpolation core only ever sees validated
data. Bad pieces are dropped or defaulted with a warning rather than failing
the whole document.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from ..errors import StoryboardError
from ..types import StyleValue

logger = logging.getLogger(__name__)

_ASPECT_RATIOS = ("16:9", "9:16", "1:1")


class Keyframe(BaseModel):
    """A partial style anchored at a fraction of the owning scene's duration."""

    model_config = ConfigDict(frozen=True)

    at: float = Field(description="Position as a fraction (0 to 1) of the scene duration")
    style: dict[str, StyleValue] = Field(default_factory=dict)

    @field_validator("at", mode="before")
    @classmethod
    def clamp_position(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("keyframe position must be a number")
        position = float(value)
        if not math.isfinite(position):
            raise ValueError("keyframe position must be finite")
        if position < 0.0 or position > 1.0:
            logger.warning("Keyframe position %s outside [0, 1], clamped", position)
            position = min(max(position, 0.0), 1.0)
        return position

    @field_validator("style", mode="before")
    @classmethod
    def drop_undefined(cls, value: Any) -> dict:
        if not isinstance(value, dict):
            return {}
        cleaned: dict[str, Any] = {}
        for key, val in value.items():
            if val is None or isinstance(val, bool):
                continue
            if isinstance(val, (str, int, float)):
                cleaned[str(key)] = val
            else:
                logger.debug("Dropping non-scalar style value for %r", key)
        return cleaned


def validate_keyframes(value: Any) -> list:
    """Validate keyframes one by one, dropping the ones that cannot be read."""
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Keyframes must be a list, got %s, ignored", type(value).__name__)
        return []
    keyframes: list[Keyframe] = []
    for i, item in enumerate(value):
        try:
            keyframes.append(Keyframe.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping keyframe %d: %s", i, exc.errors()[0]["msg"])
    return keyframes


class ImageResource(BaseModel):
    """An optional image attached to a scene or element.

    Generated images may fail; the failure is kept as ``failure_reason``
    instead of the field silently disappearing.
    """

    model_config = ConfigDict(frozen=True)

    uri: str | None = None
    prompt: str | None = None
    failure_reason: str | None = None

    @field_validator("uri", "prompt", "failure_reason", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def available(self) -> bool:
        return self.uri is not None

    @classmethod
    def failed(cls, reason: str, *, prompt: str | None = None) -> ImageResource:
        return cls(prompt=prompt, failure_reason=reason)


def _image_from_raw(data: dict, *uri_keys: str) -> ImageResource | None:
    """Build an ImageResource from the loose keys the generators emit."""
    image = data.get("image")
    if isinstance(image, (ImageResource, dict)):
        return ImageResource.model_validate(image)
    uri = next((data[k] for k in ("image", *uri_keys) if isinstance(data.get(k), str) and data[k].strip()), None)
    prompt = data.get("image_prompt") or data.get("imagePrompt")
    reason = data.get("image_error") or data.get("imageError")
    if uri is None and not prompt and not reason:
        return None
    if uri is None and prompt and not reason:
        reason = "image not generated"
    return ImageResource(uri=uri, prompt=prompt, failure_reason=reason)


class _ElementBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    keyframes: list[Keyframe] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def numeric_id_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("keyframes", mode="before")
    @classmethod
    def check_keyframes(cls, value: Any) -> list:
        return validate_keyframes(value)


class ShapeElement(_ElementBase):
    """A rectangle or circle primitive."""

    type: Literal["shape"] = "shape"
    shape: Literal["rectangle", "circle"] = "rectangle"

    @field_validator("shape", mode="before")
    @classmethod
    def default_shape(cls, value: Any) -> str:
        return value if value in ("rectangle", "circle") else "rectangle"


class TextElement(_ElementBase):
    """A text run."""

    type: Literal["text"] = "text"
    text: str = ""

    @field_validator("text", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)


class ImageElement(_ElementBase):
    """An image primitive backed by a generated or supplied resource."""

    type: Literal["image"] = "image"
    image: ImageResource = Field(default_factory=ImageResource)

    @model_validator(mode="before")
    @classmethod
    def collect_image(cls, data: Any) -> Any:
        if isinstance(data, dict) and not isinstance(data.get("image"), (ImageResource, dict)):
            data = dict(data)
            resource = _image_from_raw(data, "src", "imageUrl", "image_url")
            data["image"] = resource or ImageResource(failure_reason="no image source")
        return data


AnimationElement = Annotated[
    Union[ShapeElement, TextElement, ImageElement],
    Field(discriminator="type"),
]
_element_adapter: TypeAdapter = TypeAdapter(AnimationElement)


class Scene(BaseModel):
    """One fixed-length segment of the composition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    animation_elements: list[AnimationElement] = Field(
        default_factory=list,
        validation_alias=AliasChoices("animation_elements", "animationElements"),
    )
    camera_animation: list[Keyframe] | None = Field(
        default=None,
        validation_alias=AliasChoices("camera_animation", "cameraAnimation"),
    )
    image: ImageResource | None = None
    background_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("background_color", "backgroundColor"),
    )

    @model_validator(mode="before")
    @classmethod
    def collect_image(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["image"] = _image_from_raw(data, "imageUrl", "image_url")
        return data

    @field_validator("animation_elements", mode="before")
    @classmethod
    def validate_elements(cls, value: Any) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("animationElements must be a list, ignored")
            return []
        elements = []
        seen: set[str] = set()
        for i, item in enumerate(value):
            if isinstance(item, dict) and "type" not in item and "kind" in item:
                item = {**item, "type": item["kind"]}
            try:
                element = _element_adapter.validate_python(item)
            except ValidationError as exc:
                logger.warning("Dropping animation element %d: %s", i, exc.errors()[0]["msg"])
                continue
            if element.id in seen:
                logger.warning("Duplicate element id %r in scene", element.id)
            seen.add(element.id)
            elements.append(element)
        return elements

    @field_validator("camera_animation", mode="before")
    @classmethod
    def validate_camera(cls, value: Any) -> list | None:
        if value is None:
            return None
        return validate_keyframes(value)

    @field_validator("background_color", mode="before")
    @classmethod
    def blank_color_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class VideoResult(BaseModel):
    """Root artifact handed from the generation pipeline to the renderer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    scenes: list[Scene] = Field(default_factory=list)
    narration: list[str] | None = None
    aspect_ratio: Literal["16:9", "9:16", "1:1"] = Field(
        default="16:9",
        validation_alias=AliasChoices("aspect_ratio", "aspectRatio"),
    )
    text_color: str = Field(
        default="#FFFFFF",
        validation_alias=AliasChoices("text_color", "textColor"),
    )
    transparent_background: bool = Field(
        default=False,
        validation_alias=AliasChoices("transparent_background", "transparentBackground"),
    )
    background_color: str | None = Field(
        default=None,
        validation_alias=AliasChoices("background_color", "backgroundColor"),
    )

    @field_validator("scenes", mode="before")
    @classmethod
    def validate_scenes(cls, value: Any) -> list:
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("scenes must be a list, treating storyboard as empty")
            return []
        scenes = []
        for i, item in enumerate(value):
            try:
                scenes.append(Scene.model_validate(item))
            except ValidationError as exc:
                # Keep an empty slot so narration stays aligned with scene order.
                logger.warning("Scene %d is invalid, rendering it empty: %s", i, exc.errors()[0]["msg"])
                scenes.append(Scene())
        return scenes

    @field_validator("narration", mode="before")
    @classmethod
    def validate_narration(cls, value: Any) -> list[str] | None:
        if not isinstance(value, list):
            return None
        return ["" if line is None else str(line) for line in value]

    @field_validator("aspect_ratio", mode="before")
    @classmethod
    def default_aspect_ratio(cls, value: Any) -> str:
        if value in _ASPECT_RATIOS:
            return value
        if value is not None:
            logger.warning("Unknown aspect ratio %r, using 16:9", value)
        return "16:9"

    @field_validator("text_color", mode="before")
    @classmethod
    def default_text_color(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value
        return "#FFFFFF"

    @field_validator("transparent_background", mode="before")
    @classmethod
    def none_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("background_color", mode="before")
    @classmethod
    def blank_color_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def narration_for(self, index: int) -> str | None:
        """Return the narration line aligned with scene *index*, if any."""
        if not self.narration or index < 0 or index >= len(self.narration):
            return None
        return self.narration[index] or None

    def with_image(
        self,
        scene_index: int,
        resource: ImageResource,
        *,
        element_id: str | None = None,
    ) -> VideoResult:
        """Return a copy with one image backfilled after async generation.

        Targets the scene background unless *element_id* names an image
        element in that scene.
        """
        if scene_index < 0 or scene_index >= len(self.scenes):
            raise IndexError(f"Scene index {scene_index} out of range")
        scene = self.scenes[scene_index]
        if element_id is None:
            new_scene = scene.model_copy(update={"image": resource})
        else:
            elements = []
            found = False
            for element in scene.animation_elements:
                if element.id == element_id and isinstance(element, ImageElement):
                    element = element.model_copy(update={"image": resource})
                    found = True
                elements.append(element)
            if not found:
                raise KeyError(f"No image element {element_id!r} in scene {scene_index}")
            new_scene = scene.model_copy(update={"animation_elements": elements})
        scenes = list(self.scenes)
        scenes[scene_index] = new_scene
        return self.model_copy(update={"scenes": scenes})


def parse_video_result(raw: VideoResult | dict | str) -> VideoResult:
    """Validate an external storyboard document into a :class:`VideoResult`.

    Args:
        raw: A dict, a JSON string, or an already-validated VideoResult.

    Returns:
        The validated VideoResult. Missing or empty ``scenes`` is accepted.

    Raises:
        StoryboardError: If the input is not a JSON object.
    """
    if isinstance(raw, VideoResult):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoryboardError(f"Storyboard is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, dict):
        raise StoryboardError(
            f"Storyboard must be a JSON object, got {type(raw).__name__}"
        )
    try:
        return VideoResult.model_validate(raw)
    except ValidationError as exc:
        raise StoryboardError(f"Storyboard rejected: {exc.errors()[0]['msg']}") from exc
