"""Structured error handling — domain exceptions, error categories, and tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ValidationError


class StoryboardError(ValueError):
    """Raised when a storyboard document cannot be accepted at the render boundary."""


class GenerationError(RuntimeError):
    """Raised when the generation stream reports an error or ends without a result."""


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    STORYBOARD_INVALID = "STORYBOARD_INVALID"
    STORYBOARD_MISSING = "STORYBOARD_MISSING"
    FRAME_OUT_OF_RANGE = "FRAME_OUT_OF_RANGE"
    GENERATION_FAILED = "GENERATION_FAILED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    CONFIG_INVALID = "CONFIG_INVALID"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    s = str(error).lower()

    if isinstance(error, StoryboardError):
        return (
            ErrorCategory.STORYBOARD_INVALID,
            "Storyboard must be a JSON object with a 'scenes' list",
        )
    if isinstance(error, GenerationError):
        return (
            ErrorCategory.GENERATION_FAILED,
            "The storyboard generator reported a failure — try rephrasing the prompt",
        )
    if isinstance(error, FileNotFoundError):
        return (
            ErrorCategory.FILE_NOT_FOUND,
            "Storyboard file not found — check the path",
        )
    if isinstance(error, PermissionError):
        return (
            ErrorCategory.PERMISSION_DENIED,
            "Path is outside LOCAL_FILE_ACCESS_ROOT — move the file or widen the root",
        )
    if isinstance(error, ValidationError) or "must be >=" in s:
        return (
            ErrorCategory.CONFIG_INVALID,
            "Invalid parameter value — check the allowed ranges",
        )
    if "storyboard or file_path" in s:
        return (
            ErrorCategory.STORYBOARD_MISSING,
            "Provide exactly one of storyboard or file_path",
        )
    if "frame" in s and "range" in s:
        return (
            ErrorCategory.FRAME_OUT_OF_RANGE,
            "Frame must lie within the composition — see composition_info",
        )
    if "timeout" in s or "timed out" in s:
        return (
            ErrorCategory.GENERATION_FAILED,
            "Generation timed out — try again",
        )

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    retryable = cat == ErrorCategory.GENERATION_FAILED
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
    ).model_dump(mode="json")
