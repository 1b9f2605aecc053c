"""Infrastructure tools — 2 tools on a FastMCP sub-server."""

from __future__ import annotations

from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .. import tracing
from ..config import get_config, update_config
from ..errors import make_tool_error
from ..tracing import tool_span

infra_server = FastMCP("infra")


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@tool_span("infra_configure")
async def infra_configure(
    fps: Annotated[int | None, Field(ge=1, le=240, description="Playback frame rate")] = None,
    scene_duration_frames: Annotated[int | None, Field(
        ge=1, description="Frames per scene before the crossfade",
    )] = None,
    transition_frames: Annotated[int | None, Field(
        ge=0, description="Crossfade overlap between consecutive scenes",
    )] = None,
) -> dict:
    """Reconfigure composition timing at runtime.

    Changes take effect immediately for all subsequent render calls.

    Args:
        fps: Frames per second.
        scene_duration_frames: Length of each scene in frames.
        transition_frames: Overlap between scenes; 0 disables crossfades.

    Returns:
        Dict with current_config.
    """
    try:
        overrides = {
            "fps": fps,
            "scene_duration_frames": scene_duration_frames,
            "transition_frames": transition_frames,
        }
        if any(v is not None for v in overrides.values()):
            cfg = update_config(**overrides)
        else:
            cfg = get_config()
        return {"current_config": cfg.model_dump()}
    except Exception as exc:
        return make_tool_error(exc)


@infra_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
@tool_span("infra_status")
async def infra_status() -> dict:
    """Report the active timing configuration and tracing state.

    Returns:
        Dict with timing, canvas sizes, the file access root, and whether
        MLflow tracing is active.
    """
    cfg = get_config()
    return {
        "timing": {
            "fps": cfg.fps,
            "scene_duration_frames": cfg.scene_duration_frames,
            "transition_frames": cfg.transition_frames,
            "scene_seconds": round(cfg.scene_duration_frames / cfg.fps, 3),
        },
        "canvas": {"base_edge_px": cfg.base_edge_px, "square_edge_px": cfg.square_edge_px},
        "local_file_access_root": cfg.local_file_access_root or None,
        "tracing": {
            "enabled": tracing.is_enabled(),
            "tracking_uri": cfg.mlflow_tracking_uri or None,
            "experiment": cfg.mlflow_experiment_name,
        },
    }
