"""Render configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``MOTION_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    fps: int = Field(default=30, description="Playback frame rate")
    scene_duration_frames: int = Field(default=90, description="Frames per scene before the crossfade")
    transition_frames: int = Field(default=30, description="Crossfade overlap between consecutive scenes")
    base_edge_px: int = Field(default=1280, description="Long edge for 16:9 and 9:16 compositions")
    square_edge_px: int = Field(default=1080, description="Edge length for 1:1 compositions")
    local_file_access_root: str = Field(default="")
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="motion-studio-mcp")

    @field_validator("fps", "scene_duration_frames", "base_edge_px", "square_edge_px")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Configuration values must be >= 1")
        return value

    @field_validator("transition_frames")
    @classmethod
    def validate_transition_frames(cls, value: int) -> int:
        if value < 0:
            raise ValueError("transition_frames must be >= 0")
        return value

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            fps=int(os.getenv("MOTION_FPS", "30")),
            scene_duration_frames=int(os.getenv("MOTION_SCENE_FRAMES", "90")),
            transition_frames=int(os.getenv("MOTION_TRANSITION_FRAMES", "30")),
            base_edge_px=int(os.getenv("MOTION_BASE_EDGE", "1280")),
            square_edge_px=int(os.getenv("MOTION_SQUARE_EDGE", "1080")),
            local_file_access_root=os.getenv("LOCAL_FILE_ACCESS_ROOT", ""),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("MOTION_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "motion-studio-mcp"),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/motion-studio-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = ServerConfig.from_env()
    return _config


def update_config(**overrides: object) -> ServerConfig:
    """Patch the live config (used by the ``infra_configure`` tool)."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = ServerConfig(**data)
    return _config


def reset_config() -> None:
    """Drop the singleton so the next ``get_config()`` re-reads the environment."""
    global _config
    _config = None
