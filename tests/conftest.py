"""Shared test fixtures for motion-studio-mcp."""

from __future__ import annotations

from typing import Any

import pytest

from motion_studio_mcp.compositor import CompositionSettings


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


@pytest.fixture(autouse=True, scope="session")
def _unwrap_fastmcp_tools():
    """Patch tool modules so FunctionTool objects become directly callable."""
    import importlib
    import pkgutil

    import motion_studio_mcp.tools as tools_pkg

    modules = [
        importlib.import_module(info.name)
        for info in pkgutil.walk_packages(tools_pkg.__path__, tools_pkg.__name__ + ".")
    ]
    for mod in modules:
        for name in list(vars(mod)):
            obj = getattr(mod, name, None)
            if obj is not None and hasattr(obj, "fn") and not callable(obj):
                setattr(mod, name, obj.fn)


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests to avoid real tracking-server calls.

    The ``test_tracing.py`` module patches the tracing module directly
    and does not rely on this fixture.
    """
    monkeypatch.setenv("MOTION_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/motion-studio-mcp/.env."""
    monkeypatch.setattr(
        "motion_studio_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import motion_studio_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def settings() -> CompositionSettings:
    """Default timing: 30 fps, 90-frame scenes, 30-frame crossfades."""
    return CompositionSettings()


def make_scene(*elements: dict, **fields: Any) -> dict:
    """Raw scene dict in the camelCase shape the player receives."""
    return {"animationElements": list(elements), **fields}


@pytest.fixture()
def storyboard() -> dict:
    """A three-scene storyboard touching every element kind."""
    return {
        "aspectRatio": "16:9",
        "textColor": "#FFEEAA",
        "narration": ["First line", "Second line", "Third line"],
        "scenes": [
            make_scene(
                {
                    "id": "title",
                    "type": "text",
                    "text": "Hello",
                    "keyframes": [
                        {"at": 0.2, "style": {"opacity": 0}},
                        {"at": 0.8, "style": {"opacity": 1}},
                    ],
                },
                backgroundColor="#112233",
            ),
            make_scene(
                {
                    "id": "dot",
                    "type": "shape",
                    "shape": "circle",
                    "keyframes": [
                        {"at": 0, "style": {"transform": "translateX(0px) scale(1)"}},
                        {"at": 1, "style": {"transform": "translateX(100px)"}},
                    ],
                },
                imageUrl="https://example.com/bg.png",
            ),
            make_scene(
                {"id": "photo", "type": "image", "src": "https://example.com/photo.png"},
                cameraAnimation=[
                    {"at": 0, "style": {"transform": "scale(1)"}},
                    {"at": 1, "style": {"transform": "scale(1.2)"}},
                ],
            ),
        ],
    }
