"""Which local storyboard files the render tools may read."""

from __future__ import annotations

from pathlib import Path

from .config import get_config


def storyboard_path(path_value: str) -> Path:
    """Resolve a ``file_path`` argument to a readable storyboard file.

    ``~`` is expanded and the path made absolute. When
    ``LOCAL_FILE_ACCESS_ROOT`` is configured the file must sit beneath it.

    Raises:
        PermissionError: The path escapes the access root.
        FileNotFoundError: No file exists at the path.
    """
    path = Path(path_value).expanduser().resolve()
    root_value = get_config().local_file_access_root
    if root_value:
        root = Path(root_value).expanduser().resolve()
        if not path.is_relative_to(root):
            raise PermissionError(
                f"Storyboard '{path}' is outside LOCAL_FILE_ACCESS_ROOT '{root}'"
            )
    if not path.is_file():
        raise FileNotFoundError(f"Storyboard file not found: {path_value}")
    return path
