"""Fill unset render settings from ``~/.config/motion-studio-mcp/.env``.

MCP hosts often start the server with blank values, or with ``${MOTION_FPS}``
placeholders they never resolved. Both count as unset and are taken from the
file; a real value in the process environment always wins.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

DEFAULT_ENV_PATH = Path.home() / ".config" / "motion-studio-mcp" / ".env"

# Settings read by ServerConfig.from_env; anything else in the file is ignored.
SETTING_PREFIXES = ("MOTION_", "MLFLOW_", "LOCAL_FILE_ACCESS_ROOT")

_ASSIGNMENT_RE = re.compile(r"^\s*([A-Z][A-Z0-9_]*)\s*=\s*(.*?)\s*$")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _is_unset(key: str, value: str | None) -> bool:
    """Blank, ``$KEY``, ``${KEY}`` and ``${KEY:-default}`` count as unset."""
    if value is None:
        return True
    value = _unquote(value.strip()).strip()
    if not value:
        return True
    name = re.escape(key)
    return re.fullmatch(rf"\$(?:{name}|\{{{name}(?::-.*)?\}})", value) is not None


def read_settings(path: Path) -> dict[str, str]:
    """Render settings assigned in *path*; later lines override earlier ones."""
    if not path.is_file():
        return {}
    settings: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        match = _ASSIGNMENT_RE.match(line)
        if match and match.group(1).startswith(SETTING_PREFIXES):
            settings[match.group(1)] = _unquote(match.group(2))
    return settings


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Inject settings from *path* that the environment leaves unset.

    Returns:
        The settings that were injected.
    """
    injected = {
        key: value
        for key, value in read_settings(path or DEFAULT_ENV_PATH).items()
        if _is_unset(key, os.environ.get(key))
    }
    os.environ.update(injected)
    return injected
