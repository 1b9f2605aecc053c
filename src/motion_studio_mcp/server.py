"""Main FastMCP server — mounts all sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .tools.infra import infra_server
from .tools.render import render_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — configures and flushes tracing."""
    tracing.setup()
    yield {}
    tracing.shutdown()
    logger.info("Lifespan shutdown complete")


app = FastMCP(
    "motion-studio",
    instructions=(
        "Keyframe animation renderer: validate storyboards, inspect composition "
        "timing, and resolve any frame to scene layers with computed styles."
    ),
    lifespan=_lifespan,
)

app.mount(render_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``motion-studio-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
