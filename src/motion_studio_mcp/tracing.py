"""Optional MLflow spans for the render and infra tools.

``tool_span()`` records each call of an MCP tool as a ``TOOL`` span. When
``mlflow-tracing`` is not installed, or tracing is switched off, the tool is
returned untouched. ``setup()`` and ``shutdown()`` run in the server lifespan.

Tracing is on once ``MLFLOW_TRACKING_URI`` is set, unless
``MOTION_TRACING_ENABLED=false``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

try:
    import mlflow

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False

ToolFn = TypeVar("ToolFn", bound=Callable)


def is_enabled() -> bool:
    """True when mlflow-tracing is importable and the config turns tracing on."""
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def tool_span(name: str) -> Callable[[ToolFn], ToolFn]:
    """Wrap a tool so every call becomes a span named *name*.

    Decided once, at decoration time.
    """

    def decorate(tool: ToolFn) -> ToolFn:
        if not is_enabled():
            return tool
        return mlflow.trace(tool, name=name, span_type="TOOL")

    return decorate


def setup() -> None:
    """Point MLflow at the configured tracking server and experiment.

    Failures are logged, never raised; the server starts without spans.
    """
    if not is_enabled():
        return
    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
    except Exception:
        logger.warning("MLflow setup failed, tools will run without spans", exc_info=True)
        return
    logger.info(
        "Recording tool spans to %s (experiment %s)",
        cfg.mlflow_tracking_uri,
        cfg.mlflow_experiment_name,
    )


def shutdown() -> None:
    """Flush spans still queued for async logging."""
    if not is_enabled():
        return
    try:
        mlflow.flush_trace_async_logging()
    except Exception:
        logger.warning("Flushing tool spans failed", exc_info=True)
