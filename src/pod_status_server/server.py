"""MCP server entry point and tool registration."""

from __future__ import annotations

import logging
import sys
import time

import structlog
from mcp.server.fastmcp import FastMCP

from pod_status_server.config import get_log_level, get_server_config
from pod_status_server.tools.pod_status import get_pod_status_handler, resolve_pod_status_handler


def configure_logging(level: str = "info") -> None:
    """Configure structlog for JSON (or console on a TTY) output to stderr."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


configure_logging(get_log_level())

log = structlog.get_logger()

mcp = FastMCP("Pod Status Server")


@mcp.tool()
async def get_pod_status(manifest: str, namespace: str | None = None, status_filter: str | None = None) -> str:
    """Resolve the STATUS column (as shown by kubectl get pods) for every pod in a manifest.

    Accepts the JSON or YAML output of `kubectl get pod -o json|yaml`, a single pod
    or a List. Returns per-pod status, phase, ready count and restarts, plus counts
    grouped by status. Use this to explain why pods show Init:0/1, CrashLoopBackOff,
    NotReady, Terminating, and similar labels.

    Args:
        manifest: Pod manifest text (JSON or YAML), single pod or List.
        namespace: Keep only pods in this namespace. Omit for all.
        status_filter: Keep only pods whose resolved status equals this label.
    """
    start = time.monotonic()
    try:
        result = get_pod_status_handler(manifest, namespace, status_filter)
        log.info(
            "tool_completed",
            tool="get_pod_status",
            pods=result.total_matching,
            latency_ms=_elapsed_ms(start),
        )
        return result.model_dump_json(indent=2)
    except Exception as e:
        log.error("tool_failed", tool="get_pod_status", error=str(e))
        raise RuntimeError(str(e)) from None


@mcp.tool()
async def resolve_pod_status(manifest: str) -> str:
    """Resolve the STATUS label of a single pod.

    Args:
        manifest: JSON or YAML of exactly one pod.
    """
    start = time.monotonic()
    try:
        row = resolve_pod_status_handler(manifest)
        log.info("tool_completed", tool="resolve_pod_status", status=row.status, latency_ms=_elapsed_ms(start))
        return row.model_dump_json(indent=2)
    except Exception as e:
        log.error("tool_failed", tool="resolve_pod_status", error=str(e))
        raise RuntimeError(str(e)) from None


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


if __name__ == "__main__":
    get_server_config()
    mcp.run(transport="stdio")
