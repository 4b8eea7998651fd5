"""Rendering of captured request/response traces."""

from cf_harness.ops.platform_ops import PlatformOps

DEFAULT_TRACE_LINES = 5


def render_recent_trace(client: PlatformOps, n: int = DEFAULT_TRACE_LINES) -> str:
    """Drain the client's trace buffer and render its most recent ``n`` entries.

    Lines keep their chronological order. The buffer is empty afterward even
    when more than ``n`` entries were captured.
    """
    lines = [entry.format_line() for entry in client.drain_trace()]
    if n <= 0:
        return ""
    return "\n".join(lines[-n:])
