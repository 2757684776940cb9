"""Tracing bootstrap and helpers to correlate logs with traces."""

from .tracing import current_trace_id, init_tracing

__all__ = ["current_trace_id", "init_tracing"]
