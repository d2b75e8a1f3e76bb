"""Core Trace - Stage timing for index builds and searches."""

from core.trace.trace_context import TraceContext

__all__ = ["TraceContext"]
