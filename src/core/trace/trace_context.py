"""Trace Context - Stage timing for index builds and searches.

A TraceContext is passed optionally through the pipeline; components
record one entry per stage with the data they want to expose.
"""

import time
import uuid
from typing import Any


class TraceContext:
    """Records named pipeline stages with elapsed time since creation."""

    def __init__(self, name: str = "pipeline") -> None:
        """Initialize trace context with a unique trace ID.

        Args:
            name: Label of the traced operation (e.g., "build_index", "search").
        """
        self._trace_id: str = uuid.uuid4().hex[:16]
        self._name = name
        self._started = time.perf_counter()
        self._stages: dict[str, dict[str, Any]] = {}

    @property
    def trace_id(self) -> str:
        return self._trace_id

    @property
    def name(self) -> str:
        return self._name

    def record_stage(self, stage_name: str, data: dict[str, Any] | None = None) -> None:
        """Record data for a stage, stamped with elapsed milliseconds.

        Recording the same stage twice keeps the latest data.
        """
        entry = dict(data or {})
        entry["elapsed_ms"] = (time.perf_counter() - self._started) * 1000.0
        self._stages[stage_name] = entry

    def get_stage(self, stage_name: str) -> dict[str, Any] | None:
        return self._stages.get(stage_name)

    def get_all_stages(self) -> dict[str, dict[str, Any]]:
        return dict(self._stages)

    def stage_names(self) -> list[str]:
        return list(self._stages)

    def __repr__(self) -> str:
        return f"TraceContext(name={self._name}, trace_id={self._trace_id}, stages={self.stage_names()})"
