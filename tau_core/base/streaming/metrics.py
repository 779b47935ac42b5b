"""Streaming metrics data structures.

Collected by the decode worker for a single stream, attached to the
``stream.end`` log event and exposed as ``ChunkStream.metrics``.
"""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for one streaming execution.

    Attributes:
        emitted: Chunks delivered to the consumer (error chunk included).
        skipped: Malformed payload lines dropped by the decoder.
        time_to_first_chunk_ms: Latency from worker start to the first
            delivered chunk; ``None`` when nothing was delivered.
        total_duration_ms: Worker lifetime; set when the worker exits.
    """

    emitted: int = 0
    skipped: int = 0
    time_to_first_chunk_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    _started: float = field(default_factory=time.perf_counter, repr=False)

    def record_emit(self) -> None:
        if self.emitted == 0:
            self.time_to_first_chunk_ms = (time.perf_counter() - self._started) * 1000.0
        self.emitted += 1

    def record_skip(self) -> None:
        self.skipped += 1

    def finish(self) -> None:
        if self.total_duration_ms is None:
            self.total_duration_ms = (time.perf_counter() - self._started) * 1000.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("_started", None)
        return data


__all__ = ["StreamMetrics"]
