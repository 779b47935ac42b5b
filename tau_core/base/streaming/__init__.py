"""Streaming pipeline: SSE decoding, the decode worker and the consumer handle."""

from .chunk_stream import ChunkStream
from .event_stream import (
    DATA_PREFIX,
    END_OF_STREAM,
    iter_stream_chunks,
    run_decode_worker,
    strip_data_prefix,
)
from .metrics import StreamMetrics

__all__ = [
    "ChunkStream",
    "DATA_PREFIX",
    "END_OF_STREAM",
    "StreamMetrics",
    "iter_stream_chunks",
    "run_decode_worker",
    "strip_data_prefix",
]
