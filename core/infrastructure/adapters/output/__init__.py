"""Output sink adapters."""
from .memory_output_sink import InMemoryOutputSink
from .stream_output_sink import StreamOutputSink

__all__ = ["InMemoryOutputSink", "StreamOutputSink"]
