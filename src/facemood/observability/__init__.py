"""Observability system for facemood.

Tracks, per classification call:
- Final results and which stage decided them
- Disambiguation rule overrides
- Landmark analyzer failures (and the fallbacks they triggered)
- Sampler skips, detector timeouts and stable emotion changes

Example:
    >>> from facemood.observability import ObservabilityHub, TraceLevel, FileSink
    >>> hub = ObservabilityHub.get_instance()
    >>> hub.configure(level=TraceLevel.NORMAL, sinks=[FileSink("/tmp/trace.jsonl")])
"""

from facemood.observability.hub import TraceLevel, Sink, ObservabilityHub
from facemood.observability.records import TraceRecord
from facemood.observability.sinks import FileSink, ConsoleSink, MemorySink, NullSink

__all__ = [
    "TraceLevel",
    "Sink",
    "ObservabilityHub",
    "TraceRecord",
    "FileSink",
    "ConsoleSink",
    "MemorySink",
    "NullSink",
]
