"""Trace levels, the sink interface and the global observability hub."""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, List, Optional
import logging
import threading

if TYPE_CHECKING:
    from facemood.observability.records import TraceRecord

logger = logging.getLogger(__name__)


class TraceLevel(IntEnum):
    """Amount of tracing detail.

    Levels:
        OFF: No tracing (production default).
        MINIMAL: Classification results and stable emotion changes.
        NORMAL: Plus analyzer failures and skipped frames.
        VERBOSE: Plus every rule override.
    """
    OFF = 0
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3

    @classmethod
    def from_string(cls, s: str) -> "TraceLevel":
        try:
            return cls[s.upper()]
        except KeyError:
            raise ValueError(
                f"Unknown trace level: {s}. "
                f"Valid levels: {', '.join(level.name.lower() for level in cls)}"
            ) from None


class Sink(ABC):
    """Destination for trace records."""

    @abstractmethod
    def write(self, record: "TraceRecord") -> None:
        ...

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.flush()


class ObservabilityHub:
    """Process-wide trace record dispatcher.

    Disabled (``TraceLevel.OFF``) until configured. Emitting never raises:
    a failing sink is logged and skipped, so tracing cannot change
    classification results.

    Example:
        >>> hub = ObservabilityHub.get_instance()
        >>> hub.configure(level=TraceLevel.NORMAL, sinks=[MemorySink()])
        >>> if hub.enabled:
        ...     hub.emit(ClassificationRecord(emotion="happy", confidence=0.9))
    """

    _instance: Optional["ObservabilityHub"] = None
    _instance_lock = threading.Lock()

    def __init__(self):
        self._level = TraceLevel.OFF
        self._sinks: List[Sink] = []
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> "ObservabilityHub":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Shut down and drop the singleton (used by tests)."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance.shutdown()
            cls._instance = None

    @property
    def level(self) -> TraceLevel:
        return self._level

    @property
    def enabled(self) -> bool:
        return self._level > TraceLevel.OFF

    def configure(
        self,
        level: TraceLevel = TraceLevel.NORMAL,
        sinks: Optional[List[Sink]] = None,
    ) -> None:
        """Set the trace level and optionally add sinks."""
        self._level = TraceLevel(level)
        if sinks:
            for sink in sinks:
                self.add_sink(sink)
        logger.debug(f"Observability configured: level={self._level.name}")

    def is_level_enabled(self, level: TraceLevel) -> bool:
        return level <= self._level

    def add_sink(self, sink: Sink) -> None:
        with self._lock:
            if sink not in self._sinks:
                self._sinks.append(sink)

    def remove_sink(self, sink: Sink) -> None:
        with self._lock:
            if sink in self._sinks:
                self._sinks.remove(sink)

    def emit(self, record: "TraceRecord") -> None:
        if not self.enabled or record.min_level > self._level:
            return
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink.write(record)
            except Exception as e:
                logger.warning(f"Trace sink {type(sink).__name__} failed: {e}")

    def flush(self) -> None:
        with self._lock:
            sinks = list(self._sinks)
        for sink in sinks:
            try:
                sink.flush()
            except Exception as e:
                logger.warning(f"Trace sink {type(sink).__name__} flush failed: {e}")

    def shutdown(self) -> None:
        """Close all sinks and disable tracing."""
        with self._lock:
            sinks = list(self._sinks)
            self._sinks.clear()
        for sink in sinks:
            try:
                sink.close()
            except Exception as e:
                logger.warning(f"Trace sink {type(sink).__name__} close failed: {e}")
        self._level = TraceLevel.OFF
