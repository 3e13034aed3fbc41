"""Trace output sinks.

- FileSink: JSONL file output
- ConsoleSink: Formatted console output
- MemorySink: In-memory buffer for testing/analysis
- NullSink: Discards everything
"""

from pathlib import Path
from typing import IO, List, Optional, TextIO, Type, TypeVar
import sys
import threading

from facemood.observability.hub import Sink
from facemood.observability.records import (
    TraceRecord,
    ClassificationRecord,
    RuleOverrideRecord,
    AnalyzerFailureRecord,
    FrameSkipRecord,
    DetectorTimeoutRecord,
    StableEmotionRecord,
)

R = TypeVar("R", bound=TraceRecord)


class NullSink(Sink):
    """Sink that drops every record."""

    def write(self, record: TraceRecord) -> None:
        pass


class MemorySink(Sink):
    """Keeps records in memory.

    Args:
        max_records: Oldest records are dropped beyond this count (None = unbounded).
    """

    def __init__(self, max_records: Optional[int] = None):
        self._records: List[TraceRecord] = []
        self._max_records = max_records
        self._lock = threading.Lock()

    def write(self, record: TraceRecord) -> None:
        with self._lock:
            self._records.append(record)
            if self._max_records is not None and len(self._records) > self._max_records:
                del self._records[: len(self._records) - self._max_records]

    def get_records(self) -> List[TraceRecord]:
        with self._lock:
            return list(self._records)

    def get_records_of(self, record_cls: Type[R]) -> List[R]:
        return [r for r in self.get_records() if isinstance(r, record_cls)]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class FileSink(Sink):
    """Appends records as JSON lines to a file."""

    def __init__(self, path: str):
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file: Optional[IO[str]] = open(self._path, "a", encoding="utf-8")
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: TraceRecord) -> None:
        with self._lock:
            if self._file is None:
                return
            self._file.write(record.to_json() + "\n")

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class ConsoleSink(Sink):
    """Human-readable one-line output, optionally colorized."""

    COLORS = {
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "magenta": "\033[35m",
        "cyan": "\033[36m",
    }
    RESET = "\033[0m"

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self._stream = stream or sys.stderr
        if color is None:
            color = hasattr(self._stream, "isatty") and self._stream.isatty()
        self._color = color

    def _colorize(self, text: str, color: str) -> str:
        if not self._color:
            return text
        return f"{self.COLORS[color]}{text}{self.RESET}"

    def write(self, record: TraceRecord) -> None:
        line = self._format_record(record)
        if line is not None:
            self._stream.write(line + "\n")

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        # Never close the process streams.
        self.flush()

    def _format_record(self, record: TraceRecord) -> Optional[str]:
        if isinstance(record, ClassificationRecord):
            tag = self._colorize("[EMOTION]", "green")
            if not record.emotion:
                return f"{tag} no result ({record.face_count} faces)"
            return (
                f"{tag} {record.emotion} conf={record.confidence:.2f} "
                f"score={record.highest_score:.3f} by={record.decided_by} "
                f"({record.processing_ms:.1f}ms)"
            )
        elif isinstance(record, RuleOverrideRecord):
            tag = self._colorize("[RULE]", "cyan")
            suffix = " (fallback)" if record.fallback else ""
            return (
                f"{tag} {record.rule}: {record.previous_emotion} {record.previous_score:.3f} "
                f"-> {record.emotion} {record.score:.3f}{suffix}"
            )
        elif isinstance(record, AnalyzerFailureRecord):
            tag = self._colorize("[ANALYZER]", "yellow")
            return f"{tag} {record.analyzer} failed: {record.error}"
        elif isinstance(record, FrameSkipRecord):
            tag = self._colorize("[SKIP]", "blue")
            return f"{tag} {record.reason}"
        elif isinstance(record, DetectorTimeoutRecord):
            tag = self._colorize("[TIMEOUT]", "red")
            return f"{tag} detector exceeded {record.timeout_sec:.1f}s"
        elif isinstance(record, StableEmotionRecord):
            tag = self._colorize("[STABLE]", "magenta")
            old = record.old_emotion or "-"
            new = record.new_emotion or "-"
            return f"{tag} {old} -> {new} conf={record.confidence:.2f}"
        return None
