"""Shared CLI helpers."""

import sys

from facemood.config import EngineConfig


def load_config(args) -> EngineConfig:
    """Load the engine config named by ``--config`` (defaults otherwise).

    Exits with status 1 on a missing or invalid file.
    """
    path = getattr(args, "config", None)
    if not path:
        return EngineConfig()
    try:
        return EngineConfig.from_yaml(path)
    except FileNotFoundError:
        print(f"Error: config file not found: {path}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: invalid config {path}: {e}", file=sys.stderr)
        sys.exit(1)


def setup_observability(trace_level: str, trace_output: str = None):
    """Configure observability based on CLI arguments.

    Args:
        trace_level: Trace level string ("off", "minimal", "normal", "verbose").
        trace_output: Optional path to output JSONL file.

    Returns:
        Tuple of (hub, file_sink) for cleanup. file_sink may be None.
    """
    from facemood.observability import ObservabilityHub, TraceLevel, FileSink, ConsoleSink

    level = TraceLevel.from_string(trace_level or "off")
    hub = ObservabilityHub.get_instance()

    if level == TraceLevel.OFF:
        return hub, None

    sinks = [ConsoleSink()]

    file_sink = None
    if trace_output:
        file_sink = FileSink(trace_output)
        sinks.append(file_sink)

    hub.configure(level=level, sinks=sinks)
    print(f"Observability: level={trace_level}", end="", file=sys.stderr)
    if trace_output:
        print(f", output={trace_output}", file=sys.stderr)
    else:
        print(file=sys.stderr)

    return hub, file_sink
