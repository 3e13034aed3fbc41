"""Trace record data classes.

Record Categories:
- Classification records: per-frame results and rule overrides
- Analyzer records: landmark analyzer failures
- Sampler records: skipped frames and detector timeouts
- Stabilizer records: stable emotion changes
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict
import json
import time

from facemood.observability.hub import TraceLevel


@dataclass
class TraceRecord:
    """Base trace record. ``min_level`` is internal and not serialized."""
    record_type: str = "trace"
    timestamp_ns: int = field(default_factory=time.time_ns)
    min_level: TraceLevel = field(default=TraceLevel.NORMAL, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("min_level", None)
        return {k: v.value if isinstance(v, Enum) else v for k, v in data.items()}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


# =============================================================================
# Classification Records
# =============================================================================


@dataclass
class ClassificationRecord(TraceRecord):
    """Result of one ``classify`` call.

    ``emotion`` is empty when the call produced no result.
    """
    record_type: str = field(default="classification", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    face_count: int = 0
    usable_faces: int = 0
    emotion: str = ""
    confidence: float = 0.0
    highest_score: float = 0.0
    decided_by: str = ""  # "scoring", "advanced", or a rule name
    processing_ms: float = 0.0


@dataclass
class RuleOverrideRecord(TraceRecord):
    """A disambiguation rule or advanced analysis replaced the running winner."""
    record_type: str = field(default="rule_override", init=False)
    min_level: TraceLevel = field(default=TraceLevel.VERBOSE, repr=False)

    rule: str = ""
    emotion: str = ""
    score: float = 0.0
    previous_emotion: str = ""
    previous_score: float = 0.0
    fallback: bool = False


# =============================================================================
# Analyzer Records
# =============================================================================


@dataclass
class AnalyzerFailureRecord(TraceRecord):
    """A landmark analyzer raised; the caller used its fallback."""
    record_type: str = field(default="analyzer_failure", init=False)

    analyzer: str = ""
    error: str = ""


# =============================================================================
# Sampler / Stabilizer Records
# =============================================================================


@dataclass
class FrameSkipRecord(TraceRecord):
    """A sampler tick was skipped."""
    record_type: str = field(default="frame_skip", init=False)

    reason: str = ""  # "interval", "busy", "not_ready", "stale_session", "detector_error"


@dataclass
class DetectorTimeoutRecord(TraceRecord):
    """The face detector did not answer within its timeout."""
    record_type: str = field(default="detector_timeout", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    timeout_sec: float = 0.0


@dataclass
class StableEmotionRecord(TraceRecord):
    """The externally observed stable emotion changed."""
    record_type: str = field(default="stable_emotion", init=False)
    min_level: TraceLevel = field(default=TraceLevel.MINIMAL, repr=False)

    old_emotion: str = ""
    new_emotion: str = ""
    confidence: float = 0.0
    session_id: str = ""
