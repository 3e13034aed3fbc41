"""Temporal stabilization of per-frame classifications.

Per-frame results arrive a few times per second and are frequently None
(no face, no signal, skipped frame). The stabilizer holds the last accepted
result for a validity window so that consumers see a steady emotion
instead of flicker, and falls back to neutral once the window lapses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging
import threading
import time

from facemood.config import StabilizerConfig
from facemood.observability.hub import ObservabilityHub
from facemood.observability.records import StableEmotionRecord
from facemood.types import ClassificationResult, Emotion

logger = logging.getLogger(__name__)


class StabilizerState(str, Enum):
    EMPTY = "empty"
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class StableEmotion:
    """The currently held emotion and when it was accepted (clock seconds)."""

    emotion: Emotion
    confidence: float
    accepted_at: float
    session_id: Optional[str] = None


class TemporalStabilizer:
    """Holds the last accepted classification for a validity window.

    Any non-null result is applied immediately (last accepted wins). A null
    result never changes state. The held emotion expires once
    ``validity_window_sec`` has elapsed since it was accepted.

    Args:
        config: Stabilizer settings (default window: 5 s).
        clock: Monotonic time source in seconds (injectable for tests).

    Example:
        >>> stabilizer = TemporalStabilizer()
        >>> stabilizer.accept(classifier.classify(detections))
        >>> stabilizer.stable_emotion
        <Emotion.HAPPY: 'happy'>
    """

    def __init__(
        self,
        config: Optional[StabilizerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config or StabilizerConfig()
        self._clock = clock
        self._current: Optional[StableEmotion] = None
        self._lock = threading.Lock()

    @property
    def validity_window(self) -> float:
        return self._config.validity_window_sec

    def accept(
        self,
        result: Optional[ClassificationResult],
        session_id: Optional[str] = None,
    ) -> bool:
        """Apply a classification result.

        Returns:
            True if the result was applied, False for None.
        """
        if result is None:
            return False

        with self._lock:
            previous = self._live(self._current)
            self._current = StableEmotion(
                emotion=result.emotion,
                confidence=result.confidence,
                accepted_at=self._clock(),
                session_id=session_id,
            )

        old = previous.emotion if previous else None
        if old is not result.emotion:
            logger.debug(
                f"Stable emotion: {old.value if old else 'none'} -> {result.emotion.value}"
            )
            hub = ObservabilityHub.get_instance()
            if hub.enabled:
                hub.emit(StableEmotionRecord(
                    old_emotion=old.value if old else "",
                    new_emotion=result.emotion.value,
                    confidence=result.confidence,
                    session_id=session_id or "",
                ))
        return True

    @property
    def stable(self) -> Optional[StableEmotion]:
        """The held emotion, or None when empty or expired."""
        with self._lock:
            return self._live(self._current)

    @property
    def stable_emotion(self) -> Emotion:
        """The held emotion, or NEUTRAL when empty or expired."""
        current = self.stable
        return current.emotion if current else Emotion.NEUTRAL

    @property
    def state(self) -> StabilizerState:
        with self._lock:
            if self._current is None:
                return StabilizerState.EMPTY
            if self._live(self._current) is None:
                return StabilizerState.EXPIRED
            return StabilizerState.ACTIVE

    def reset(self) -> None:
        with self._lock:
            self._current = None

    def _live(self, current: Optional[StableEmotion]) -> Optional[StableEmotion]:
        if current is None:
            return None
        if self._clock() - current.accepted_at >= self.validity_window:
            return None
        return current
