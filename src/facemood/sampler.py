"""Rate-limited frame sampling around a face detector.

EmotionSampler is driven by an external scheduler (a video callback or a
timer) calling ``tick(image)``. It runs at most one detection at a time,
bounds each detector call with a timeout, and drops results that belong to
a session that ended while they were being computed.

Architecture:
    tick(image) ──→ [single worker] backend.detect ──→ classify
                                                        │
                                 render_sink ←──────────┤
                                 stabilizer.accept ←────┘
"""

from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol
import logging
import threading
import time
import uuid

import numpy as np

from facemood.classifier import EmotionClassifier
from facemood.config import SamplerConfig
from facemood.observability.hub import ObservabilityHub
from facemood.observability.records import DetectorTimeoutRecord, FrameSkipRecord
from facemood.stabilizer import TemporalStabilizer
from facemood.types import ClassificationResult, RawDetection
from facemood.visualize import draw_detection, draw_no_face

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorOptions:
    """Options passed to the detection backend on every call."""

    input_size: int = 320
    score_threshold: float = 0.3

    @classmethod
    def from_config(cls, config: SamplerConfig) -> "DetectorOptions":
        return cls(input_size=config.input_size, score_threshold=config.score_threshold)


class DetectionBackend(Protocol):
    """Face detector returning expressions and 68-point landmarks per face."""

    def detect(self, image: np.ndarray, options: DetectorOptions) -> List[RawDetection]:
        ...


RenderSink = Callable[[np.ndarray], None]


class EmotionSampler:
    """Samples frames into the classifier and stabilizer.

    Args:
        backend: Face detection backend.
        classifier: Frame classifier (default: EmotionClassifier()).
        stabilizer: Temporal stabilizer (default: TemporalStabilizer()).
        config: Sampling settings (default: desktop preset).
        clock: Monotonic time source in seconds.
        render_sink: Optional callable receiving a debug overlay per sampled frame.

    Thread Safety:
        - ``tick`` may be called from any thread; concurrent calls are skipped
        - ``start_session``/``end_session`` may be called while a tick runs
    """

    def __init__(
        self,
        backend: DetectionBackend,
        classifier: Optional[EmotionClassifier] = None,
        stabilizer: Optional[TemporalStabilizer] = None,
        config: Optional[SamplerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        render_sink: Optional[RenderSink] = None,
    ):
        self._backend = backend
        self._classifier = classifier or EmotionClassifier()
        self._stabilizer = stabilizer or TemporalStabilizer()
        self._config = config or SamplerConfig()
        self._clock = clock
        self._render_sink = render_sink
        self._options = DetectorOptions.from_config(self._config)

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="facemood_detect_")
        self._lock = threading.Lock()
        self._busy = False
        self._pending: Optional[Future] = None
        self._last_run: Optional[float] = None
        self._session_id: Optional[str] = None

        # Stats
        self._frames_processed = 0
        self._skips: Dict[str, int] = {}
        self._timeouts = 0
        self._errors = 0

    @property
    def stabilizer(self) -> TemporalStabilizer:
        return self._stabilizer

    @property
    def options(self) -> DetectorOptions:
        return self._options

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def start_session(self) -> str:
        """Begin a new session; results of earlier sessions are discarded."""
        session_id = uuid.uuid4().hex
        with self._lock:
            self._session_id = session_id
        logger.info(f"Emotion session started: {session_id}")
        return session_id

    def end_session(self) -> None:
        with self._lock:
            ended, self._session_id = self._session_id, None
        if ended:
            logger.info(f"Emotion session ended: {ended}")

    def tick(self, image: Optional[np.ndarray]) -> Optional[ClassificationResult]:
        """Sample one frame if due.

        Returns:
            The frame's classification, or None when the tick was skipped,
            the detector failed or timed out, no face had a usable signal,
            or the session changed while the frame was processed.
        """
        now = self._clock()
        with self._lock:
            if self._last_run is not None and now - self._last_run < self._config.interval_sec:
                return self._skip("interval")
            if self._busy or (self._pending is not None and not self._pending.done()):
                return self._skip("busy")
            if image is None or np.asarray(image).size == 0:
                return self._skip("not_ready")
            self._busy = True
            self._last_run = now
            session_id = self._session_id

        try:
            return self._process(image, session_id)
        finally:
            with self._lock:
                self._busy = False

    def _process(
        self, image: np.ndarray, session_id: Optional[str]
    ) -> Optional[ClassificationResult]:
        future = self._executor.submit(self._backend.detect, image, self._options)
        self._pending = future
        try:
            detections = future.result(timeout=self._config.detect_timeout_sec)
        except TimeoutError:
            with self._lock:
                self._timeouts += 1
            logger.warning(
                f"Face detector timed out after {self._config.detect_timeout_sec:.1f}s"
            )
            hub = ObservabilityHub.get_instance()
            if hub.enabled:
                hub.emit(DetectorTimeoutRecord(timeout_sec=self._config.detect_timeout_sec))
            return None
        except Exception as e:
            logger.error(f"Face detector error: {e}")
            with self._lock:
                self._errors += 1
                return self._skip("detector_error")

        result = self._classifier.classify(detections)

        with self._lock:
            self._frames_processed += 1
            if session_id != self._session_id:
                return self._skip("stale_session")
            self._stabilizer.accept(result, session_id)

        self._render(image, detections, result)
        return result

    def _render(
        self,
        image: np.ndarray,
        detections: List[RawDetection],
        result: Optional[ClassificationResult],
    ) -> None:
        if self._render_sink is None:
            return
        try:
            if detections:
                frame = draw_detection(image, detections[0], result)
            else:
                frame = draw_no_face(image)
            self._render_sink(frame)
        except Exception as e:
            logger.warning(f"Render sink failed: {e}")

    def _skip(self, reason: str) -> None:
        # Caller holds self._lock
        self._skips[reason] = self._skips.get(reason, 0) + 1
        logger.debug(f"Frame skipped: {reason}")
        hub = ObservabilityHub.get_instance()
        if hub.enabled:
            hub.emit(FrameSkipRecord(reason=reason))
        return None

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "frames_processed": self._frames_processed,
                "skips": dict(self._skips),
                "timeouts": self._timeouts,
                "errors": self._errors,
            }

    def close(self) -> None:
        """Stop the detector worker without waiting for a hung call."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._pending = None

    def __enter__(self) -> "EmotionSampler":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
