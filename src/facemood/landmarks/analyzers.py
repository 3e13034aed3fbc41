"""Injectable bundle of landmark analyzers with uniform failure handling."""

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar
import logging

from facemood.config import EngineConfig
from facemood.landmarks.eye import eye_analysis
from facemood.landmarks.eyebrow import eyebrow_analysis
from facemood.landmarks.modifier import (
    EmotionProposal,
    analyze_advanced_emotions,
    analyze_facial_landmarks,
)
from facemood.landmarks.mouth import mouth_analysis
from facemood.observability.hub import ObservabilityHub
from facemood.observability.records import AnalyzerFailureRecord
from facemood.types import Emotion, RawDetection

logger = logging.getLogger(__name__)

V = TypeVar("V")

FEATURE_ANALYZERS = ("eyebrow", "eye", "mouth")


@dataclass(frozen=True)
class AnalyzerResult(Generic[V]):
    """Outcome of one analyzer call: a value or the exception it raised."""

    value: Optional[V] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or_else(self, fallback: Callable[[Exception], V]) -> V:
        if self.error is None:
            return self.value
        return fallback(self.error)


@dataclass
class LandmarkAnalyzers:
    """The analyzers used by the classifier and rules.

    Every field is a plain callable so tests (or alternative geometry
    models) can substitute any of them at construction time.

    Attributes:
        eyebrow: ``(landmarks, box) -> EyebrowFeatures``.
        eye: ``(landmarks, box) -> EyeFeatures``.
        mouth: ``(landmarks, box) -> MouthFeatures``.
        modifier: ``(detection, emotion) -> float`` in [0.5, 2.0].
        advanced: ``(detection, emotion, score) -> (Emotion, float)``.
    """

    eyebrow: Callable[..., Any] = eyebrow_analysis
    eye: Callable[..., Any] = eye_analysis
    mouth: Callable[..., Any] = mouth_analysis
    modifier: Callable[[RawDetection, Emotion], float] = analyze_facial_landmarks
    advanced: Callable[[RawDetection, Emotion, float], Any] = analyze_advanced_emotions

    @classmethod
    def from_config(cls, config: EngineConfig) -> "LandmarkAnalyzers":
        """Geometric analyzers tuned by the modifier and advanced sections."""
        return cls(
            modifier=partial(analyze_facial_landmarks, config=config.modifier),
            advanced=partial(analyze_advanced_emotions, config=config.advanced),
        )

    def run(self, name: str, detection: RawDetection) -> AnalyzerResult:
        """Run a feature analyzer (``eyebrow``, ``eye`` or ``mouth``) on a detection."""
        if name not in FEATURE_ANALYZERS:
            raise KeyError(f"Unknown landmark analyzer: {name}")
        fn = getattr(self, name)
        return self._call(name, fn, detection.landmarks, detection.box)

    def landmark_modifier(
        self, detection: RawDetection, emotion: Emotion
    ) -> AnalyzerResult:
        return self._call("modifier", self.modifier, detection, emotion)

    def advanced_analysis(
        self, detection: RawDetection, emotion: Emotion, score: float
    ) -> AnalyzerResult:
        result = self._call("advanced", self.advanced, detection, emotion, score)
        if result.ok:
            emotion_out, score_out = result.value
            return AnalyzerResult(EmotionProposal(Emotion(emotion_out), float(score_out)))
        return result

    def _call(self, name: str, fn: Callable[..., V], *args: Any) -> AnalyzerResult:
        try:
            return AnalyzerResult(value=fn(*args))
        except Exception as e:
            logger.warning(f"Landmark analyzer '{name}' failed: {e}")
            hub = ObservabilityHub.get_instance()
            if hub.enabled:
                hub.emit(AnalyzerFailureRecord(analyzer=name, error=str(e)))
            return AnalyzerResult(error=e)
