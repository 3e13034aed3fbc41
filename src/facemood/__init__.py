"""facemood - Facial emotion classification from expressions and landmarks.

Quick Start:
    >>> from facemood import EmotionClassifier, RawDetection
    >>> classifier = EmotionClassifier()
    >>> result = classifier.classify([RawDetection.from_dict(data)])
    >>> if result is not None:
    ...     print(result.emotion.value, f"{result.confidence:.2f}")

Stabilized over time:
    >>> from facemood import TemporalStabilizer
    >>> stabilizer = TemporalStabilizer()
    >>> stabilizer.accept(result)
    >>> stabilizer.stable_emotion

Live sampling:
    >>> from facemood import EmotionSampler
    >>> sampler = EmotionSampler(backend=my_detector)
    >>> session = sampler.start_session()
    >>> sampler.tick(frame)  # call from a video callback or timer
"""

__version__ = "0.1.0"

from facemood.types import (
    BoundingBox,
    ClassificationResult,
    DetectionFormatError,
    Emotion,
    RawDetection,
)
from facemood.config import (
    AdvancedConfig,
    EngineConfig,
    ModifierConfig,
    RuleConfig,
    SamplerConfig,
    ScoringConfig,
    StabilizerConfig,
)
from facemood.expressions import EmotionScoreAdjuster, ExpressionScores, normalize_expressions
from facemood.landmarks import AnalyzerResult, LandmarkAnalyzers, LandmarkError
from facemood.classifier import EmotionClassifier
from facemood.stabilizer import StableEmotion, StabilizerState, TemporalStabilizer
from facemood.sampler import DetectionBackend, DetectorOptions, EmotionSampler

__all__ = [
    "__version__",
    # Types
    "BoundingBox",
    "ClassificationResult",
    "DetectionFormatError",
    "Emotion",
    "RawDetection",
    # Configuration
    "AdvancedConfig",
    "EngineConfig",
    "ModifierConfig",
    "RuleConfig",
    "SamplerConfig",
    "ScoringConfig",
    "StabilizerConfig",
    # Scoring
    "EmotionScoreAdjuster",
    "ExpressionScores",
    "normalize_expressions",
    "AnalyzerResult",
    "LandmarkAnalyzers",
    "LandmarkError",
    "EmotionClassifier",
    # Temporal
    "StableEmotion",
    "StabilizerState",
    "TemporalStabilizer",
    "DetectionBackend",
    "DetectorOptions",
    "EmotionSampler",
]
