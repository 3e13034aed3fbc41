"""68-point landmark geometry analysis.

Feature analyzers take ``(landmarks, box)`` and return frozen feature
dataclasses normalized by the face box. They raise ``LandmarkError`` on
degenerate geometry; ``LandmarkAnalyzers`` turns those failures into
``AnalyzerResult`` values for the classifier.
"""

from facemood.landmarks.base import LandmarkError, validate_geometry
from facemood.landmarks.eyebrow import EyebrowFeatures, eyebrow_analysis
from facemood.landmarks.eye import EyeFeatures, eye_analysis
from facemood.landmarks.mouth import MouthFeatures, mouth_analysis
from facemood.landmarks.modifier import (
    EmotionProposal,
    analyze_advanced_emotions,
    analyze_facial_landmarks,
)
from facemood.landmarks.analyzers import AnalyzerResult, LandmarkAnalyzers

__all__ = [
    "LandmarkError",
    "validate_geometry",
    "EyebrowFeatures",
    "eyebrow_analysis",
    "EyeFeatures",
    "eye_analysis",
    "MouthFeatures",
    "mouth_analysis",
    "EmotionProposal",
    "analyze_facial_landmarks",
    "analyze_advanced_emotions",
    "AnalyzerResult",
    "LandmarkAnalyzers",
]
