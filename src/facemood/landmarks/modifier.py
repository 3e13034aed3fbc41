"""Expression/geometry consistency scoring.

``analyze_facial_landmarks`` scales a candidate emotion's score by how well
the face geometry agrees with it. ``analyze_advanced_emotions`` proposes a
complex emotion (depressed, anxious, confused) that a basic expression
hides when the geometry supports it.
"""

from typing import Callable, Dict, NamedTuple, Optional

import numpy as np

from facemood.config import AdvancedConfig, ModifierConfig
from facemood.landmarks.eye import EyeFeatures, eye_analysis
from facemood.landmarks.eyebrow import EyebrowFeatures, eyebrow_analysis
from facemood.landmarks.mouth import MouthFeatures, mouth_analysis
from facemood.types import Emotion, RawDetection

Evidence = Callable[[EyebrowFeatures, EyeFeatures, MouthFeatures, ModifierConfig], float]


class EmotionProposal(NamedTuple):
    emotion: Emotion
    score: float


def _frown(mouth: MouthFeatures, cfg: ModifierConfig) -> float:
    return (cfg.baseline_corner_lift - mouth.corner_lift) / 0.02


def _knitted_brows(brows: EyebrowFeatures, cfg: ModifierConfig) -> float:
    return (cfg.baseline_brow_furrow - brows.brow_furrow) / 0.05


# Signed evidence per emotion; 0 means "geometry is neutral about it".
_EVIDENCE: Dict[Emotion, Evidence] = {
    Emotion.HAPPY: lambda b, e, m, c: -_frown(m, c),
    Emotion.SAD: lambda b, e, m, c: _frown(m, c),
    Emotion.SURPRISED: lambda b, e, m, c: (
        (b.brow_raise - c.baseline_brow_raise) / 0.03
        + (m.mouth_openness - c.baseline_mouth_openness) / 0.05
    ),
    Emotion.FEARFUL: lambda b, e, m, c: (
        (e.eye_openness - c.baseline_eye_openness) / 0.02 + m.mouth_tension / 0.02
    ),
    Emotion.ANGRY: lambda b, e, m, c: (
        _knitted_brows(b, c) + (c.baseline_jaw_gap - m.jaw_tension) / 0.02
    ),
    Emotion.DISGUSTED: lambda b, e, m, c: 0.5 * _frown(m, c) + 0.5 * _knitted_brows(b, c),
    Emotion.CONTEMPT: lambda b, e, m, c: (m.mouth_asymmetry - 0.02) / 0.02,
    Emotion.NEUTRAL: lambda b, e, m, c: -0.5 * (
        b.brow_asymmetry / 0.04 + m.mouth_asymmetry / 0.02
    ),
}


def analyze_facial_landmarks(
    detection: RawDetection,
    emotion: Emotion,
    config: Optional[ModifierConfig] = None,
) -> float:
    """Score multiplier for ``emotion`` given the face geometry.

    The result lies in [min_modifier, max_modifier] (default [0.5, 2.0]).
    Emotions without a geometric signature get 1.0.

    Raises:
        LandmarkError: If any feature cannot be computed.
    """
    cfg = config or ModifierConfig()
    evidence_fn = _EVIDENCE.get(emotion)
    if evidence_fn is None:
        return 1.0

    brows = eyebrow_analysis(detection.landmarks, detection.box)
    eyes = eye_analysis(detection.landmarks, detection.box)
    mouth = mouth_analysis(detection.landmarks, detection.box)

    evidence = float(np.clip(
        evidence_fn(brows, eyes, mouth, cfg), cfg.min_evidence, cfg.max_evidence
    ))
    return float(np.clip(1.0 + cfg.slope * evidence, cfg.min_modifier, cfg.max_modifier))


def analyze_advanced_emotions(
    detection: RawDetection,
    emotion: Emotion,
    score: float,
    config: Optional[AdvancedConfig] = None,
) -> EmotionProposal:
    """Propose a complex emotion for a winning candidate.

    Returns the candidate unchanged when no pattern applies.

    Raises:
        LandmarkError: If a required feature cannot be computed.
    """
    cfg = config or AdvancedConfig()

    if emotion is Emotion.SAD:
        eyes = eye_analysis(detection.landmarks, detection.box)
        mouth = mouth_analysis(detection.landmarks, detection.box)
        if eyes.eye_openness < cfg.depressed_max_eye_openness and mouth.corner_lift < 0:
            return EmotionProposal(Emotion.DEPRESSED, score * cfg.depressed_gain)

    elif emotion is Emotion.FEARFUL:
        eyes = eye_analysis(detection.landmarks, detection.box)
        deviation = max(eyes.left_eye_deviation, eyes.right_eye_deviation)
        if (
            eyes.eye_openness > cfg.anxious_min_eye_openness
            and deviation > cfg.anxious_min_deviation
        ):
            return EmotionProposal(Emotion.ANXIOUS, score * cfg.anxious_gain)

    elif emotion is Emotion.NEUTRAL:
        brows = eyebrow_analysis(detection.landmarks, detection.box)
        if brows.brow_asymmetry > cfg.confused_min_brow_asymmetry:
            return EmotionProposal(Emotion.CONFUSED, score * cfg.confused_gain)

    return EmotionProposal(emotion, score)
