"""Disambiguation rules for emotions the expression model cannot separate.

The expression model has no notion of confusion, stress or anxiety and
routinely mixes up contempt and anger. Each rule combines a gate on the
raw expression scores with a geometric check from one landmark analyzer.
Rules are plain data evaluated in a fixed order by the classifier; each one
may only replace the running winner when its score is strictly higher.

If the analyzer a rule needs fails, the rule falls back to a score-only
formula instead of dropping the evidence.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol, Sequence
import logging

from facemood.config import (
    AnxiousConfig,
    ConfusedConfig,
    ContemptAngerConfig,
    RuleConfig,
    StressedConfig,
)
from facemood.expressions import ExpressionScores
from facemood.landmarks.analyzers import LandmarkAnalyzers
from facemood.types import Emotion, RawDetection

logger = logging.getLogger(__name__)


def rebalance_contempt_anger(
    scores: ExpressionScores,
    detection: RawDetection,
    analyzers: LandmarkAnalyzers,
    config: Optional[ContemptAngerConfig] = None,
) -> ExpressionScores:
    """Boost contempt or anger when both are present.

    A one-sided mouth (asymmetry above threshold) favours contempt,
    otherwise anger. Scores are returned unchanged when the gate is not met
    or the mouth analyzer fails.
    """
    cfg = config or ContemptAngerConfig()
    contempt = scores.get(Emotion.CONTEMPT)
    angry = scores.get(Emotion.ANGRY)
    if not (contempt > cfg.min_contempt and angry > cfg.min_angry):
        return scores

    mouth = analyzers.run("mouth", detection)
    if not mouth.ok:
        return scores

    if mouth.value.mouth_asymmetry > cfg.asymmetry_threshold:
        logger.debug(
            f"Contempt/anger: asymmetry {mouth.value.mouth_asymmetry:.3f} favours contempt"
        )
        return scores.with_scaled(Emotion.CONTEMPT, cfg.contempt_boost)

    logger.debug(
        f"Contempt/anger: asymmetry {mouth.value.mouth_asymmetry:.3f} favours anger"
    )
    return scores.with_scaled(Emotion.ANGRY, cfg.anger_boost)


@dataclass(frozen=True)
class RuleOutcome:
    """Score proposed by a rule. ``fallback`` marks the score-only path."""

    emotion: Emotion
    score: float
    fallback: bool = False


class Rule(Protocol):
    name: str

    def evaluate(
        self,
        scores: ExpressionScores,
        detection: RawDetection,
        analyzers: LandmarkAnalyzers,
    ) -> Optional[RuleOutcome]:
        ...


def _weighted(
    scores: ExpressionScores,
    emotions: Sequence[Emotion],
    weights: Sequence[float],
    gain: float,
) -> float:
    return sum(w * scores.get(e) for e, w in zip(emotions, weights)) * gain


@dataclass(frozen=True)
class GeometricRule:
    """Gate on scores, confirm with one feature analyzer.

    Attributes:
        name: Rule identifier used in logs and traces.
        emotion: Emotion proposed when the rule fires.
        analyzer: Feature analyzer name (``eyebrow``, ``eye`` or ``mouth``).
        gate: Score precondition.
        check: Geometric confirmation on the analyzer's features.
        score: Rule score when the check passes.
        fallback_score: Rule score when the analyzer failed.
    """

    name: str
    emotion: Emotion
    analyzer: str
    gate: Callable[[ExpressionScores], bool]
    check: Callable[[Any], bool]
    score: Callable[[ExpressionScores], float]
    fallback_score: Callable[[ExpressionScores], float]

    def evaluate(
        self,
        scores: ExpressionScores,
        detection: RawDetection,
        analyzers: LandmarkAnalyzers,
    ) -> Optional[RuleOutcome]:
        if not self.gate(scores):
            return None

        features = analyzers.run(self.analyzer, detection)
        if not features.ok:
            return RuleOutcome(self.emotion, self.fallback_score(scores), fallback=True)

        if self.check(features.value):
            return RuleOutcome(self.emotion, self.score(scores))
        return None


def confused_rule(config: Optional[ConfusedConfig] = None) -> GeometricRule:
    """Surprise + neutral + fear with one brow raised reads as confusion."""
    cfg = config or ConfusedConfig()
    parts = (Emotion.SURPRISED, Emotion.NEUTRAL, Emotion.FEARFUL)
    return GeometricRule(
        name="confused",
        emotion=Emotion.CONFUSED,
        analyzer="eyebrow",
        gate=lambda s: (
            s.get(Emotion.SURPRISED) > cfg.min_surprised
            and s.get(Emotion.NEUTRAL) > cfg.min_neutral
            and s.get(Emotion.FEARFUL) > cfg.min_fearful
        ),
        check=lambda brows: brows.brow_asymmetry > cfg.brow_asymmetry_threshold,
        score=lambda s: _weighted(s, parts, cfg.weights, cfg.gain),
        fallback_score=lambda s: _weighted(s, parts, cfg.fallback_weights, cfg.fallback_gain),
    )


def stressed_rule(config: Optional[StressedConfig] = None) -> GeometricRule:
    """Anger + fear + sadness with a clenched jaw reads as stress."""
    cfg = config or StressedConfig()
    parts = (Emotion.ANGRY, Emotion.FEARFUL, Emotion.SAD)
    return GeometricRule(
        name="stressed",
        emotion=Emotion.STRESSED,
        analyzer="mouth",
        gate=lambda s: (
            s.get(Emotion.ANGRY) > cfg.min_angry
            and s.get(Emotion.FEARFUL) > cfg.min_fearful
            and s.get(Emotion.SAD) > cfg.min_sad
        ),
        check=lambda mouth: mouth.jaw_tension < cfg.jaw_tension_threshold,
        score=lambda s: _weighted(s, parts, cfg.weights, cfg.gain),
        fallback_score=lambda s: _weighted(s, parts, cfg.fallback_weights, cfg.fallback_gain),
    )


class AnxiousRule:
    """Anxiety from wide, darting eyes or a stretched mouth under fear.

    Paths, in order:
        1. Eyes wide open and at least one eye deviating from centre.
        2. Otherwise, enough fear and lips stretched beyond relaxed width.
        3. If the eye or mouth analyzer failed, strong fear (or fear plus
           surprise) alone.
    """

    name = "anxious"
    emotion = Emotion.ANXIOUS

    def __init__(self, config: Optional[AnxiousConfig] = None):
        self.config = config or AnxiousConfig()

    def evaluate(
        self,
        scores: ExpressionScores,
        detection: RawDetection,
        analyzers: LandmarkAnalyzers,
    ) -> Optional[RuleOutcome]:
        cfg = self.config
        fearful = scores.get(Emotion.FEARFUL)
        surprised = scores.get(Emotion.SURPRISED)
        fear_mix = cfg.weights[0] * fearful + cfg.weights[1] * surprised

        eyes = analyzers.run("eye", detection)
        if eyes.ok:
            e = eyes.value
            deviating = (
                e.left_eye_deviation > cfg.eye_deviation_threshold
                or e.right_eye_deviation > cfg.eye_deviation_threshold
            )
            if e.eye_openness > cfg.eye_openness_threshold and deviating:
                return RuleOutcome(self.emotion, fear_mix * cfg.gain)

        mouth_failed = False
        if fearful > cfg.secondary_min_fearful:
            mouth = analyzers.run("mouth", detection)
            if mouth.ok:
                if mouth.value.mouth_tension > cfg.mouth_tension_threshold:
                    return RuleOutcome(self.emotion, fearful * cfg.secondary_gain)
            else:
                mouth_failed = True

        if not eyes.ok or mouth_failed:
            strong_fear = fearful > cfg.fallback_min_fearful or (
                fearful > cfg.fallback_pair_min and surprised > cfg.fallback_pair_min
            )
            if strong_fear:
                return RuleOutcome(self.emotion, fear_mix * cfg.fallback_gain, fallback=True)

        return None

    def __repr__(self) -> str:
        return f"AnxiousRule({self.config!r})"


def default_rules(config: Optional[RuleConfig] = None) -> List[Rule]:
    """Confused, stressed and anxious rules in evaluation order."""
    cfg = config or RuleConfig()
    return [
        confused_rule(cfg.confused),
        stressed_rule(cfg.stressed),
        AnxiousRule(cfg.anxious),
    ]
