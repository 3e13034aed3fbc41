"""Per-frame emotion classification.

EmotionClassifier turns the detections of one frame into a single
ClassificationResult:

1. Noise-filter each detection's expression scores.
2. Rebalance contempt vs. anger using mouth asymmetry.
3. Score every expression (boost table, global gain, landmark modifier,
   primary-emotion boost) and keep the running maximum, seeded at the
   initial threshold. A new maximum may be replaced by a complex emotion
   from the advanced landmark analysis.
4. Let the confused/stressed/anxious rules override the maximum.
5. Scale the winning score into a confidence capped at 0.98.
"""

from typing import List, Optional, Sequence
import logging
import time

from facemood.config import EngineConfig
from facemood.expressions import EmotionScoreAdjuster, normalize_expressions
from facemood.landmarks.analyzers import LandmarkAnalyzers
from facemood.observability.hub import ObservabilityHub, TraceLevel
from facemood.observability.records import ClassificationRecord, RuleOverrideRecord
from facemood.rules import Rule, default_rules, rebalance_contempt_anger
from facemood.types import ClassificationResult, Emotion, RawDetection

logger = logging.getLogger(__name__)


class EmotionClassifier:
    """Classifies a frame's detections into one emotion.

    Stateless between calls: the same detections always give the same result.

    Args:
        config: Engine configuration (scoring, rule, modifier and advanced sections).
        analyzers: Landmark analyzer bundle (default: the geometric analyzers
            tuned by ``config``).
        rules: Ordered override rules (default: confused, stressed, anxious).

    Example:
        >>> classifier = EmotionClassifier()
        >>> result = classifier.classify([detection])
        >>> if result is not None:
        ...     print(result.emotion, result.confidence)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        analyzers: Optional[LandmarkAnalyzers] = None,
        rules: Optional[Sequence[Rule]] = None,
    ):
        self._config = config or EngineConfig()
        self._analyzers = analyzers or LandmarkAnalyzers.from_config(self._config)
        self._rules: List[Rule] = (
            list(rules) if rules is not None else default_rules(self._config.rules)
        )
        self._adjuster = EmotionScoreAdjuster(self._config.scoring)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def rules(self) -> List[Rule]:
        return list(self._rules)

    def classify(
        self, detections: Sequence[RawDetection]
    ) -> Optional[ClassificationResult]:
        """Classify one frame.

        Returns:
            The result, or None when the list is empty or no detection has a
            usable expression signal.
        """
        start = time.perf_counter()
        scoring = self._config.scoring

        best = Emotion.NEUTRAL
        highest = scoring.initial_threshold
        decided_by = "threshold"
        usable = 0

        for detection in detections:
            scores = normalize_expressions(
                detection.expressions, scoring.noise_floor, scoring.emotion_mapping
            )
            if scores is None:
                logger.debug("Skipping detection without usable expressions")
                continue
            usable += 1

            scores = rebalance_contempt_anger(
                scores, detection, self._analyzers, self._config.rules.contempt_anger
            )
            total = scores.total

            for name, score in scores.items():
                emotion = self._adjuster.map(name)
                adjusted = self._adjuster.adjust(emotion, score / total)

                # Without geometry, both the modifier and the primary boost are skipped
                modifier = self._analyzers.landmark_modifier(detection, emotion).unwrap_or_else(
                    lambda error: None
                )
                if modifier is not None:
                    adjusted *= modifier * scoring.landmark_gain
                    if self._adjuster.is_primary(emotion):
                        adjusted *= scoring.primary_boost

                if adjusted <= highest:
                    continue

                best, highest, decided_by = emotion, adjusted, "scoring"

                proposal = self._analyzers.advanced_analysis(detection, emotion, adjusted)
                if (
                    proposal.ok
                    and proposal.value.emotion is not emotion
                    and proposal.value.score > adjusted * scoring.advanced_override_margin
                ):
                    self._trace_override(
                        "advanced", proposal.value.emotion, proposal.value.score,
                        best, highest, fallback=False,
                    )
                    best, highest = proposal.value.emotion, proposal.value.score
                    decided_by = "advanced"

            for rule in self._rules:
                outcome = rule.evaluate(scores, detection, self._analyzers)
                if outcome is None or outcome.score <= highest:
                    continue
                self._trace_override(
                    rule.name, outcome.emotion, outcome.score,
                    best, highest, fallback=outcome.fallback,
                )
                best, highest, decided_by = outcome.emotion, outcome.score, rule.name

        result = None
        if usable > 0:
            confidence = min(scoring.max_confidence, highest * scoring.confidence_scale)
            result = ClassificationResult(best, confidence)
            logger.debug(
                f"Classified {result.emotion.value} ({result.confidence:.2f}) "
                f"by {decided_by}, score={highest:.3f}"
            )

        hub = ObservabilityHub.get_instance()
        if hub.enabled:
            hub.emit(ClassificationRecord(
                face_count=len(detections),
                usable_faces=usable,
                emotion=result.emotion.value if result else "",
                confidence=result.confidence if result else 0.0,
                highest_score=highest if result else 0.0,
                decided_by=decided_by if result else "",
                processing_ms=(time.perf_counter() - start) * 1000,
            ))

        return result

    def _trace_override(
        self,
        rule: str,
        emotion: Emotion,
        score: float,
        previous_emotion: Emotion,
        previous_score: float,
        fallback: bool,
    ) -> None:
        logger.debug(
            f"{rule} override: {previous_emotion.value} ({previous_score:.3f}) -> "
            f"{emotion.value} ({score:.3f}){' [fallback]' if fallback else ''}"
        )
        hub = ObservabilityHub.get_instance()
        if hub.is_level_enabled(TraceLevel.VERBOSE):
            hub.emit(RuleOverrideRecord(
                rule=rule,
                emotion=emotion.value,
                score=score,
                previous_emotion=previous_emotion.value,
                previous_score=previous_score,
                fallback=fallback,
            ))
