"""Expression probability normalization and per-emotion score adjustment."""

from typing import Dict, Iterator, Mapping, Optional, Tuple
import logging

from facemood.config import DEFAULT_EMOTION_MAPPING, ScoringConfig
from facemood.types import Emotion

logger = logging.getLogger(__name__)


def map_expression(
    name: str, mapping: Optional[Mapping[str, Emotion]] = None
) -> Emotion:
    """Map a raw expression name to a canonical emotion (unmapped -> neutral)."""
    table = DEFAULT_EMOTION_MAPPING if mapping is None else mapping
    return table.get(name.lower(), Emotion.NEUTRAL)


class ExpressionScores:
    """Filtered raw expression scores for one detection.

    Keeps the provider's key order. Lookups by canonical emotion go through
    the mapping table; when several raw names map to the same emotion the
    highest score is used.

    Args:
        scores: Raw expression name -> probability (already filtered).
        mapping: Raw name -> emotion table (default: DEFAULT_EMOTION_MAPPING).
    """

    def __init__(
        self,
        scores: Mapping[str, float],
        mapping: Optional[Mapping[str, Emotion]] = None,
    ):
        self._scores: Dict[str, float] = dict(scores)
        self._mapping = DEFAULT_EMOTION_MAPPING if mapping is None else mapping

    @property
    def total(self) -> float:
        return sum(self._scores.values())

    def __len__(self) -> int:
        return len(self._scores)

    def __iter__(self) -> Iterator[str]:
        return iter(self._scores)

    def items(self) -> Iterator[Tuple[str, float]]:
        return iter(self._scores.items())

    def emotion_of(self, name: str) -> Emotion:
        return map_expression(name, self._mapping)

    def get(self, emotion: Emotion) -> float:
        """Score for a canonical emotion, 0.0 if absent."""
        values = [s for name, s in self._scores.items() if self.emotion_of(name) is emotion]
        return max(values) if values else 0.0

    def with_scaled(self, emotion: Emotion, factor: float) -> "ExpressionScores":
        """Return a copy with every raw score of ``emotion`` multiplied by ``factor``."""
        scaled = {
            name: score * factor if self.emotion_of(name) is emotion else score
            for name, score in self._scores.items()
        }
        return ExpressionScores(scaled, self._mapping)

    def to_dict(self) -> Dict[str, float]:
        return dict(self._scores)

    def __repr__(self) -> str:
        return f"ExpressionScores({self._scores!r}, total={self.total:.3f})"


def normalize_expressions(
    expressions: Optional[Mapping[str, float]],
    noise_floor: float = 0.08,
    mapping: Optional[Mapping[str, Emotion]] = None,
) -> Optional[ExpressionScores]:
    """Drop low-confidence expressions.

    Args:
        expressions: Raw expression probabilities from the provider.
        noise_floor: Entries with probability <= this value are dropped.
        mapping: Raw name -> emotion table used for later lookups.

    Returns:
        The surviving scores, or None when nothing usable remains.
    """
    if not expressions:
        return None

    kept = {name: float(p) for name, p in expressions.items() if p > noise_floor}
    if not kept:
        return None

    scores = ExpressionScores(kept, mapping)
    if scores.total <= 0:
        return None
    return scores


class EmotionScoreAdjuster:
    """Applies the static boost table and global gain to normalized scores.

    Args:
        config: Scoring configuration providing the mapping and boost tables.

    Example:
        >>> adjuster = EmotionScoreAdjuster(ScoringConfig())
        >>> round(adjuster.adjust(Emotion.HAPPY, 0.6), 2)
        1.02
    """

    def __init__(self, config: Optional[ScoringConfig] = None):
        self._config = config or ScoringConfig()

    def map(self, name: str) -> Emotion:
        return map_expression(name, self._config.emotion_mapping)

    def boost(self, emotion: Emotion) -> float:
        return self._config.emotion_boosts.get(emotion, 1.0)

    def adjust(self, emotion: Emotion, normalized_score: float) -> float:
        """Boosted score before landmark modifiers: boost * score * global gain."""
        return self.boost(emotion) * normalized_score * self._config.global_gain

    def is_primary(self, emotion: Emotion) -> bool:
        return emotion in self._config.primary_emotions
