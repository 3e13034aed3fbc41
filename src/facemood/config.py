"""Configuration classes for the facemood engine.

Every threshold, gate and multiplier used by the classifier lives here so it
can be tuned without touching the scoring code. The defaults are the
calibrated values.

Example:
    >>> from facemood.config import EngineConfig
    >>> config = EngineConfig.from_yaml("facemood.yaml")
    >>> config.scoring.noise_floor
    0.08
    >>> config = EngineConfig.from_dict({"stabilizer": {"validity_window_sec": 3.0}})
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, Mapping, Tuple, Type, TypeVar

from facemood.types import Emotion

T = TypeVar("T")


# Raw provider expression names -> canonical emotion. Covers face-api.js,
# HSEmotion and Azure naming.
DEFAULT_EMOTION_MAPPING: Dict[str, Emotion] = {
    "neutral": Emotion.NEUTRAL,
    "happy": Emotion.HAPPY,
    "happiness": Emotion.HAPPY,
    "sad": Emotion.SAD,
    "sadness": Emotion.SAD,
    "angry": Emotion.ANGRY,
    "anger": Emotion.ANGRY,
    "fearful": Emotion.FEARFUL,
    "fear": Emotion.FEARFUL,
    "disgusted": Emotion.DISGUSTED,
    "disgust": Emotion.DISGUSTED,
    "surprised": Emotion.SURPRISED,
    "surprise": Emotion.SURPRISED,
    "contemptuous": Emotion.CONTEMPT,
    "contempt": Emotion.CONTEMPT,
}

# Static per-emotion boost applied to normalized scores. Neutral is damped so
# that it only wins when nothing else is expressed.
DEFAULT_EMOTION_BOOSTS: Dict[Emotion, float] = {
    Emotion.HAPPY: 1.0,
    Emotion.SAD: 1.1,
    Emotion.ANGRY: 1.1,
    Emotion.SURPRISED: 0.9,
    Emotion.FEARFUL: 1.2,
    Emotion.DISGUSTED: 1.2,
    Emotion.CONTEMPT: 1.3,
    Emotion.NEUTRAL: 0.7,
}

PRIMARY_EMOTIONS: Tuple[Emotion, ...] = (
    Emotion.HAPPY,
    Emotion.SAD,
    Emotion.ANGRY,
    Emotion.DISGUSTED,
    Emotion.SURPRISED,
)


@dataclass
class ScoringConfig:
    """Expression normalization and score adjustment settings.

    Attributes:
        noise_floor: Expressions at or below this probability are dropped (default: 0.08).
        initial_threshold: Seed for the running best score (default: 0.3).
        global_gain: Multiplier applied after the per-emotion boost (default: 1.7).
        landmark_gain: Multiplier applied with the landmark modifier (default: 1.3).
        primary_boost: Extra multiplier for primary emotions (default: 1.5).
        advanced_override_margin: Advanced analysis must beat the candidate by
            this factor to replace it (default: 1.2).
        confidence_scale: Best score -> confidence factor (default: 1.5).
        max_confidence: Upper bound on reported confidence (default: 0.98).
        primary_emotions: Emotions receiving ``primary_boost``.
        emotion_mapping: Raw expression name -> canonical emotion.
        emotion_boosts: Per-emotion static boost; missing emotions use 1.0.
    """

    noise_floor: float = 0.08
    initial_threshold: float = 0.3
    global_gain: float = 1.7
    landmark_gain: float = 1.3
    primary_boost: float = 1.5
    advanced_override_margin: float = 1.2
    confidence_scale: float = 1.5
    max_confidence: float = 0.98
    primary_emotions: Tuple[Emotion, ...] = PRIMARY_EMOTIONS
    emotion_mapping: Dict[str, Emotion] = field(
        default_factory=lambda: dict(DEFAULT_EMOTION_MAPPING)
    )
    emotion_boosts: Dict[Emotion, float] = field(
        default_factory=lambda: dict(DEFAULT_EMOTION_BOOSTS)
    )

    def __post_init__(self) -> None:
        if not 0.0 <= self.noise_floor < 1.0:
            raise ValueError(f"noise_floor must be in [0, 1), got {self.noise_floor}")
        if not 0.0 < self.max_confidence <= 0.98:
            raise ValueError(f"max_confidence must be in (0, 0.98], got {self.max_confidence}")
        self.primary_emotions = tuple(Emotion(e) for e in self.primary_emotions)
        self.emotion_mapping = {
            str(k).lower(): Emotion(v) for k, v in self.emotion_mapping.items()
        }
        self.emotion_boosts = {Emotion(k): float(v) for k, v in self.emotion_boosts.items()}


@dataclass
class ContemptAngerConfig:
    """Contempt vs. anger disambiguation (rescales raw scores)."""

    min_contempt: float = 0.15
    min_angry: float = 0.15
    asymmetry_threshold: float = 0.02
    contempt_boost: float = 1.8
    anger_boost: float = 1.6


@dataclass
class ConfusedConfig:
    """Confusion rule. Weights apply to (surprised, neutral, fearful)."""

    min_surprised: float = 0.18
    min_neutral: float = 0.2
    min_fearful: float = 0.12
    brow_asymmetry_threshold: float = 0.04
    weights: Tuple[float, float, float] = (0.5, 0.3, 0.2)
    gain: float = 2.5
    fallback_weights: Tuple[float, float, float] = (0.4, 0.3, 0.3)
    fallback_gain: float = 2.0


@dataclass
class StressedConfig:
    """Stress rule. Weights apply to (angry, fearful, sad)."""

    min_angry: float = 0.15
    min_fearful: float = 0.15
    min_sad: float = 0.1
    jaw_tension_threshold: float = 0.035
    weights: Tuple[float, float, float] = (0.5, 0.3, 0.2)
    gain: float = 2.2
    fallback_weights: Tuple[float, float, float] = (0.4, 0.3, 0.3)
    fallback_gain: float = 2.0


@dataclass
class AnxiousConfig:
    """Anxiety rule with eye (primary), mouth (secondary) and fallback paths.

    Weights apply to (fearful, surprised).
    """

    eye_openness_threshold: float = 0.07
    eye_deviation_threshold: float = 0.1
    weights: Tuple[float, float] = (0.7, 0.3)
    gain: float = 3.0
    secondary_min_fearful: float = 0.18
    mouth_tension_threshold: float = 0.02
    secondary_gain: float = 2.8
    fallback_min_fearful: float = 0.2
    fallback_pair_min: float = 0.15
    fallback_gain: float = 2.2


@dataclass
class RuleConfig:
    """Settings for all disambiguation rules."""

    contempt_anger: ContemptAngerConfig = field(default_factory=ContemptAngerConfig)
    confused: ConfusedConfig = field(default_factory=ConfusedConfig)
    stressed: StressedConfig = field(default_factory=StressedConfig)
    anxious: AnxiousConfig = field(default_factory=AnxiousConfig)


@dataclass
class ModifierConfig:
    """Landmark modifier: how far face geometry may scale an emotion's score.

    Signed evidence for the candidate emotion is clipped to
    [min_evidence, max_evidence] and mapped to ``1 + slope * evidence``,
    clipped to [min_modifier, max_modifier]. Baselines are the feature
    values of a relaxed, frontal face.
    """

    min_modifier: float = 0.5
    max_modifier: float = 2.0
    slope: float = 0.25
    min_evidence: float = -2.0
    max_evidence: float = 4.0
    baseline_brow_raise: float = 0.10
    baseline_brow_furrow: float = 0.20
    baseline_eye_openness: float = 0.05
    baseline_mouth_openness: float = 0.09
    baseline_corner_lift: float = 0.01
    baseline_jaw_gap: float = 0.02

    def __post_init__(self) -> None:
        if not 0.0 < self.min_modifier <= self.max_modifier:
            raise ValueError(
                f"modifier range must satisfy 0 < min <= max, "
                f"got [{self.min_modifier}, {self.max_modifier}]"
            )


@dataclass
class AdvancedConfig:
    """Complex emotions proposed for a winning basic emotion.

    sad -> depressed (heavy lids, turned-down corners), fearful -> anxious
    (wide, deviating eyes), neutral -> confused (one brow raised).
    """

    depressed_max_eye_openness: float = 0.035
    depressed_gain: float = 1.3
    anxious_min_eye_openness: float = 0.07
    anxious_min_deviation: float = 0.1
    anxious_gain: float = 1.25
    confused_min_brow_asymmetry: float = 0.06
    confused_gain: float = 1.25


@dataclass
class StabilizerConfig:
    """Temporal stabilizer settings.

    Attributes:
        validity_window_sec: How long an accepted result stays the stable
            emotion without a new one (default: 5.0).
    """

    validity_window_sec: float = 5.0

    def __post_init__(self) -> None:
        if self.validity_window_sec <= 0:
            raise ValueError(
                f"validity_window_sec must be positive, got {self.validity_window_sec}"
            )


@dataclass
class SamplerConfig:
    """Frame sampling settings.

    Attributes:
        interval_sec: Minimum time between classifications (desktop: 0.3, mobile: 0.4).
        detect_timeout_sec: Upper bound on one detector call.
        input_size: Detector input resolution (desktop: 320, mobile: 224).
        score_threshold: Detector face score threshold (default: 0.3).
    """

    interval_sec: float = 0.3
    detect_timeout_sec: float = 2.0
    input_size: int = 320
    score_threshold: float = 0.3

    def __post_init__(self) -> None:
        if self.interval_sec < 0:
            raise ValueError(f"interval_sec must be >= 0, got {self.interval_sec}")
        if self.detect_timeout_sec <= 0:
            raise ValueError(
                f"detect_timeout_sec must be positive, got {self.detect_timeout_sec}"
            )

    @classmethod
    def for_device(cls, mobile: bool = False, **overrides: Any) -> "SamplerConfig":
        """Device preset: mobile samples less often at a lower resolution."""
        if mobile:
            base = {"interval_sec": 0.4, "input_size": 224}
        else:
            base = {"interval_sec": 0.3, "input_size": 320}
        base.update(overrides)
        return cls(**base)


def _build(cls: Type[T], data: Mapping[str, Any]) -> T:
    """Instantiate a flat config dataclass from a dict, rejecting unknown keys."""
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(
            f"Unknown {cls.__name__} option(s): {', '.join(sorted(unknown))}"
        )
    kwargs = {}
    for key, value in data.items():
        kwargs[key] = tuple(value) if isinstance(value, list) else value
    return cls(**kwargs)


def _plain(value: Any) -> Any:
    """Convert config values into YAML/JSON friendly builtins."""
    if isinstance(value, Emotion):
        return value.value
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass
class EngineConfig:
    """Complete engine configuration.

    Example:
        >>> config = EngineConfig(
        ...     scoring=ScoringConfig(noise_floor=0.1),
        ...     sampler=SamplerConfig.for_device(mobile=True),
        ... )
    """

    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    rules: RuleConfig = field(default_factory=RuleConfig)
    modifier: ModifierConfig = field(default_factory=ModifierConfig)
    advanced: AdvancedConfig = field(default_factory=AdvancedConfig)
    stabilizer: StabilizerConfig = field(default_factory=StabilizerConfig)
    sampler: SamplerConfig = field(default_factory=SamplerConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """Create EngineConfig from a dictionary (e.g., loaded from YAML).

        Missing sections and keys keep their defaults.

        Raises:
            ValueError: On unknown sections/keys or invalid values.
        """
        data = dict(data or {})
        unknown = set(data) - {
            "scoring", "rules", "modifier", "advanced", "stabilizer", "sampler",
        }
        if unknown:
            raise ValueError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

        rules_data = dict(data.get("rules") or {})
        rule_sections = {
            "contempt_anger": ContemptAngerConfig,
            "confused": ConfusedConfig,
            "stressed": StressedConfig,
            "anxious": AnxiousConfig,
        }
        unknown = set(rules_data) - set(rule_sections)
        if unknown:
            raise ValueError(f"Unknown rule section(s): {', '.join(sorted(unknown))}")

        rules = RuleConfig(**{
            name: _build(section_cls, rules_data.get(name) or {})
            for name, section_cls in rule_sections.items()
        })

        return cls(
            scoring=_build(ScoringConfig, data.get("scoring") or {}),
            rules=rules,
            modifier=_build(ModifierConfig, data.get("modifier") or {}),
            advanced=_build(AdvancedConfig, data.get("advanced") or {}),
            stabilizer=_build(StabilizerConfig, data.get("stabilizer") or {}),
            sampler=_build(SamplerConfig, data.get("sampler") or {}),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "EngineConfig":
        """Load EngineConfig from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: On invalid configuration.
        """
        import yaml

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary for serialization."""
        return _plain(asdict(self))

    def to_yaml(self) -> str:
        import yaml

        return yaml.safe_dump(self.to_dict(), sort_keys=False)
