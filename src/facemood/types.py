"""Core data types for facial emotion classification.

Example:
    >>> from facemood.types import RawDetection, Emotion
    >>> det = RawDetection.from_dict({
    ...     "box": [120, 80, 200, 240],
    ...     "landmarks": points.tolist(),
    ...     "expressions": {"happy": 0.82, "neutral": 0.12},
    ... })
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import numpy as np

NUM_LANDMARKS = 68
MAX_CONFIDENCE = 0.98


class DetectionFormatError(ValueError):
    """Raised when a detection record cannot be parsed."""


class Emotion(str, Enum):
    """Canonical emotion labels produced by the classifier."""

    HAPPY = "happy"
    SAD = "sad"
    NEUTRAL = "neutral"
    ANGRY = "angry"
    SURPRISED = "surprised"
    FEARFUL = "fearful"
    STRESSED = "stressed"
    ANXIOUS = "anxious"
    DEPRESSED = "depressed"
    DISGUSTED = "disgusted"
    CONTEMPT = "contempt"
    CONFUSED = "confused"

    @property
    def emoji(self) -> str:
        return EMOTION_EMOJIS[self]


EMOTION_EMOJIS: Dict[Emotion, str] = {
    Emotion.HAPPY: "\U0001F60A",
    Emotion.SAD: "\U0001F614",
    Emotion.NEUTRAL: "\U0001F610",
    Emotion.ANGRY: "\U0001F620",
    Emotion.SURPRISED: "\U0001F62E",
    Emotion.FEARFUL: "\U0001F628",
    Emotion.STRESSED: "\U0001F62B",
    Emotion.ANXIOUS: "\U0001F630",
    Emotion.DEPRESSED: "\U0001F61E",
    Emotion.DISGUSTED: "\U0001F922",
    Emotion.CONTEMPT: "\U0001F60F",
    Emotion.CONFUSED: "\U0001F615",
}


@dataclass(frozen=True)
class BoundingBox:
    """Face bounding box in pixels."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_value(cls, value: Any) -> "BoundingBox":
        """Build from a ``{"x", "y", "width", "height"}`` dict or an ``[x, y, w, h]`` list."""
        if isinstance(value, BoundingBox):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(
                    x=float(value["x"]),
                    y=float(value["y"]),
                    width=float(value["width"]),
                    height=float(value["height"]),
                )
            except KeyError as e:
                raise DetectionFormatError(f"Bounding box missing field {e}") from e
        try:
            x, y, w, h = (float(v) for v in value)
        except (TypeError, ValueError) as e:
            raise DetectionFormatError(f"Invalid bounding box: {value!r}") from e
        return cls(x=x, y=y, width=w, height=h)


@dataclass(frozen=True)
class RawDetection:
    """One face found in one frame.

    Attributes:
        box: Face bounding box in pixels.
        landmarks: (68, 2) array of landmark points in pixels (iBUG 68 layout).
        expressions: Raw expression name -> probability [0, 1], or None when
            the provider returned no expressions for this face.
    """

    box: BoundingBox
    landmarks: np.ndarray = field(compare=False, repr=False)
    expressions: Optional[Mapping[str, float]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawDetection":
        """Parse the JSON wire form of a detection.

        Raises:
            DetectionFormatError: If the box or landmarks are malformed.
        """
        if "box" not in data:
            raise DetectionFormatError("Detection is missing 'box'")
        box = BoundingBox.from_value(data["box"])

        try:
            landmarks = np.asarray(data.get("landmarks", []), dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise DetectionFormatError(f"Invalid landmarks: {e}") from e
        if landmarks.size == 0:
            landmarks = np.zeros((0, 2), dtype=np.float64)
        elif landmarks.ndim != 2 or landmarks.shape[1] < 2:
            raise DetectionFormatError(
                f"Landmarks must be a list of (x, y) points, got shape {landmarks.shape}"
            )

        expressions = data.get("expressions")
        if expressions is not None:
            expressions = {str(k): float(v) for k, v in expressions.items()}

        return cls(box=box, landmarks=landmarks[:, :2], expressions=expressions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "box": {
                "x": self.box.x,
                "y": self.box.y,
                "width": self.box.width,
                "height": self.box.height,
            },
            "landmarks": self.landmarks.tolist(),
            "expressions": dict(self.expressions) if self.expressions is not None else None,
        }


@dataclass(frozen=True)
class ClassificationResult:
    """Final label for one frame. Confidence is clamped to [0, 0.98]."""

    emotion: Emotion
    confidence: float

    def __post_init__(self) -> None:
        clamped = min(MAX_CONFIDENCE, max(0.0, float(self.confidence)))
        object.__setattr__(self, "confidence", clamped)

    def to_dict(self) -> Dict[str, Any]:
        return {"emotion": self.emotion.value, "confidence": self.confidence}
