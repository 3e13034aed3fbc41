"""Debug overlay: draws detections and classifications onto frames using cv2.

All drawing is done on a copy of the input frame.

Example:
    >>> from facemood.visualize import draw_detection
    >>> output = draw_detection(frame, detection, result)
    >>> cv2.imshow("facemood", output)
"""

from __future__ import annotations

import cv2
import numpy as np

from facemood.landmarks.base import (
    INNER_LIPS,
    JAW,
    LEFT_BROW,
    LEFT_EYE,
    NOSE_BASE,
    NOSE_BRIDGE,
    OUTER_LIPS,
    RIGHT_BROW,
    RIGHT_EYE,
)
from facemood.types import ClassificationResult, Emotion, NUM_LANDMARKS, RawDetection

FONT = cv2.FONT_HERSHEY_SIMPLEX

BOX_COLOR = (0, 200, 255)
LANDMARK_COLOR = (0, 255, 0)
TEXT_COLOR = (255, 255, 255)
BAR_BG_COLOR = (60, 60, 60)

EMOTION_COLORS: dict[Emotion, tuple[int, int, int]] = {
    Emotion.HAPPY: (0, 220, 255),
    Emotion.SAD: (200, 120, 40),
    Emotion.NEUTRAL: (200, 200, 200),
    Emotion.ANGRY: (40, 40, 230),
    Emotion.SURPRISED: (255, 200, 0),
    Emotion.FEARFUL: (180, 80, 160),
    Emotion.STRESSED: (30, 110, 230),
    Emotion.ANXIOUS: (170, 60, 200),
    Emotion.DEPRESSED: (140, 80, 60),
    Emotion.DISGUSTED: (40, 160, 40),
    Emotion.CONTEMPT: (60, 60, 160),
    Emotion.CONFUSED: (230, 180, 120),
}

# (slice, closed)
_CONTOURS = [
    (JAW, False),
    (RIGHT_BROW, False),
    (LEFT_BROW, False),
    (NOSE_BRIDGE, False),
    (NOSE_BASE, False),
    (RIGHT_EYE, True),
    (LEFT_EYE, True),
    (OUTER_LIPS, True),
    (INNER_LIPS, True),
]


def draw_detection(
    frame: np.ndarray,
    detection: RawDetection,
    result: ClassificationResult | None = None,
    min_expression: float = 0.01,
) -> np.ndarray:
    """Draw one detection and its classification.

    Args:
        frame: BGR image (H, W, 3). A copy is made internally.
        detection: Face to draw (box, landmarks, expressions).
        result: Optional classification to label the box with.
        min_expression: Expressions at or below this probability are not listed.

    Returns:
        Annotated frame (copy).
    """
    output = frame.copy()

    color = EMOTION_COLORS[result.emotion] if result is not None else BOX_COLOR
    box = detection.box
    x1, y1 = int(box.x), int(box.y)
    x2, y2 = int(box.x + box.width), int(box.y + box.height)
    cv2.rectangle(output, (x1, y1), (x2, y2), color, 2)

    _draw_landmarks(output, detection.landmarks)

    if result is not None:
        label = f"{result.emotion.value} {result.confidence:.2f}"
        label_size = cv2.getTextSize(label, FONT, 0.5, 1)[0]
        label_y = y1 - 5 if y1 > 25 else y2 + 15
        cv2.rectangle(
            output,
            (x1, label_y - label_size[1] - 4),
            (x1 + label_size[0] + 4, label_y + 2),
            color,
            -1,
        )
        cv2.putText(output, label, (x1 + 2, label_y - 2), FONT, 0.5, (20, 20, 20), 1)

    if detection.expressions:
        _draw_expressions(output, detection.expressions, min_expression)

    return output


def draw_no_face(frame: np.ndarray) -> np.ndarray:
    """Write "No face detected" on a copy of the frame."""
    output = frame.copy()
    cv2.putText(output, "No face detected", (10, 30), FONT, 0.7, (0, 0, 255), 2)
    return output


def _draw_landmarks(image: np.ndarray, landmarks: np.ndarray) -> None:
    pts = np.asarray(landmarks, dtype=np.float64)
    if pts.ndim != 2 or len(pts) == 0:
        return
    finite = np.all(np.isfinite(pts[:, :2]), axis=1)

    # Contours only for a complete, finite 68-point set
    if len(pts) >= NUM_LANDMARKS and finite[:NUM_LANDMARKS].all():
        for part, closed in _CONTOURS:
            poly = pts[part, :2].astype(np.int32).reshape(-1, 1, 2)
            cv2.polylines(image, [poly], closed, LANDMARK_COLOR, 1)

    for x, y in pts[finite, :2]:
        cv2.circle(image, (int(x), int(y)), 2, LANDMARK_COLOR, -1)


def _draw_expressions(image: np.ndarray, expressions, min_expression: float) -> None:
    shown = sorted(
        ((name, p) for name, p in expressions.items() if p > min_expression),
        key=lambda item: item[1],
        reverse=True,
    )
    bar_width = 100
    x0, y = 10, 20
    for name, p in shown:
        filled = int(bar_width * min(1.0, max(0.0, p)))
        cv2.rectangle(image, (x0, y - 10), (x0 + bar_width, y), BAR_BG_COLOR, -1)
        cv2.rectangle(image, (x0, y - 10), (x0 + filled, y), LANDMARK_COLOR, -1)
        cv2.putText(
            image, f"{name}: {p * 100:.1f}%", (x0 + bar_width + 6, y), FONT, 0.4, TEXT_COLOR, 1
        )
        y += 16
