"""Shared definitions for 68-point landmark analysis.

Indices follow the iBUG 300-W layout. "Right"/"left" refer to the
subject's own sides, so the right eye (36-41) appears on the image left.
"""

from typing import Sequence, Union

import numpy as np

from facemood.types import BoundingBox, NUM_LANDMARKS

JAW = slice(0, 17)
RIGHT_BROW = slice(17, 22)
LEFT_BROW = slice(22, 27)
NOSE_BRIDGE = slice(27, 31)
NOSE_BASE = slice(31, 36)
RIGHT_EYE = slice(36, 42)
LEFT_EYE = slice(42, 48)
OUTER_LIPS = slice(48, 60)
INNER_LIPS = slice(60, 68)

RIGHT_BROW_INNER = 21
LEFT_BROW_INNER = 22
MOUTH_CORNER_RIGHT = 48
MOUTH_CORNER_LEFT = 54
UPPER_LIP_TOP = 51
LOWER_LIP_BOTTOM = 57
INNER_LIP_TOP = 62
INNER_LIP_BOTTOM = 66

Points = Union[np.ndarray, Sequence[Sequence[float]]]


class LandmarkError(ValueError):
    """Landmarks are missing or geometrically degenerate."""


def validate_geometry(landmarks: Points, box: BoundingBox) -> np.ndarray:
    """Return the (68, 2) landmark array or raise LandmarkError."""
    if box.width <= 0 or box.height <= 0:
        raise LandmarkError(f"Degenerate bounding box: {box.width}x{box.height}")

    pts = np.asarray(landmarks, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[0] < NUM_LANDMARKS or pts.shape[1] < 2:
        raise LandmarkError(
            f"Expected {NUM_LANDMARKS} (x, y) landmarks, got shape {pts.shape}"
        )
    pts = pts[:NUM_LANDMARKS, :2]
    if not np.all(np.isfinite(pts)):
        raise LandmarkError("Landmarks contain non-finite values")
    return pts


def check_finite(name: str, value: float) -> float:
    if not np.isfinite(value):
        raise LandmarkError(f"{name} is not finite")
    return float(value)
