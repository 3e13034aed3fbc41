"""Mouth and jaw geometry features."""

from dataclasses import dataclass

import numpy as np

from facemood.landmarks.base import (
    INNER_LIP_BOTTOM,
    INNER_LIP_TOP,
    LOWER_LIP_BOTTOM,
    MOUTH_CORNER_LEFT,
    MOUTH_CORNER_RIGHT,
    UPPER_LIP_TOP,
    Points,
    check_finite,
    validate_geometry,
)
from facemood.types import BoundingBox

# Mouth width / face width of a relaxed mouth.
RELAXED_MOUTH_WIDTH = 0.38


@dataclass(frozen=True)
class MouthFeatures:
    """Mouth features normalized by the face box.

    Attributes:
        mouth_asymmetry: Corner-to-centre distance difference (/ width) plus
            corner height difference (/ height). Unilateral lip raise in contempt.
        jaw_tension: Inner-lip gap / height. Smaller means a tighter, clenched jaw.
        mouth_tension: Lip stretch beyond the relaxed width ratio, >= 0.
        mouth_openness: Outer lip height / height.
        corner_lift: Height of the corners above the lip centre / height.
            Positive for a smile, negative for a frown.
    """

    mouth_asymmetry: float
    jaw_tension: float
    mouth_tension: float
    mouth_openness: float
    corner_lift: float


def mouth_analysis(landmarks: Points, box: BoundingBox) -> MouthFeatures:
    """Compute mouth features.

    Raises:
        LandmarkError: If the landmarks or box are degenerate.
    """
    pts = validate_geometry(landmarks, box)

    right_corner = pts[MOUTH_CORNER_RIGHT]
    left_corner = pts[MOUTH_CORNER_LEFT]
    center = (pts[UPPER_LIP_TOP] + pts[LOWER_LIP_BOTTOM]) / 2

    right_dist = float(np.linalg.norm(right_corner - center))
    left_dist = float(np.linalg.norm(left_corner - center))
    asymmetry = (
        abs(left_dist - right_dist) / box.width
        + abs(left_corner[1] - right_corner[1]) / box.height
    )

    inner_gap = max(0.0, float(pts[INNER_LIP_BOTTOM, 1] - pts[INNER_LIP_TOP, 1]))
    width_ratio = float(np.linalg.norm(left_corner - right_corner)) / box.width
    openness = max(0.0, float(pts[LOWER_LIP_BOTTOM, 1] - pts[UPPER_LIP_TOP, 1]))
    corner_y = (left_corner[1] + right_corner[1]) / 2

    return MouthFeatures(
        mouth_asymmetry=check_finite("mouth_asymmetry", asymmetry),
        jaw_tension=check_finite("jaw_tension", inner_gap / box.height),
        mouth_tension=check_finite("mouth_tension", max(0.0, width_ratio - RELAXED_MOUTH_WIDTH)),
        mouth_openness=check_finite("mouth_openness", openness / box.height),
        corner_lift=check_finite("corner_lift", (center[1] - corner_y) / box.height),
    )
