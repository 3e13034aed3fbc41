"""Eye geometry features."""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from facemood.landmarks.base import (
    LEFT_EYE,
    RIGHT_EYE,
    LandmarkError,
    Points,
    check_finite,
    validate_geometry,
)
from facemood.types import BoundingBox


@dataclass(frozen=True)
class EyeFeatures:
    """Eye features normalized by the face box.

    Attributes:
        eye_openness: Mean upper-to-lower eyelid gap of both eyes / height.
        left_eye_deviation: Horizontal offset of the eyelid centroid from the
            corner midpoint / eye width. Stands in for iris offset, which the
            68-point layout does not track.
        right_eye_deviation: Same for the right eye.
    """

    eye_openness: float
    left_eye_deviation: float
    right_eye_deviation: float


def _eye_metrics(eye: np.ndarray) -> Tuple[float, float]:
    """Return (lid gap in px, deviation ratio) for one 6-point eye contour.

    Contour order: corner, upper, upper, corner, lower, lower.
    """
    width = abs(eye[3, 0] - eye[0, 0])
    if width < 1e-6:
        raise LandmarkError("Degenerate eye contour: zero width")

    gap = (abs(eye[5, 1] - eye[1, 1]) + abs(eye[4, 1] - eye[2, 1])) / 2
    lid_center_x = float(np.mean(eye[[1, 2, 4, 5], 0]))
    corner_mid_x = (eye[0, 0] + eye[3, 0]) / 2
    return float(gap), abs(lid_center_x - corner_mid_x) / width


def eye_analysis(landmarks: Points, box: BoundingBox) -> EyeFeatures:
    """Compute eye openness and gaze deviation proxies.

    Raises:
        LandmarkError: If the landmarks, box or eye contours are degenerate.
    """
    pts = validate_geometry(landmarks, box)

    right_gap, right_dev = _eye_metrics(pts[RIGHT_EYE])
    left_gap, left_dev = _eye_metrics(pts[LEFT_EYE])

    return EyeFeatures(
        eye_openness=check_finite("eye_openness", (left_gap + right_gap) / 2 / box.height),
        left_eye_deviation=check_finite("left_eye_deviation", left_dev),
        right_eye_deviation=check_finite("right_eye_deviation", right_dev),
    )
