"""Eyebrow geometry features."""

from dataclasses import dataclass

import numpy as np

from facemood.landmarks.base import (
    LEFT_BROW,
    LEFT_BROW_INNER,
    LEFT_EYE,
    NOSE_BRIDGE,
    RIGHT_BROW,
    RIGHT_BROW_INNER,
    RIGHT_EYE,
    Points,
    check_finite,
    validate_geometry,
)
from facemood.types import BoundingBox


@dataclass(frozen=True)
class EyebrowFeatures:
    """Eyebrow features normalized by the face box.

    Attributes:
        brow_asymmetry: Horizontal offset difference of the brows from the
            face midline (/ width) plus their height difference above the
            eyes (/ height). 0 for a symmetric face.
        brow_raise: Mean brow height above the eyes / height.
        brow_furrow: Gap between the inner brow ends / width. Small when knitted.
    """

    brow_asymmetry: float
    brow_raise: float
    brow_furrow: float


def eyebrow_analysis(landmarks: Points, box: BoundingBox) -> EyebrowFeatures:
    """Compute eyebrow features.

    Raises:
        LandmarkError: If the landmarks or box are degenerate.
    """
    pts = validate_geometry(landmarks, box)

    midline_x = float(np.mean(pts[NOSE_BRIDGE, 0]))
    right_brow = pts[RIGHT_BROW]
    left_brow = pts[LEFT_BROW]

    right_offset = midline_x - float(np.mean(right_brow[:, 0]))
    left_offset = float(np.mean(left_brow[:, 0])) - midline_x
    horizontal = abs(left_offset - right_offset) / box.width

    right_height = float(np.mean(pts[RIGHT_EYE, 1]) - np.mean(right_brow[:, 1]))
    left_height = float(np.mean(pts[LEFT_EYE, 1]) - np.mean(left_brow[:, 1]))
    vertical = abs(left_height - right_height) / box.height

    furrow = (pts[LEFT_BROW_INNER, 0] - pts[RIGHT_BROW_INNER, 0]) / box.width

    return EyebrowFeatures(
        brow_asymmetry=check_finite("brow_asymmetry", horizontal + vertical),
        brow_raise=check_finite("brow_raise", (left_height + right_height) / 2 / box.height),
        brow_furrow=check_finite("brow_furrow", furrow),
    )
