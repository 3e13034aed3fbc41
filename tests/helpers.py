"""Test helpers: synthetic 68-point faces and stub analyzers.

The synthetic face sits in a 200x200 box at (100, 100). Its features are
chosen to be round numbers:

    brow_asymmetry 0.0, brow_raise 0.10, brow_furrow 0.20
    eye_openness 0.05, eye deviations 0.0
    mouth_asymmetry 0.0, jaw_tension 0.02, mouth_tension 0.0,
    mouth_openness 0.09, corner_lift 0.01
"""

import math

import numpy as np

from facemood.landmarks import EyebrowFeatures, EyeFeatures, LandmarkAnalyzers, MouthFeatures
from facemood.types import BoundingBox, RawDetection

FACE_BOX = BoundingBox(100.0, 100.0, 200.0, 200.0)

NEUTRAL_BROWS = EyebrowFeatures(brow_asymmetry=0.0, brow_raise=0.1, brow_furrow=0.2)
NEUTRAL_EYES = EyeFeatures(eye_openness=0.05, left_eye_deviation=0.0, right_eye_deviation=0.0)
NEUTRAL_MOUTH = MouthFeatures(
    mouth_asymmetry=0.0,
    jaw_tension=0.02,
    mouth_tension=0.0,
    mouth_openness=0.09,
    corner_lift=0.01,
)

_BROWS = [(130, 150), (142.5, 150), (155, 150), (167.5, 150), (180, 150),
          (220, 150), (232.5, 150), (245, 150), (257.5, 150), (270, 150)]
_NOSE = [(200, 160), (200, 173), (200, 186), (200, 200),
         (185, 205), (192, 208), (200, 210), (208, 208), (215, 205)]
_EYES = [(135, 170), (148, 165), (162, 165), (175, 170), (162, 175), (148, 175),
         (225, 170), (238, 165), (252, 165), (265, 170), (252, 175), (238, 175)]
_LIPS = [(170, 240), (180, 235), (190, 232), (200, 233), (210, 232), (220, 235),
         (230, 240), (220, 247), (210, 250), (200, 251), (190, 250), (180, 247),
         (175, 240), (190, 238), (200, 238), (210, 238), (225, 240), (210, 242),
         (200, 242), (190, 242)]


def neutral_face() -> np.ndarray:
    """Return (68, 2) landmarks of the relaxed synthetic face."""
    jaw = [
        (200 + 95 * math.cos(math.pi - i * math.pi / 16),
         160 + 135 * math.sin(math.pi - i * math.pi / 16))
        for i in range(17)
    ]
    return np.array(jaw + _BROWS + _NOSE + _EYES + _LIPS, dtype=np.float64)


def raise_left_brow(points: np.ndarray, dy: float) -> np.ndarray:
    pts = points.copy()
    pts[22:27, 1] -= dy
    return pts


def open_eyes(points: np.ndarray, dy: float) -> np.ndarray:
    """Move both upper lids up and lower lids down by ``dy`` pixels."""
    pts = points.copy()
    for upper in (37, 38, 43, 44):
        pts[upper, 1] -= dy
    for lower in (40, 41, 46, 47):
        pts[lower, 1] += dy
    return pts


def shift_lids(points: np.ndarray, dx: float) -> np.ndarray:
    """Shift the eyelid points of both eyes sideways (gaze proxy)."""
    pts = points.copy()
    for idx in (37, 38, 40, 41, 43, 44, 46, 47):
        pts[idx, 0] += dx
    return pts


def move_mouth_corners(points: np.ndarray, dy: float) -> np.ndarray:
    """Move both mouth corners by ``dy`` pixels (negative lifts them)."""
    pts = points.copy()
    pts[[48, 54], 1] += dy
    return pts


def make_detection(expressions=None, landmarks=None, box=FACE_BOX) -> RawDetection:
    if landmarks is None:
        landmarks = neutral_face()
    return RawDetection(box=box, landmarks=np.asarray(landmarks, dtype=np.float64),
                        expressions=expressions)


def _const(value):
    def fn(*args):
        if isinstance(value, Exception):
            raise value
        return value
    return fn


def _identity_advanced(detection, emotion, score):
    return emotion, score


def stub_analyzers(
    brows=NEUTRAL_BROWS,
    eyes=NEUTRAL_EYES,
    mouth=NEUTRAL_MOUTH,
    modifier=1.0,
    advanced=None,
) -> LandmarkAnalyzers:
    """Analyzers returning fixed values. Pass an exception to make one fail."""
    return LandmarkAnalyzers(
        eyebrow=_const(brows),
        eye=_const(eyes),
        mouth=_const(mouth),
        modifier=_const(modifier),
        advanced=advanced or _identity_advanced,
    )
