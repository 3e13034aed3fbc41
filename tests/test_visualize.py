"""Tests for the debug overlay."""

import numpy as np

from helpers import make_detection

from facemood.types import ClassificationResult, Emotion
from facemood.visualize import EMOTION_COLORS, draw_detection, draw_no_face


def _blank():
    return np.zeros((400, 400, 3), dtype=np.uint8)


class TestDrawDetection:
    def test_draws_on_copy(self):
        frame = _blank()
        output = draw_detection(frame, make_detection({"happy": 0.9}))
        assert output is not frame
        assert output.shape == frame.shape
        assert output.any()
        assert not frame.any()

    def test_label_uses_emotion_color(self):
        result = ClassificationResult(Emotion.SAD, 0.8)
        output = draw_detection(_blank(), make_detection({"sad": 0.9}), result)
        color = np.array(EMOTION_COLORS[Emotion.SAD], dtype=np.uint8)
        assert np.any(np.all(output == color, axis=-1))

    def test_tolerates_missing_landmarks(self):
        det = make_detection({"happy": 0.9}, landmarks=np.zeros((0, 2)))
        output = draw_detection(_blank(), det)
        assert output.any()

    def test_expression_threshold(self):
        quiet = draw_detection(_blank(), make_detection({"happy": 0.005}), min_expression=0.01)
        loud = draw_detection(_blank(), make_detection({"happy": 0.5}), min_expression=0.01)
        # Expression bars are drawn in the top-left corner
        assert not quiet[5:25, 5:120].any()
        assert loud[5:25, 5:120].any()

    def test_every_emotion_has_color(self):
        assert set(EMOTION_COLORS) == set(Emotion)


class TestDrawNoFace:
    def test_writes_message(self):
        frame = _blank()
        output = draw_no_face(frame)
        assert output.any()
        assert not frame.any()
