"""Tests for landmark geometry analyzers."""

import numpy as np
import pytest

from helpers import (
    FACE_BOX,
    make_detection,
    move_mouth_corners,
    open_eyes,
    raise_left_brow,
    shift_lids,
)

from facemood.landmarks import (
    AnalyzerResult,
    LandmarkAnalyzers,
    LandmarkError,
    analyze_advanced_emotions,
    analyze_facial_landmarks,
    eye_analysis,
    eyebrow_analysis,
    mouth_analysis,
)
from facemood.config import AdvancedConfig, ModifierConfig
from facemood.observability import MemorySink, ObservabilityHub, TraceLevel
from facemood.observability.records import AnalyzerFailureRecord
from facemood.types import BoundingBox, Emotion


class TestEyebrowAnalysis:
    def test_neutral_face(self, face):
        brows = eyebrow_analysis(face, FACE_BOX)
        assert brows.brow_asymmetry == pytest.approx(0.0, abs=1e-9)
        assert brows.brow_raise == pytest.approx(0.1)
        assert brows.brow_furrow == pytest.approx(0.2)

    def test_raised_brow_is_asymmetric(self, face):
        brows = eyebrow_analysis(raise_left_brow(face, 10), FACE_BOX)
        assert brows.brow_asymmetry == pytest.approx(0.05)

    def test_scale_invariant(self, face):
        big_box = BoundingBox(200, 200, 400, 400)
        brows = eyebrow_analysis(raise_left_brow(face, 10) * 2, big_box)
        assert brows.brow_asymmetry == pytest.approx(0.05)


class TestEyeAnalysis:
    def test_neutral_face(self, face):
        eyes = eye_analysis(face, FACE_BOX)
        assert eyes.eye_openness == pytest.approx(0.05)
        assert eyes.left_eye_deviation == pytest.approx(0.0)
        assert eyes.right_eye_deviation == pytest.approx(0.0)

    def test_wide_eyes(self, face):
        eyes = eye_analysis(open_eyes(face, 2), FACE_BOX)
        assert eyes.eye_openness == pytest.approx(0.07)

    def test_lid_shift_is_deviation(self, face):
        eyes = eye_analysis(shift_lids(face, 6), FACE_BOX)
        # 6 px over a 40 px wide eye
        assert eyes.left_eye_deviation == pytest.approx(0.15)
        assert eyes.right_eye_deviation == pytest.approx(0.15)

    def test_zero_width_eye(self, face):
        pts = face.copy()
        pts[39, 0] = pts[36, 0]
        with pytest.raises(LandmarkError):
            eye_analysis(pts, FACE_BOX)


class TestMouthAnalysis:
    def test_neutral_face(self, face):
        mouth = mouth_analysis(face, FACE_BOX)
        assert mouth.mouth_asymmetry == pytest.approx(0.0, abs=1e-9)
        assert mouth.jaw_tension == pytest.approx(0.02)
        assert mouth.mouth_tension == 0.0
        assert mouth.mouth_openness == pytest.approx(0.09)
        assert mouth.corner_lift == pytest.approx(0.01)

    def test_one_sided_corner_is_asymmetric(self, face):
        pts = face.copy()
        pts[54, 1] -= 6
        mouth = mouth_analysis(pts, FACE_BOX)
        assert mouth.mouth_asymmetry > 0.02

    def test_stretched_lips(self, face):
        pts = face.copy()
        pts[48, 0] -= 10
        pts[54, 0] += 10
        # width 80 / 200 = 0.40 -> 0.02 beyond relaxed
        assert mouth_analysis(pts, FACE_BOX).mouth_tension == pytest.approx(0.02)


class TestDegenerateGeometry:
    @pytest.mark.parametrize("analyzer", [eyebrow_analysis, eye_analysis, mouth_analysis])
    def test_too_few_points(self, analyzer, face):
        with pytest.raises(LandmarkError):
            analyzer(face[:40], FACE_BOX)

    @pytest.mark.parametrize("analyzer", [eyebrow_analysis, eye_analysis, mouth_analysis])
    def test_zero_box(self, analyzer, face):
        with pytest.raises(LandmarkError):
            analyzer(face, BoundingBox(0, 0, 0, 100))

    @pytest.mark.parametrize("analyzer", [eyebrow_analysis, eye_analysis, mouth_analysis])
    def test_non_finite(self, analyzer, face):
        pts = face.copy()
        pts[10, 0] = np.nan
        with pytest.raises(LandmarkError):
            analyzer(pts, FACE_BOX)

    def test_landmark_error_is_value_error(self):
        assert issubclass(LandmarkError, ValueError)


class TestLandmarkModifier:
    def test_neutral_face_is_neutral_for_happy(self, face):
        det = make_detection(landmarks=face)
        assert analyze_facial_landmarks(det, Emotion.HAPPY) == pytest.approx(1.0)

    def test_smile_supports_happy(self, face):
        det = make_detection(landmarks=move_mouth_corners(face, -4))
        assert analyze_facial_landmarks(det, Emotion.HAPPY) > 1.0
        assert analyze_facial_landmarks(det, Emotion.SAD) < 1.0

    @pytest.mark.parametrize("emotion", list(Emotion))
    def test_range(self, face, emotion):
        for pts in (face, raise_left_brow(face, 30), move_mouth_corners(face, 20)):
            value = analyze_facial_landmarks(make_detection(landmarks=pts), emotion)
            assert 0.5 <= value <= 2.0

    def test_raises_on_missing_landmarks(self):
        det = make_detection(landmarks=np.zeros((0, 2)))
        with pytest.raises(LandmarkError):
            analyze_facial_landmarks(det, Emotion.HAPPY)

    def test_zero_slope_disables_modifier(self, face):
        det = make_detection(landmarks=move_mouth_corners(face, -4))
        config = ModifierConfig(slope=0.0)
        assert analyze_facial_landmarks(det, Emotion.HAPPY, config) == 1.0

    def test_custom_range(self, face):
        det = make_detection(landmarks=move_mouth_corners(face, 20))
        config = ModifierConfig(min_modifier=0.9, max_modifier=1.1)
        for emotion in Emotion:
            assert 0.9 <= analyze_facial_landmarks(det, emotion, config) <= 1.1


class TestAdvancedEmotions:
    def test_no_pattern_returns_candidate(self, face):
        det = make_detection(landmarks=face)
        assert analyze_advanced_emotions(det, Emotion.HAPPY, 1.2) == (Emotion.HAPPY, 1.2)

    def test_sad_with_heavy_lids_and_frown_is_depressed(self, face):
        pts = open_eyes(move_mouth_corners(face, 4), -2)
        proposal = analyze_advanced_emotions(make_detection(landmarks=pts), Emotion.SAD, 1.0)
        assert proposal.emotion is Emotion.DEPRESSED
        assert proposal.score == pytest.approx(1.3)

    def test_fearful_with_darting_eyes_is_anxious(self, face):
        pts = shift_lids(open_eyes(face, 3), 6)
        proposal = analyze_advanced_emotions(make_detection(landmarks=pts), Emotion.FEARFUL, 1.0)
        assert proposal.emotion is Emotion.ANXIOUS

    def test_neutral_with_raised_brow_is_confused(self, face):
        pts = raise_left_brow(face, 14)
        proposal = analyze_advanced_emotions(make_detection(landmarks=pts), Emotion.NEUTRAL, 1.0)
        assert proposal.emotion is Emotion.CONFUSED
        assert proposal.score == pytest.approx(1.25)

    def test_thresholds_from_config(self, face):
        det = make_detection(landmarks=raise_left_brow(face, 14))

        strict = analyze_advanced_emotions(
            det, Emotion.NEUTRAL, 1.0, AdvancedConfig(confused_min_brow_asymmetry=1.0)
        )
        boosted = analyze_advanced_emotions(
            det, Emotion.NEUTRAL, 1.0, AdvancedConfig(confused_gain=2.0)
        )

        assert strict == (Emotion.NEUTRAL, 1.0)
        assert boosted == (Emotion.CONFUSED, 2.0)


class TestLandmarkAnalyzers:
    def test_run_ok(self, face):
        result = LandmarkAnalyzers().run("mouth", make_detection(landmarks=face))
        assert result.ok
        assert result.value.jaw_tension == pytest.approx(0.02)

    def test_run_captures_error(self):
        det = make_detection(landmarks=np.zeros((0, 2)))
        result = LandmarkAnalyzers().run("eye", det)
        assert not result.ok
        assert isinstance(result.error, LandmarkError)

    def test_run_captures_any_exception(self, face):
        def broken(landmarks, box):
            raise RuntimeError("boom")

        result = LandmarkAnalyzers(eyebrow=broken).run("eyebrow", make_detection(landmarks=face))
        assert isinstance(result.error, RuntimeError)

    def test_unknown_analyzer(self, face):
        with pytest.raises(KeyError):
            LandmarkAnalyzers().run("nose", make_detection(landmarks=face))

    def test_failure_is_traced(self):
        sink = MemorySink()
        ObservabilityHub.get_instance().configure(level=TraceLevel.NORMAL, sinks=[sink])

        LandmarkAnalyzers().run("mouth", make_detection(landmarks=np.zeros((0, 2))))

        records = sink.get_records_of(AnalyzerFailureRecord)
        assert len(records) == 1
        assert records[0].analyzer == "mouth"

    def test_unwrap_or_else(self):
        assert AnalyzerResult(value=3).unwrap_or_else(lambda e: 0) == 3
        assert AnalyzerResult(error=LandmarkError("x")).unwrap_or_else(lambda e: 0) == 0

    def test_advanced_tuple_is_normalized(self, face):
        analyzers = LandmarkAnalyzers(advanced=lambda d, e, s: ("confused", s * 2))
        result = analyzers.advanced_analysis(make_detection(landmarks=face), Emotion.NEUTRAL, 1.0)
        assert result.value.emotion is Emotion.CONFUSED
        assert result.value.score == 2.0
