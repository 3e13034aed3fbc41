"""Replay command for facemood CLI.

Feeds recorded detections through the classifier and stabilizer using the
recorded timestamps as the clock, so stabilizer expiry behaves exactly as
it did live.
"""

import json
import logging
import sys
from pathlib import Path

from facemood.classifier import EmotionClassifier
from facemood.cli.utils import load_config, setup_observability
from facemood.stabilizer import TemporalStabilizer
from facemood.types import DetectionFormatError, RawDetection

logger = logging.getLogger(__name__)


class ReplayClock:
    """Clock returning the timestamp of the frame being replayed."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now


def run_replay(args):
    """Classify each recorded frame and print per-frame and stable emotions."""
    path = Path(args.path)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        sys.exit(1)

    config = load_config(args)
    hub, file_sink = setup_observability(
        getattr(args, "trace", "off"), getattr(args, "trace_output", None)
    )

    clock = ReplayClock()
    classifier = EmotionClassifier(config)
    stabilizer = TemporalStabilizer(config.stabilizer, clock=clock)

    frames = 0
    classified = 0
    skipped_lines = 0
    counts = {}

    try:
        with open(path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                    t = float(record.get("t", clock.now))
                    detections = [RawDetection.from_dict(d) for d in record.get("detections", [])]
                except (json.JSONDecodeError, DetectionFormatError, TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"Skipping line {line_no}: {e}")
                    skipped_lines += 1
                    continue

                clock.now = t
                frames += 1
                result = classifier.classify(detections)
                stabilizer.accept(result)
                if result is not None:
                    classified += 1
                    counts[result.emotion.value] = counts.get(result.emotion.value, 0) + 1

                _print_frame(args, t, len(detections), result, stabilizer)
    finally:
        if file_sink is not None or hub.enabled:
            hub.shutdown()

    if not getattr(args, "json", False):
        print("-" * 60)
        print(f"Frames: {frames}  classified: {classified}  skipped lines: {skipped_lines}")
        for emotion, count in sorted(counts.items(), key=lambda item: -item[1]):
            print(f"  {emotion:<10} {count}")


def _print_frame(args, t, face_count, result, stabilizer):
    stable = stabilizer.stable_emotion
    if getattr(args, "json", False):
        print(json.dumps({
            "t": t,
            "faces": face_count,
            "emotion": result.emotion.value if result else None,
            "confidence": round(result.confidence, 4) if result else None,
            "stable": stable.value,
        }))
        return

    frame_label = (
        f"{result.emotion.value:<10} {result.confidence:.2f}" if result else f"{'-':<10} ----"
    )
    print(f"t={t:8.2f}s  faces={face_count}  frame={frame_label}  stable={stable.value}")
