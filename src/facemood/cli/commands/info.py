"""Info command for facemood CLI.

Shows the emotion labels, rule order and scoring constants.
"""

from facemood.cli.utils import load_config
from facemood.rules import default_rules
from facemood.types import Emotion


def run_info(args):
    """Show emotions, rules and the effective scoring constants."""
    config = load_config(args)

    print("facemood - Engine Information")
    print("=" * 60)
    _print_version_info()

    print("\n[Emotions]")
    print("-" * 60)
    for emotion in Emotion:
        print(f"  {emotion.emoji}  {emotion.value}")

    print("\n[Rules] (evaluation order)")
    print("-" * 60)
    print("  1. contempt_anger  (rescales scores before scoring)")
    for i, rule in enumerate(default_rules(config.rules), start=2):
        print(f"  {i}. {rule.name:<15} -> {rule.emotion.value}")

    scoring = config.scoring
    print("\n[Scoring]")
    print("-" * 60)
    print(f"  noise floor:        {scoring.noise_floor}")
    print(f"  initial threshold:  {scoring.initial_threshold}")
    print(f"  global gain:        {scoring.global_gain}")
    print(f"  landmark gain:      {scoring.landmark_gain}")
    print(f"  primary boost:      {scoring.primary_boost}"
          f"  ({', '.join(e.value for e in scoring.primary_emotions)})")
    print(f"  confidence scale:   {scoring.confidence_scale} (max {scoring.max_confidence})")
    print("  boosts:             " + ", ".join(
        f"{e.value}={b}" for e, b in scoring.emotion_boosts.items()
    ))

    modifier, advanced = config.modifier, config.advanced
    print("\n[Landmarks]")
    print("-" * 60)
    print(f"  modifier range:     [{modifier.min_modifier}, {modifier.max_modifier}]"
          f"  slope {modifier.slope}")
    print(f"  advanced gains:     depressed={advanced.depressed_gain}, "
          f"anxious={advanced.anxious_gain}, confused={advanced.confused_gain}")

    print("\n[Stabilizer / Sampler]")
    print("-" * 60)
    print(f"  validity window:    {config.stabilizer.validity_window_sec}s")
    print(f"  sample interval:    {config.sampler.interval_sec}s")
    print(f"  detector timeout:   {config.sampler.detect_timeout_sec}s")
    print(f"  detector input:     {config.sampler.input_size}px, "
          f"score >= {config.sampler.score_threshold}")


def _print_version_info():
    import cv2
    import numpy

    from facemood import __version__

    print(f"  facemood: {__version__}")
    print(f"  numpy:    {numpy.__version__}")
    print(f"  opencv:   {cv2.__version__}")
