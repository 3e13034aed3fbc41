"""Command-line interface for facemood."""

import sys
import argparse
import logging


def _add_config_arg(parser):
    parser.add_argument(
        "--config", type=str, metavar="PATH",
        help="Path to engine config YAML file"
    )


def _add_trace_args(parser):
    """Add --trace, --trace-output args to a parser."""
    parser.add_argument("--trace", choices=["off", "minimal", "normal", "verbose"], default="off")
    parser.add_argument("--trace-output", type=str, help="Output file for trace records (JSONL)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="facemood",
        description="facemood - Facial emotion classification engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  facemood info                               # Emotions, rules and constants
  facemood config > engine.yaml               # Dump default config
  facemood config --config engine.yaml        # Validate and dump a config
  facemood replay frames.jsonl                # Classify recorded detections
  facemood replay frames.jsonl --trace verbose --trace-output trace.jsonl
""",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # info command
    info_parser = subparsers.add_parser(
        "info",
        help="Show emotions, rules and scoring constants",
    )
    _add_config_arg(info_parser)

    # config command
    config_parser = subparsers.add_parser(
        "config",
        help="Print the effective engine config as YAML",
    )
    _add_config_arg(config_parser)

    # replay command
    replay_parser = subparsers.add_parser(
        "replay",
        help="Classify recorded detections from a JSONL file",
        description="Each line: {\"t\": seconds, \"detections\": [detection, ...]}",
    )
    replay_parser.add_argument("path", help="Path to JSONL file")
    replay_parser.add_argument(
        "--json", action="store_true", help="Print one JSON object per frame"
    )
    _add_config_arg(replay_parser)
    _add_trace_args(replay_parser)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    from facemood.cli import commands

    if args.command == "info":
        commands.run_info(args)

    elif args.command == "config":
        commands.run_config(args)

    elif args.command == "replay":
        commands.run_replay(args)

    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
