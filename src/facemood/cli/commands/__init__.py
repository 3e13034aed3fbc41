"""CLI command handlers."""

from facemood.cli.commands.info import run_info
from facemood.cli.commands.config import run_config
from facemood.cli.commands.replay import run_replay

__all__ = [
    "run_info",
    "run_config",
    "run_replay",
]
