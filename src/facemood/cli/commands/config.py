"""Config command for facemood CLI."""

from facemood.cli.utils import load_config


def run_config(args):
    """Print the effective engine config (defaults merged with --config) as YAML."""
    config = load_config(args)
    print(config.to_yaml(), end="")
