"""CLI surface: argparse router and rich rendering."""

from act_engine.ui.cli import CLIError, build_parser, run_cli
from act_engine.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIError", "CLIRenderer", "build_parser", "create_renderer", "run_cli"]
