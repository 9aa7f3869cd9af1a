#!/usr/bin/env python3
from __future__ import annotations

import argparse
import importlib
import os
import sys
from contextlib import contextmanager
from typing import Iterable, Optional


def _distribution_version() -> str:
    try:
        from importlib.metadata import PackageNotFoundError, version  # type: ignore
    except ImportError:  # pragma: no cover
        return ""
    try:
        return str(version("heat1d-sim"))
    except PackageNotFoundError:  # pragma: no cover
        return ""


def _build_parser() -> argparse.ArgumentParser:
    version_text = _distribution_version()
    version_line = f" (v{version_text})" if version_text else ""
    examples = """Examples:
  # Overview
  heat1d --help

  # Compare FTCS and Crank-Nicolson (same as heat1d-sim)
  heat1d sim --alpha 0.499 --h 0.1 --K 1.0 --scheme both --confirm yes

  # Analytical U vs t at the middle of the bar (same as heat1d-analytical)
  heat1d analytical --steps 100 --t_min 0 --t_max 1 --x 0.5

  # Render plots from a saved .npz (same as heat1d-plot)
  heat1d plot data/alpha=0-499_h=0-1_K=1-0_ftcs.npz --summary6 yes
"""
    parser = argparse.ArgumentParser(
        prog="heat1d",
        description=(
            "1D heat equation toolbox" + version_line + ".\n\n"
            "This command provides a single entry point to:\n"
            "- run the FTCS / Crank-Nicolson simulations,\n"
            "- tabulate the analytical Fourier-series solution,\n"
            "- render plots from saved .npz outputs.\n\n"
            "The standalone commands remain available:\n"
            "  heat1d-sim, heat1d-analytical, heat1d-plot"
        ),
        epilog=examples,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print installed package version and exit",
    )
    sub = parser.add_subparsers(dest="cmd")
    sub.add_parser(
        "sim",
        add_help=False,
        help="Run simulations (alias for `heat1d-sim`)",
    )
    sub.add_parser(
        "analytical",
        add_help=False,
        help="Analytical U vs t data (alias for `heat1d-analytical`)",
    )
    sub.add_parser(
        "plot",
        add_help=False,
        help="Render plots from a saved .npz (alias for `heat1d-plot`)",
    )
    return parser


@contextmanager
def _patched_argv(program: str, argv: Iterable[str]):
    old_argv = sys.argv
    sys.argv = [program, *list(argv)]
    try:
        yield
    finally:
        sys.argv = old_argv


def _delegate(module_name: str, program: str, argv: list[str]) -> None:
    module = importlib.import_module(module_name)
    main_func = getattr(module, "main", None)
    if not callable(main_func):
        raise RuntimeError(f"Expected {module_name}.main() to exist")
    with _patched_argv(program, argv):
        main_func()


COMMANDS = {
    "sim": ("heat_simulation", "heat1d-sim"),
    "analytical": ("analytical_series", "heat1d-analytical"),
    "plot": ("plot_from_npz", "heat1d-plot"),
}


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)

    # Everything after the subcommand is left unparsed and forwarded as-is.
    args, forwarded = parser.parse_known_args(sys.argv[1:] if argv is None else argv)
    if args.version:
        v = _distribution_version() or "unknown"
        print(f"heat1d-sim {v}")
        return

    cmd = getattr(args, "cmd", None)
    if not cmd:
        parser.print_help(sys.stderr)
        return

    if cmd == "plot" and not forwarded and os.environ.get("_ARGCOMPLETE") != "1":
        forwarded = ["--help"]

    if cmd not in COMMANDS:
        raise RuntimeError(f"Unhandled command: {cmd}")
    module_name, program = COMMANDS[cmd]
    _delegate(module_name, program, forwarded)


if __name__ == "__main__":
    main()
