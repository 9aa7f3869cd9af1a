#!/usr/bin/env python3
"""
Analytical U vs t data for the 1D heat equation.

Evaluates the truncated Fourier series at a fixed point x for `steps` evenly
spaced times in [t_min, t_max] and writes the two-column file
`<output_dir>/<fname>` ("t value" per line).

Example:
    python analytical_series.py --steps 100 --t_min 0 --t_max 1 --x 0.5
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from tabulate import tabulate

from analytical import SERIES_TERMS, analytical_time_series, generate_times
from profile_io import DEFAULT_OUTPUT_DIR, export_profile


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("--steps", type=int, default=100, help="Number of time samples (default: 100)")
    parser.add_argument("--t_min", type=float, default=0.0, help="First time (default: 0.0)")
    parser.add_argument("--t_max", type=float, default=1.0, help="Last time (default: 1.0)")
    parser.add_argument("--x", type=float, default=0.5, help="Point of the bar (default: 0.5)")
    parser.add_argument(
        "--n_terms",
        type=int,
        default=SERIES_TERMS,
        help=f"Number of Fourier terms (default: {SERIES_TERMS})",
    )
    parser.add_argument(
        "--normalize",
        choices=["yes", "no"],
        default="no",
        help="Divide the values by their maximum (default: no)",
    )
    parser.add_argument("--output_dir", type=str, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--fname", type=str, default="U_vs_t_analytical.data")
    parser.add_argument(
        "--verbose",
        choices=["yes", "no"],
        default="no",
        help="Print the computed values (default: no)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_arg_parser()
    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    t = generate_times(args.steps, args.t_min, args.t_max)
    U = analytical_time_series(args.x, t, n_terms=args.n_terms)

    if args.verbose == "yes":
        print(tabulate(list(zip(t, U)), headers=["t", f"U({args.x}, t)"], tablefmt="grid", floatfmt=".6g"))

    path = export_profile(
        t,
        U,
        args.fname,
        normalize=args.normalize == "yes",
        output_dir=args.output_dir,
    )
    print(f"exporting U vs t data... {{{path}}}")


if __name__ == "__main__":
    main()
