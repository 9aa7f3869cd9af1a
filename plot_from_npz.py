#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from analytical import analytical_profile
from plots import create_profile_comparison, create_six_frame_summary, create_static_plots
from profile_io import load_run_npz


@dataclass(frozen=True)
class PlotConfig:
    npz_file: str
    out_base: str
    overwrite: bool
    summary6: bool
    compare: bool


def _build_arg_parser() -> argparse.ArgumentParser:
    examples = """Examples:
  # Render <basename>_surface.{png,jpeg} next to the .npz
  heat1d-plot data/alpha=0-499_h=0-1_K=1-0_crank-nicolson.npz

  # Put outputs in a specific directory with a new basename
  heat1d-plot data/run_ftcs.npz --output_dir images --basename run_ftcs

  # Also render the 6-slice summary and the comparison with the analytical solution
  heat1d-plot data/run_ftcs.npz --summary6 yes --compare yes
"""
    parser = argparse.ArgumentParser(
        description=(
            "Generate plots from a .npz saved by `heat1d-sim --save_data yes`.\n\n"
            "This is intended for batch workflows: run the simulation once, then\n"
            "render the heavy 3D plots later from the saved data."
        ),
        epilog=examples,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "npz_file",
        type=str,
        help="Input .npz created by heat1d-sim",
    )
    parser.add_argument(
        "--out_base",
        type=str,
        default="",
        help=(
            "Output base path (without extension). "
            "Default: input path with '.npz' stripped."
        ),
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default="",
        help="Output directory (used with --basename; overrides directory of --out_base if provided)",
    )
    parser.add_argument(
        "--basename",
        type=str,
        default="",
        help="Output basename (used with --output_dir)",
    )
    parser.add_argument(
        "--overwrite",
        choices=["yes", "no"],
        default="yes",
        help="Overwrite existing output images (default: yes)",
    )
    parser.add_argument(
        "--summary6",
        choices=["yes", "no"],
        default="no",
        help="Also render <out_base>_summary6.{png,jpeg} (default: no)",
    )
    parser.add_argument(
        "--compare",
        choices=["yes", "no"],
        default="no",
        help="Also render <out_base>_comparison.{png,jpeg} against the analytical solution (default: no)",
    )
    return parser


def _parse_args(argv: Optional[List[str]] = None) -> PlotConfig:
    parser = _build_arg_parser()
    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    npz_file = args.npz_file
    if not npz_file.endswith(".npz"):
        raise ValueError(f"Expected a .npz file, got: {npz_file!r}")
    if not os.path.exists(npz_file):
        raise FileNotFoundError(npz_file)

    out_base = (args.out_base or "").strip()
    output_dir = (args.output_dir or "").strip()
    basename = (args.basename or "").strip()

    if output_dir or basename:
        if not output_dir or not basename:
            raise ValueError("Use --output_dir and --basename together (or neither).")
        if os.sep in basename or (os.altsep and os.altsep in basename):
            raise ValueError("`--basename` must not contain path separators; use `--output_dir`.")
        os.makedirs(output_dir, exist_ok=True)
        out_base = os.path.join(output_dir, basename)

    if not out_base:
        out_base = os.path.splitext(npz_file)[0]

    return PlotConfig(
        npz_file=npz_file,
        out_base=out_base,
        overwrite=args.overwrite == "yes",
        summary6=args.summary6 == "yes",
        compare=args.compare == "yes",
    )


def _maybe_remove_existing(out_base: str, *, overwrite: bool) -> None:
    png_path = f"{out_base}_surface.png"
    jpeg_path = f"{out_base}_surface.jpeg"
    if overwrite:
        return
    existing = [p for p in (png_path, jpeg_path) if os.path.exists(p)]
    if existing:
        raise FileExistsError(
            "Refusing to overwrite existing outputs (use --overwrite yes): "
            + ", ".join(existing)
        )


def main(argv: Optional[List[str]] = None) -> None:
    cfg = _parse_args(argv)

    data = load_run_npz(cfg.npz_file)
    config = data.get("config", {})
    scheme = data["scheme"]

    x_values = np.asarray(data["x_values"], dtype=np.float64)
    t_values = np.asarray(data["t_values"], dtype=np.float64)
    u_num = np.asarray(data["u_num"], dtype=np.float64)
    setup_description = (
        f"{scheme}: alpha={config.get('alpha')}, h={config.get('h')}, K={config.get('K')}"
    )

    _maybe_remove_existing(cfg.out_base, overwrite=cfg.overwrite)

    create_static_plots(t_values, x_values, u_num, setup_description, cfg.out_base)

    if cfg.summary6:
        create_six_frame_summary(x_values, t_values, u_num, setup_description, cfg.out_base)
        print(f"wrote: {cfg.out_base}_summary6.png")
        print(f"wrote: {cfg.out_base}_summary6.jpeg")

    if cfg.compare:
        K = float(config.get("K", 1.0))
        t_final = float(t_values[-1])
        create_profile_comparison(
            x_values,
            {scheme: u_num[:, -1]},
            analytical_profile(x_values, K * t_final),
            f"{setup_description}, t={t_final:.4g}",
            f"{cfg.out_base}_comparison",
        )
        print(f"wrote: {cfg.out_base}_comparison.png")
        print(f"wrote: {cfg.out_base}_comparison.jpeg")


if __name__ == "__main__":
    main()
