#!/usr/bin/env python3
from __future__ import annotations

import os
import tempfile
from typing import Dict, List

# Matplotlib writes cache files (including TeX-related caches when usetex=True).
# Ensure a writable cache directory even in sandboxed / restricted environments.
if "MPLCONFIGDIR" not in os.environ:
    mpl_config_dir = os.path.join(tempfile.gettempdir(), "heat1d-sim-mplconfig")
    os.makedirs(mpl_config_dir, exist_ok=True)
    os.environ["MPLCONFIGDIR"] = mpl_config_dir

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import rc
from matplotlib.ticker import FormatStrFormatter, ScalarFormatter


USE_TEX = os.environ.get("HEAT1D_USETEX", "no").strip().lower() not in (
    "0",
    "no",
    "false",
)
rc("text", usetex=USE_TEX)


def _ensure_parent(file_base_name: str) -> None:
    parent = os.path.dirname(file_base_name)
    if parent:
        os.makedirs(parent, exist_ok=True)


def create_profile_comparison(
    x_values: np.ndarray,
    profiles: Dict[str, np.ndarray],
    analytical: np.ndarray,
    setup_description: str,
    file_base_name: str,
) -> None:
    """
    Overlay the final profile of each scheme on the analytical solution and
    save <file_base_name>.{png,jpeg}.
    """
    _ensure_parent(file_base_name)
    fig, ax = plt.subplots(1, 1, figsize=(7.5, 4.8), dpi=300)

    markers = ["o", "s", "^", "d"]
    for (label, values), marker in zip(profiles.items(), markers):
        ax.plot(x_values, values, marker=marker, markersize=3, linewidth=1.2, label=label)
    ax.plot(x_values, analytical, color="black", linestyle="--", linewidth=1.0, label="analytical")

    if USE_TEX:
        ax.set_xlabel(r"$x$")
        ax.set_ylabel(r"$U(x,t)$")
    else:
        ax.set_xlabel("x")
        ax.set_ylabel("U(x,t)")
    ax.set_title(setup_description, fontsize=10)

    y_formatter = ScalarFormatter(useOffset=False)
    ax.yaxis.set_major_formatter(y_formatter)
    ax.legend(loc="best", fontsize=8, frameon=False)

    plt.tight_layout()
    fig.savefig(f"{file_base_name}.png", bbox_inches="tight")
    fig.savefig(f"{file_base_name}.jpeg", bbox_inches="tight")
    plt.close(fig)


def create_six_frame_summary(
    x_values: np.ndarray,
    t_values: np.ndarray,
    u_num: np.ndarray,
    setup_description: str,
    file_base_name: str,
) -> None:
    """Six profiles at 0%, 20%, ..., 100% of the recorded time span."""
    if t_values.size == 0:
        return
    _ensure_parent(file_base_name)
    t_end = float(t_values[-1])
    fractions = np.linspace(0.0, 1.0, 6)
    targets = t_end * fractions
    indices: List[int] = []
    for t_target in targets:
        idx = int(np.argmin(np.abs(t_values - t_target)))
        indices.append(idx)

    u_min = float(np.min(u_num))
    u_max = float(np.max(u_num))
    u_pad = 0.05 * max(1e-12, u_max - u_min)

    cmap = plt.get_cmap("viridis")
    color_positions = np.linspace(0.15, 0.9, len(indices))
    colors = [cmap(float(p)) for p in color_positions]

    fig, ax_u = plt.subplots(1, 1, figsize=(7.5, 4.8), dpi=300)
    for idx, frac, color in zip(indices, fractions, colors):
        t_here = float(t_values[idx])
        pct = int(round(float(frac) * 100))
        if USE_TEX:
            label = rf"{pct}\% ($t={t_here:.4g}$)"
        else:
            label = f"{pct}% (t={t_here:.4g})"
        ax_u.plot(x_values, u_num[:, idx], color=color, linewidth=1.6, label=label)

    if USE_TEX:
        ax_u.set_xlabel(r"$x$")
        ax_u.set_ylabel(r"$U(x,t)$")
    else:
        ax_u.set_xlabel("x")
        ax_u.set_ylabel("U(x,t)")
    ax_u.set_title(setup_description, fontsize=11)

    ax_u.set_ylim(u_min - u_pad, u_max + u_pad)
    y_formatter = ScalarFormatter(useOffset=False)
    y_formatter.set_scientific(False)
    ax_u.yaxis.set_major_formatter(y_formatter)

    ax_u.legend(loc="best", fontsize=8, frameon=False)

    plt.tight_layout()
    fig.savefig(f"{file_base_name}_summary6.png", bbox_inches="tight")
    fig.savefig(f"{file_base_name}_summary6.jpeg", bbox_inches="tight")
    plt.close(fig)


def create_static_plots(
    t_mesh: np.ndarray,
    x_mesh: np.ndarray,
    u_data: np.ndarray,
    SetupDes: str,
    FileBaseName: str,
) -> None:
    """3D surface of U over (t, x), saved as <FileBaseName>_surface.{png,jpeg}."""
    _ensure_parent(FileBaseName)
    fig_3d = plt.figure(figsize=(8, 6), dpi=300)

    ax_3d_u = fig_3d.add_subplot(111, projection="3d")
    T_grid, X_grid = np.meshgrid(t_mesh, x_mesh, indexing="xy")
    ax_3d_u.plot_surface(T_grid, X_grid, u_data, cmap="viridis", alpha=0.8)

    Zero_grid = np.full_like(T_grid, 0)
    ax_3d_u.plot_surface(
        T_grid,
        X_grid,
        Zero_grid,
        alpha=0.2,
        rstride=100,
        cstride=100,
        color="lightgray",
    )

    ax_3d_u.set_xlabel(r"Time $t$")
    ax_3d_u.set_ylabel(r"Space $x$")
    u_min, u_max = float(u_data.min()), float(u_data.max())
    if u_max > u_min:
        ax_3d_u.set_zlim(u_min, u_max)
        ax_3d_u.set_zticks(np.linspace(u_min, u_max, 5))
    ax_3d_u.zaxis.set_major_formatter(FormatStrFormatter("%.5f"))
    ax_3d_u.set_title("Solution U(t,x)", pad=10)

    fig_3d.suptitle(SetupDes, fontsize=10)
    plt.tight_layout()

    fig_3d.savefig(f"{FileBaseName}_surface.png", bbox_inches="tight")
    fig_3d.savefig(f"{FileBaseName}_surface.jpeg", bbox_inches="tight")
    plt.close(fig_3d)
    print(
        f"""
    Output files saved:
    - Image: {FileBaseName}_surface.png
    - Image: {FileBaseName}_surface.jpeg
    """
    )
