#!/usr/bin/env python3
from __future__ import annotations

import json
import os
from typing import Any

import numpy as np

from heat_errors import ConfigurationError

DEFAULT_OUTPUT_DIR = "data"


def normalize_vector(values: np.ndarray) -> np.ndarray:
    """Return a copy of `values` divided by its maximum element."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise ConfigurationError("Cannot normalize an empty vector")
    peak = float(np.max(arr))
    if peak == 0.0:
        raise ConfigurationError("Cannot normalize a vector whose maximum is zero")
    return arr / peak


def export_profile(
    x_values: np.ndarray,
    y_values: np.ndarray,
    fname: str,
    *,
    normalize: bool = False,
    output_dir: str = DEFAULT_OUTPUT_DIR,
) -> str:
    """
    Write (x, y) pairs as two whitespace-separated columns, one grid point per
    line, to `output_dir/fname`.

    The arrays passed in are never modified. Size problems are reported before
    anything touches the filesystem; an OSError from opening the file is left
    to the caller.

    Returns:
    - str: Path of the written file.
    """
    x = np.asarray(x_values, dtype=np.float64)
    y = np.asarray(y_values, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1:
        raise ConfigurationError("export_profile expects 1D vectors")
    if x.shape[0] != y.shape[0]:
        raise ConfigurationError(
            f"Please resize the x vector to {y.shape[0]} elements for {fname!r} (got {x.shape[0]})"
        )
    if normalize:
        y = normalize_vector(y)

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, fname) if output_dir else fname
    np.savetxt(path, np.column_stack([x, y]), fmt="%.12g", delimiter=" ")
    return path


def load_profile(path: str) -> tuple[np.ndarray, np.ndarray]:
    data = np.loadtxt(path, dtype=np.float64, ndmin=2)
    return data[:, 0], data[:, 1]


def _downsample_time_indices(n_frames: int, max_frames: int) -> np.ndarray:
    if max_frames <= 0:
        raise ValueError("max_frames must be positive")
    if n_frames <= max_frames:
        return np.arange(n_frames, dtype=np.int64)
    raw = np.linspace(0, n_frames - 1, num=max_frames)
    idx = np.unique(np.round(raw).astype(np.int64))
    if idx[0] != 0:
        idx = np.insert(idx, 0, 0)
    if idx[-1] != n_frames - 1:
        idx = np.append(idx, n_frames - 1)
    return idx


def save_run_npz(
    filename: str,
    *,
    config_metadata: dict[str, Any],
    scheme: str,
    tau: float,
    x_values: np.ndarray,
    t_values: np.ndarray,
    u_num: np.ndarray,
    max_frames: int = 400,
) -> str:
    """
    Save the snapshots of one run. `u_num` has shape (N, n_snapshots), one
    column per entry of `t_values`.
    """
    u_num = np.asarray(u_num, dtype=np.float64)
    t_values = np.asarray(t_values, dtype=np.float64)
    if u_num.ndim != 2 or u_num.shape[1] != t_values.shape[0]:
        raise ConfigurationError("u_num must have one column per snapshot time")
    idx = _downsample_time_indices(int(t_values.shape[0]), int(max_frames))
    t_saved = t_values[idx]
    u_saved = u_num[:, idx]
    step_indices = np.round(t_saved / float(tau)).astype(np.int64)

    config_json = json.dumps(config_metadata, sort_keys=True)
    np.savez_compressed(
        filename,
        schema_version=np.asarray(1, dtype=np.int64),
        config_json=np.asarray(config_json),
        scheme=np.asarray(scheme),
        tau=np.asarray(tau, dtype=np.float64),
        x_values=np.asarray(x_values, dtype=np.float64),
        t_values=np.asarray(t_saved, dtype=np.float64),
        u_num=u_saved,
        downsample_indices=np.asarray(idx, dtype=np.int64),
        step_indices=np.asarray(step_indices, dtype=np.int64),
    )
    return filename


def load_run_npz(filename: str) -> dict:
    with np.load(filename, allow_pickle=False) as data:
        out = {k: data[k] for k in data.files}
    out["schema_version"] = int(out["schema_version"].item())
    out["config"] = json.loads(str(out["config_json"].item()))
    out["config_json"] = str(out["config_json"].item())
    out["scheme"] = str(out["scheme"].item())
    out["tau"] = float(out["tau"].item())
    return out
