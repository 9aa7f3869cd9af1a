#!/usr/bin/env python3
from __future__ import annotations

from typing import Union

import numpy as np

# Truncation bound of the Fourier series. The n-th term carries
# exp(-(n*pi)^2 t), so for t >= 1e-3 the tail beyond n=200 is far below
# double precision; only t -> 0 needs more terms.
SERIES_TERMS = 200

ArrayLike = Union[float, np.ndarray]


def _series_coefficients(n_terms: int) -> tuple[np.ndarray, np.ndarray]:
    if n_terms < 1:
        raise ValueError("n_terms must be >= 1")
    n = np.arange(1, int(n_terms) + 1, dtype=np.float64)
    return n, np.sin(n * np.pi / 2.0) / n**2


def fourier_series_solution(x: float, t: float, *, n_terms: int = SERIES_TERMS) -> float:
    """
    Truncated Fourier series of the heat equation on (0, 1) with zero Dirichlet
    boundaries and the tent initial condition f(x) = 1 - |2x - 1|:

      U(x,t) = 8/pi^2 * sum_{n=1}^{M} sin(n*pi/2) / n^2 * sin(n*pi*x) * exp(-(n*pi)^2 t)
    """
    if t < 0:
        raise ValueError("t must be >= 0")
    n, coeff = _series_coefficients(n_terms)
    terms = coeff * np.sin(n * np.pi * float(x)) * np.exp(-((n * np.pi) ** 2) * float(t))
    return float(np.sum(terms) * 8.0 / np.pi**2)


def analytical_profile(x_values: np.ndarray, t: float, *, n_terms: int = SERIES_TERMS) -> np.ndarray:
    """Evaluate the series on a whole grid at a single time."""
    if t < 0:
        raise ValueError("t must be >= 0")
    x = np.asarray(x_values, dtype=np.float64)
    n, coeff = _series_coefficients(n_terms)
    decay = coeff * np.exp(-((n * np.pi) ** 2) * float(t))
    modes = np.sin(np.pi * np.outer(x, n))
    return modes.dot(decay) * 8.0 / np.pi**2


def analytical_time_series(x: float, t_values: np.ndarray, *, n_terms: int = SERIES_TERMS) -> np.ndarray:
    """Evaluate the series at one point x for a sequence of times."""
    t = np.asarray(t_values, dtype=np.float64)
    if t.size and float(np.min(t)) < 0:
        raise ValueError("t_values must be >= 0")
    n, coeff = _series_coefficients(n_terms)
    spatial = coeff * np.sin(n * np.pi * float(x))
    decay = np.exp(-np.outer(t, (n * np.pi) ** 2))
    return decay.dot(spatial) * 8.0 / np.pi**2


def generate_times(steps: int, t_min: float, t_max: float) -> np.ndarray:
    """`steps` evenly spaced times from t_min to t_max (both included)."""
    if steps < 2:
        raise ValueError("steps must be >= 2")
    if t_max < t_min:
        raise ValueError("t_max must be >= t_min")
    return np.linspace(float(t_min), float(t_max), int(steps), dtype=np.float64)
