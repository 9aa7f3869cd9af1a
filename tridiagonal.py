#!/usr/bin/env python3
"""
Tridiagonal linear systems for the Crank-Nicolson scheme.

The system rows read

    a[i] * x[i-1] + b[i] * x[i] + c[i] * x[i+1] = rhs[i],

with all three diagonals stored at full length N; a[0] and c[N-1] are never
used. The Crank-Nicolson discretization has constant coefficients
a = c = -alpha/2 and b = 1 + alpha.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.sparse import diags

from heat_errors import ConfigurationError, SingularSystemError


@dataclass(frozen=True)
class TridiagonalSystem:
    """
    Constant left-hand side of the implicit step.

    Attributes:
    - a (np.ndarray): Sub-diagonal, length N (a[0] unused).
    - b (np.ndarray): Main diagonal, length N.
    - c (np.ndarray): Super-diagonal, length N (c[N-1] unused).
    """

    a: np.ndarray
    b: np.ndarray
    c: np.ndarray

    @property
    def size(self) -> int:
        return int(self.b.shape[0])

    def solve(self, rhs: np.ndarray) -> np.ndarray:
        return thomas_solve(self.a, self.b, self.c, rhs)

    def matrix(self):
        return tridiagonal_matrix(self.a, self.b, self.c)


def crank_nicolson_system(alpha: float, N: int) -> TridiagonalSystem:
    """Build the fixed (a, b, c) diagonals of the Crank-Nicolson step."""
    if N < 2:
        raise ConfigurationError(f"A tridiagonal system needs at least 2 rows, got N={N}")
    sub = np.full(N, -alpha / 2.0, dtype=np.float64)
    main = np.full(N, 1.0 + alpha, dtype=np.float64)
    sup = np.full(N, -alpha / 2.0, dtype=np.float64)
    for arr in (sub, main, sup):
        arr.setflags(write=False)
    return TridiagonalSystem(a=sub, b=main, c=sup)


def _check_lengths(a: np.ndarray, b: np.ndarray, c: np.ndarray, rhs: np.ndarray) -> int:
    n = b.shape[0]
    if n == 0:
        raise ConfigurationError("Cannot solve an empty tridiagonal system")
    for name, arr in (("a", a), ("c", c), ("rhs", rhs)):
        if arr.shape[0] != n:
            raise ConfigurationError(
                f"Length of {name} ({arr.shape[0]}) does not match the main diagonal ({n})"
            )
    return n


def thomas_solve(a, b, c, rhs) -> np.ndarray:
    """
    Solve a tridiagonal system with the Thomas algorithm (forward elimination
    followed by back substitution). Inputs are left untouched.

    Parameters:
    - a (array-like): Sub-diagonal of length N; a[0] is ignored.
    - b (array-like): Main diagonal of length N.
    - c (array-like): Super-diagonal of length N; c[N-1] is ignored.
    - rhs (array-like): Right-hand side of length N.

    Returns:
    - np.ndarray: Solution vector of length N.

    Raises:
    - ConfigurationError: If the four vectors do not share the same length.
    - SingularSystemError: If a pivot is exactly zero.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    c = np.asarray(c, dtype=np.float64)
    rhs = np.asarray(rhs, dtype=np.float64)
    n = _check_lengths(a, b, c, rhs)

    c_prime = np.empty(n, dtype=np.float64)
    u_prime = np.empty(n, dtype=np.float64)

    if b[0] == 0.0:
        raise SingularSystemError(0, float(b[0]))
    c_prime[0] = c[0] / b[0]
    u_prime[0] = rhs[0] / b[0]

    # Forward elimination
    for i in range(1, n):
        pivot = b[i] - c_prime[i - 1] * a[i]
        if pivot == 0.0:
            raise SingularSystemError(i, float(pivot))
        beta = 1.0 / pivot
        c_prime[i] = beta * c[i]
        u_prime[i] = beta * (rhs[i] - u_prime[i - 1] * a[i])

    # Back substitution
    x = np.empty(n, dtype=np.float64)
    x[n - 1] = u_prime[n - 1]
    for i in range(n - 2, -1, -1):
        x[i] = u_prime[i] - c_prime[i] * x[i + 1]

    return x


def tridiagonal_matrix(a, b, c):
    """
    Sparse CSR matrix equivalent to the (a, b, c) diagonals, with a[0] and
    c[N-1] dropped.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    c = np.asarray(c, dtype=np.float64)
    _check_lengths(a, b, c, b)
    if b.shape[0] == 1:
        return diags([b], [0], format="csr")
    return diags([a[1:], b, c[:-1]], [-1, 0, 1], format="csr")


def print_system(system: TridiagonalSystem, rhs: np.ndarray, solution: np.ndarray) -> None:
    """Print the dense matrix, right-hand side, solution and residual."""
    A = system.matrix()
    A_dense = A.toarray()
    print("\nMatrix A:")
    print("-" * 50)
    for i in range(system.size):
        row = [f"{x:8.3f}" for x in A_dense[i]]
        print(f"Row {i:2d}: {' '.join(row)}")
    print("-" * 50)
    row = [f"{x:8.3f}" for x in rhs]
    print(f"U* : {' '.join(row)}")
    row = [f"{x:8.3f}" for x in solution]
    print(f"U  : {' '.join(row)}")
    residual = float(np.max(np.abs(A.dot(solution) - rhs)))
    print(f"max |A U - U*| = {residual:.3e}")
    print("-" * 50 + "\n")
