#!/usr/bin/env python3
from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid grid/physical parameters or inconsistent vector sizes."""


class SingularSystemError(ArithmeticError):
    """A zero pivot was hit while eliminating a tridiagonal system."""

    def __init__(self, row: int, pivot: float):
        super().__init__(f"Zero pivot at row {row} (pivot={pivot!r}); the tridiagonal system is singular.")
        self.row = row
        self.pivot = pivot
