#!/usr/bin/env python3
from setuptools import setup

setup(
    name="heat1d-sim",
    version="0.1.0",
    description="FTCS vs Crank-Nicolson for the 1D heat equation",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
    py_modules=[
        "analytical",
        "analytical_series",
        "heat1d",
        "heat_errors",
        "heat_simulation",
        "plot_from_npz",
        "plots",
        "profile_io",
        "tridiagonal",
    ],
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib",
        "tabulate",
        "tqdm",
        "questionary",
        "termplotlib",
        "pyyaml",
    ],
    entry_points={
        "console_scripts": [
            "heat1d=heat1d:main",
            "heat1d-sim=heat_simulation:main",
            "heat1d-analytical=analytical_series:main",
            "heat1d-plot=plot_from_npz:main",
        ]
    },
    extras_require={
        "test": [
            "pytest",
        ],
        "completion": [
            "argcomplete",
        ],
        "docs": [
            "sphinx>=3.0",
            "sphinx-rtd-theme",
        ],
    },
)
