#!/usr/bin/env python3
"""
1D Heat Equation Simulation Tool

This script solves the heat (diffusion) equation u_t = K u_xx on the bar [0, 1]
with zero Dirichlet boundaries, starting from a tent-shaped temperature profile.
Two finite-difference schemes are compared against the truncated Fourier series
of the exact solution:

    - FTCS (Forward-Time-Centered-Space), explicit, stable for alpha < 1/2,
    - Crank-Nicolson, implicit, solved with the Thomas algorithm.

Usage:
    python heat_simulation.py [options]

Parameters:
    Model Parameters:
    --alpha FLOAT     Stability parameter K*tau/h^2 (default: 0.499)
    --h FLOAT         Spatial step, 0 < h <= 1 (default: 0.1)
    --K FLOAT         Diffusivity (default: 1.0)

    Simulation Parameters:
    --scheme STR      ftcs, crank-nicolson or both (default: both)
    --record_every INT  Keep a snapshot every n steps, 0 for automatic (default: 0)

    Output Control:
    --config FILE     Load defaults from YAML (CLI overrides)
    --confirm         Skip confirmation prompt if set to yes (default: no)
    --normalize       Divide exported profiles by their maximum (default: no)
    --output_dir DIR  Directory of the exported .data files (default: data)
    --save_data       Save snapshots to .npz (default: no)
    --save_plots      Save PNG/JPEG plots (default: no)
    --verbose         Enable verbose output (default: no)
    --diagnostic      Print the Crank-Nicolson system at every step (default: no)

Example:
    python heat_simulation.py --alpha 0.6 --h 0.05 --scheme both --confirm yes

Output:
    - Two-column "x value" files for every scheme and for the analytical
      solution at the final time, written under the output directory
    - Optionally a .npz with the recorded snapshots and static plots
    - All output files use a basename containing parameter values
"""

import argparse
import math
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Final, List, Optional

import numpy as np
import questionary
import termplotlib as tpl
from tabulate import tabulate
from tqdm import tqdm

from analytical import analytical_profile, fourier_series_solution
from heat_errors import ConfigurationError
from plots import create_profile_comparison, create_six_frame_summary, create_static_plots
from profile_io import DEFAULT_OUTPUT_DIR, export_profile, save_run_npz
from tridiagonal import TridiagonalSystem, crank_nicolson_system, print_system

FTCS: Final[str] = "ftcs"
CRANK_NICOLSON: Final[str] = "crank-nicolson"
SCHEMES: Final[tuple] = (FTCS, CRANK_NICOLSON, "both")
MAX_SNAPSHOTS: Final[int] = 200


def tent_function(x: float) -> float:
    """Initial temperature f(x): 2x on (0, 0.5], 2(1-x) on (0.5, 1], else 0."""
    if 0.0 < x <= 0.5:
        return 2.0 * x
    if 0.5 < x <= 1.0:
        return 2.0 * (1.0 - x)
    return 0.0


def initial_condition(N: int, h: float) -> np.ndarray:
    """
    Build the initial temperature vector U of length N with U[0] = U[N-1] = 0
    and U[i] = f(i*h) at the interior points.
    """
    U = np.zeros(N, dtype=np.float64)
    for i in range(1, N - 1):
        U[i] = tent_function(i * h)
    return U


@dataclass(frozen=True)
class SimulationConfig:
    """
    A data class to store simulation configuration parameters.

    Attributes:
    - alpha (float): Stability (Fourier) parameter K*tau/h^2. FTCS needs alpha < 0.5.
    - h (float): Spatial step, 0 < h <= 1.
    - K (float): Diffusivity, K > 0.

    Simulation Parameters:
    - scheme (str): Which scheme(s) the CLI runs: 'ftcs', 'crank-nicolson' or 'both'.
    - record_every (int): Keep a snapshot every n steps; 0 picks a stride giving
      about MAX_SNAPSHOTS snapshots over a full run.

    Output Control:
    - confirm (str): A flag to confirm simulation execution.
    - normalize (str): Divide exported profiles by their maximum ('yes'/'no').
    - output_dir (str): Directory of the exported two-column files.
    - save_data (str): Save the snapshots to a .npz file ('yes'/'no').
    - save_plots (str): Save static plots ('yes'/'no').
    - verbose (str): A flag to enable verbose output.
    - diagnostic (bool): Print the tridiagonal system at every implicit step.

    Computed values (fixed once constructed):
    - tau (float): Time step alpha*h^2/K.
    - N (int): Number of grid points floor(1/h) + 1.
    - d_explicit (float): FTCS main coefficient 1 - 2*alpha.
    - d_implicit (float): Crank-Nicolson main diagonal 1 + alpha.
    - time_steps (int): Number of steps of a full run, floor(1/tau) + 1.
    - x_values (np.ndarray): Grid points i*h.
    - uinit (np.ndarray): Initial temperature vector.
    """

    # Model parameters
    alpha: float = 0.499
    h: float = 0.1
    K: float = 1.0

    # Simulation parameters
    scheme: str = "both"
    record_every: int = 0

    # Output control
    confirm: str = "no"
    normalize: str = "no"
    output_dir: str = DEFAULT_OUTPUT_DIR
    save_data: str = "no"
    save_plots: str = "no"
    verbose: str = "no"
    diagnostic: bool = False

    # Computed values
    tau: float = field(init=False, default=None)
    N: int = field(init=False, default=None)
    d_explicit: float = field(init=False, default=None)
    d_implicit: float = field(init=False, default=None)
    time_steps: int = field(init=False, default=None)
    snapshot_every: int = field(init=False, default=None)
    x_values: np.ndarray = field(init=False, default=None, repr=False)
    uinit: np.ndarray = field(init=False, default=None, repr=False)

    def __post_init__(self):
        for name in ("alpha", "h", "K"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"{name} must be a finite number")
        if self.h <= 0 or self.h > 1:
            raise ConfigurationError(f"h must satisfy 0 < h <= 1, got h={self.h}")
        if self.K <= 0:
            raise ConfigurationError(f"K must be positive, got K={self.K}")
        if self.alpha <= 0:
            raise ConfigurationError(f"alpha must be positive, got alpha={self.alpha}")
        if self.scheme not in SCHEMES:
            raise ConfigurationError(f"Unknown scheme {self.scheme!r}; expected one of {SCHEMES}")
        if self.record_every < 0:
            raise ConfigurationError("record_every must be >= 0")

        # Using object.__setattr__ because the class is frozen
        tau = self.alpha * self.h**2 / self.K
        N = int(math.floor(1.0 / self.h)) + 1
        object.__setattr__(self, "tau", tau)
        object.__setattr__(self, "N", N)
        object.__setattr__(self, "d_explicit", 1.0 - 2.0 * self.alpha)
        object.__setattr__(self, "d_implicit", 1.0 + self.alpha)
        time_steps = int(math.floor(1.0 / tau)) + 1
        object.__setattr__(self, "time_steps", time_steps)
        snapshot_every = self.record_every or max(1, time_steps // MAX_SNAPSHOTS)
        object.__setattr__(self, "snapshot_every", snapshot_every)

        x_values = np.arange(N, dtype=np.float64) * self.h
        x_values.setflags(write=False)
        object.__setattr__(self, "x_values", x_values)
        uinit = initial_condition(N, self.h)
        uinit.setflags(write=False)
        object.__setattr__(self, "uinit", uinit)

    @property
    def ftcs_is_stable(self) -> bool:
        return self.alpha < 0.5

    def metadata(self) -> Dict[str, Any]:
        """JSON-friendly parameters, including the computed scalars."""
        out = asdict(self)
        out.pop("x_values", None)
        out.pop("uinit", None)
        return out

    def display_parameters(self) -> None:
        """Display all computed parameters in a formatted way."""
        print("Model Parameters:")
        data = [
            ["alpha", f"{self.alpha}", "K tau / h^2"],
            ["h", f"{self.h}", "spatial step"],
            ["K", f"{self.K}", "diffusivity"],
            ["tau", f"{self.tau:.6g}", "alpha h^2 / K"],
            ["N", f"{self.N}", "floor(1/h) + 1"],
            ["time steps", f"{self.time_steps}", "floor(1/tau) + 1"],
            ["d (FTCS)", f"{self.d_explicit:.6g}", "1 - 2 alpha"],
            ["b (Crank-Nicolson)", f"{self.d_implicit:.6g}", "1 + alpha"],
        ]
        print(tabulate(data, headers=["Parameter", "Value", "Definition"], tablefmt="grid"))
        print(f"\nScheme(s): {self.scheme}")
        if self.scheme in (FTCS, "both") and not self.ftcs_is_stable:
            print(f"Warning: alpha = {self.alpha} >= 0.5, FTCS is expected to diverge.")

        if self.verbose == "yes":
            print("\n# Initial condition for u")
            fig = tpl.figure()
            fig.plot(self.x_values, self.uinit, label="u_0", width=100, height=36)
            fig.show()


def ftcs_step(U: np.ndarray, alpha: float, d: float) -> np.ndarray:
    """
    One explicit FTCS step. Every interior value is computed from the previous
    vector, so the result is written to a new buffer:

        U_next[i] = alpha*U[i-1] + d*U[i] + alpha*U[i+1],  d = 1 - 2*alpha

    The boundary values are copied over unchanged.
    """
    U_next = np.array(U, dtype=np.float64, copy=True)
    U_next[1:-1] = alpha * U[:-2] + d * U[1:-1] + alpha * U[2:]
    return U_next


def crank_nicolson_rhs(U: np.ndarray, alpha: float) -> np.ndarray:
    """
    Explicit half U* of the Crank-Nicolson step.

    Interior rows use (alpha/2)*U[i-1] + (1-alpha)*U[i] + (alpha/2)*U[i+1].
    The end rows are U*[0] = (alpha/2)*U[1] and U*[N-1] = (alpha/2)*U[N-2],
    i.e. the interior formula with a zero neighbour outside the bar.
    """
    half = alpha / 2.0
    rhs = np.empty(U.shape[0], dtype=np.float64)
    rhs[1:-1] = half * U[:-2] + (1.0 - alpha) * U[1:-1] + half * U[2:]
    rhs[0] = half * U[1]
    rhs[-1] = half * U[-2]
    return rhs


def crank_nicolson_step(
    U: np.ndarray,
    alpha: float,
    system: TridiagonalSystem,
    diagnostic: bool = False,
) -> np.ndarray:
    """
    One implicit Crank-Nicolson step: build U*, solve the constant tridiagonal
    system for the next state and put the Dirichlet values back at both ends.

    Parameters:
    - U (np.ndarray): Current temperature vector.
    - alpha (float): Stability parameter.
    - system (TridiagonalSystem): Fixed (a, b, c) diagonals for this alpha and N.
    - diagnostic (bool): Print the system, U*, the solution and the residual.

    Returns:
    - np.ndarray: Temperature vector after one step.

    Raises:
    - SingularSystemError: If the elimination meets a zero pivot.
    """
    rhs = crank_nicolson_rhs(U, alpha)
    U_next = system.solve(rhs)
    if diagnostic:
        print_system(system, rhs, U_next)
    U_next[0] = U[0]
    U_next[-1] = U[-1]
    return U_next


class HeatDiffusion1D:
    """
    Owns one temperature field and advances it with a single scheme.

    `run_explicit()` / `run_crank_nicolson()` restart from the initial condition
    and advance the full horizon (or a given number of steps), so calling them
    twice gives the same field. `step_explicit()` / `step_crank_nicolson()`
    advance the current field by one step. Once a field has been advanced with
    one scheme the other one is refused until `reset()`.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config if config is not None else SimulationConfig()
        self._system = crank_nicolson_system(self.config.alpha, self.config.N)
        self.reset()

    # -------- state --------

    def reset(self) -> None:
        self._U = np.array(self.config.uinit, dtype=np.float64, copy=True)
        self._steps = 0
        self._scheme: Optional[str] = None
        self._snapshot_steps: List[int] = [0]
        self._snapshots: List[np.ndarray] = [self._U.copy()]

    @property
    def x_values(self) -> np.ndarray:
        return self.config.x_values

    @property
    def steps_taken(self) -> int:
        return self._steps

    @property
    def time(self) -> float:
        return self._steps * self.config.tau

    @property
    def scheme(self) -> Optional[str]:
        return self._scheme

    @property
    def system(self) -> TridiagonalSystem:
        return self._system

    def current_field(self) -> np.ndarray:
        """Read-only snapshot of the temperature vector."""
        snapshot = self._U.copy()
        snapshot.setflags(write=False)
        return snapshot

    @property
    def history(self) -> tuple:
        """Recorded snapshots as (t_values, u_num) with u_num of shape (N, n_snapshots)."""
        t_values = np.asarray(self._snapshot_steps, dtype=np.float64) * self.config.tau
        return t_values, np.column_stack(self._snapshots)

    def _claim(self, scheme: str) -> None:
        if self._scheme is None:
            self._scheme = scheme
        elif self._scheme != scheme:
            raise ConfigurationError(
                f"This field is being advanced with {self._scheme}; call reset() before using {scheme}"
            )

    def _record(self, force: bool = False) -> None:
        if self._snapshot_steps[-1] == self._steps:
            return
        if force or self._steps % self.config.snapshot_every == 0:
            self._snapshot_steps.append(self._steps)
            self._snapshots.append(self._U.copy())

    # -------- stepping --------

    def step_explicit(self) -> None:
        self._claim(FTCS)
        self._U = ftcs_step(self._U, self.config.alpha, self.config.d_explicit)
        self._steps += 1
        self._record()

    def step_crank_nicolson(self) -> None:
        self._claim(CRANK_NICOLSON)
        self._U = crank_nicolson_step(
            self._U, self.config.alpha, self._system, diagnostic=self.config.diagnostic
        )
        self._steps += 1
        self._record()

    def _run(self, step, desc: str, steps: Optional[int], progress: bool) -> np.ndarray:
        n_steps = self.config.time_steps if steps is None else int(steps)
        if n_steps < 0:
            raise ConfigurationError("steps must be >= 0")
        self.reset()
        for _ in tqdm(range(n_steps), desc=desc, disable=not progress):
            step()
        self._record(force=True)
        return self.current_field()

    def run_explicit(self, steps: Optional[int] = None, progress: bool = False) -> np.ndarray:
        """Advance the FTCS scheme from the initial condition; returns the final field."""
        return self._run(self.step_explicit, "FTCS", steps, progress)

    def run_crank_nicolson(self, steps: Optional[int] = None, progress: bool = False) -> np.ndarray:
        """Advance the Crank-Nicolson scheme from the initial condition; returns the final field."""
        return self._run(self.step_crank_nicolson, "Crank-Nicolson", steps, progress)

    # -------- reference solution --------

    def evaluate_analytical(self, x: float, t: float) -> float:
        """Fourier series value at (x, t); t is physical time, scaled by K."""
        return fourier_series_solution(x, self.config.K * t)

    def analytical_field(self, t: Optional[float] = None) -> np.ndarray:
        t = self.time if t is None else t
        return analytical_profile(self.x_values, self.config.K * t)


def _flatten_yaml_mapping(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError("YAML config must be a mapping (dict-like) at the top level.")
    out: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise TypeError("YAML config keys must be strings.")
        if isinstance(value, dict):
            out.update(_flatten_yaml_mapping(value))
        else:
            out[key] = value
    return out


def _load_yaml_config_as_overrides(path: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "Missing dependency: PyYAML is required for `--config`. "
            "Install it with `pip install pyyaml`."
        ) from exc

    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return _flatten_yaml_mapping(raw)


def _apply_config_defaults(parser: argparse.ArgumentParser, cfg: dict[str, Any]) -> None:
    if not cfg:
        return
    by_dest = {a.dest: a for a in parser._actions if getattr(a, "dest", None)}  # pylint: disable=protected-access
    defaults: dict[str, Any] = {}
    for key, value in cfg.items():
        action = by_dest.get(key)
        if action is None or value is None:
            continue
        if action.type is not None:
            try:
                defaults[key] = action.type(value)  # pylint: disable=not-callable
            except (TypeError, ValueError):
                defaults[key] = action.type(str(value))  # pylint: disable=not-callable
        elif action.choices is not None and isinstance(value, bool):
            # YAML reads bare yes/no as booleans
            defaults[key] = "yes" if value else "no"
        else:
            defaults[key] = value
    parser.set_defaults(**defaults)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="A CLI tool comparing FTCS and Crank-Nicolson on the 1D heat equation",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--config",
        type=str,
        default="",
        help="Load defaults from YAML (CLI overrides)",
    )
    parser.add_argument(
        "--confirm",
        choices=["yes", "no"],
        default="no",
        help="Skip confirmation prompt if set to yes (default: no)",
    )
    parser.add_argument(
        "--verbose",
        choices=["yes", "no"],
        default="no",
        help="Enable verbose output (default: no)",
    )
    parser.add_argument(
        "--diagnostic",
        choices=["yes", "no"],
        default="no",
        help="Print the Crank-Nicolson system at every step (default: no)",
    )
    parser.add_argument(
        "--alpha",
        type=float,
        default=0.499,
        help="Stability parameter K*tau/h^2 (default: 0.499)",
    )
    parser.add_argument(
        "--h",
        type=float,
        default=0.1,
        help="Spatial step, 0 < h <= 1 (default: 0.1)",
    )
    parser.add_argument(
        "--K",
        type=float,
        default=1.0,
        help="Diffusivity (default: 1.0)",
    )
    parser.add_argument(
        "--scheme",
        choices=list(SCHEMES),
        default="both",
        help="Scheme(s) to run (default: both)",
    )
    parser.add_argument(
        "--record_every",
        type=int,
        default=0,
        help="Keep a snapshot every n steps for plots and .npz output, 0 for automatic (default: 0)",
    )
    parser.add_argument(
        "--normalize",
        choices=["yes", "no"],
        default="no",
        help="Divide exported profiles by their maximum value (default: no)",
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Directory for exported .data files (default: {DEFAULT_OUTPUT_DIR})",
    )
    parser.add_argument(
        "--save_data",
        choices=["yes", "no"],
        default="no",
        help="Save recorded snapshots to <basename>_<scheme>.npz (default: no)",
    )
    parser.add_argument(
        "--save_plots",
        choices=["yes", "no"],
        default="no",
        help="Save static PNG/JPEG plots (default: no)",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> SimulationConfig:
    """
    Parse command-line arguments (and an optional YAML file given with
    --config) into a SimulationConfig.
    """
    pre = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    pre.add_argument("--config", type=str, default="")
    pre_args, _ = pre.parse_known_args(argv)

    parser = _build_arg_parser()
    if pre_args.config:
        _apply_config_defaults(parser, _load_yaml_config_as_overrides(pre_args.config))

    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)

    args = vars(parser.parse_args(argv))
    args.pop("config")
    args["diagnostic"] = args["diagnostic"] == "yes"
    return SimulationConfig(**args)


def file_base_name(config: SimulationConfig) -> str:
    return f"alpha={config.alpha}_h={config.h}_K={config.K}".replace(".", "-")


def run_schemes(config: SimulationConfig, FileBaseName: str = "Simulation") -> Dict[str, np.ndarray]:
    """
    Run the selected scheme(s), compare with the analytical solution and write
    the outputs.

    Parameters:
    - config (SimulationConfig): Validated configuration.
    - FileBaseName (str): Base name for output files.

    Returns:
    - dict: Final field per scheme plus the analytical profile ('analytical').

    The exported files are <FileBaseName>_<scheme>.data, one per scheme, and
    <FileBaseName>_analytical.data, all in config.output_dir.
    """
    schemes = [FTCS, CRANK_NICOLSON] if config.scheme == "both" else [config.scheme]
    normalize = config.normalize == "yes"
    t_final = config.time_steps * config.tau

    results: Dict[str, np.ndarray] = {}
    table = []
    analytical = analytical_profile(config.x_values, config.K * t_final)

    for scheme in schemes:
        sim = HeatDiffusion1D(config)
        if scheme == FTCS:
            final = sim.run_explicit(progress=True)
        else:
            final = sim.run_crank_nicolson(progress=True)
        results[scheme] = final

        error = final - analytical
        table.append(
            [
                scheme,
                sim.steps_taken,
                f"{sim.time:.6g}",
                f"{float(np.max(np.abs(final))):.6e}",
                f"{float(np.max(np.abs(error))):.6e}",
                f"{float(np.sqrt(config.h * np.sum(error**2))):.6e}",
            ]
        )

        path = export_profile(
            config.x_values,
            final,
            f"{FileBaseName}_{scheme}.data",
            normalize=normalize,
            output_dir=config.output_dir,
        )
        print(f"exporting U vs x data... {{{path}}}")

        if config.save_data == "yes":
            t_values, u_num = sim.history
            npz_path = save_run_npz(
                os.path.join(config.output_dir, f"{FileBaseName}_{scheme}.npz"),
                config_metadata=config.metadata(),
                scheme=scheme,
                tau=config.tau,
                x_values=config.x_values,
                t_values=t_values,
                u_num=u_num,
            )
            print(f"wrote: {npz_path}")

        if config.save_plots == "yes":
            t_values, u_num = sim.history
            create_six_frame_summary(
                config.x_values,
                t_values,
                u_num,
                f"{scheme}: alpha={config.alpha}, h={config.h}, K={config.K}",
                os.path.join(config.output_dir, f"{FileBaseName}_{scheme}"),
            )
            create_static_plots(
                t_values,
                config.x_values,
                u_num,
                f"{scheme}: alpha={config.alpha}, h={config.h}, K={config.K}",
                os.path.join(config.output_dir, f"{FileBaseName}_{scheme}"),
            )

    results["analytical"] = analytical
    path = export_profile(
        config.x_values,
        analytical,
        f"{FileBaseName}_analytical.data",
        normalize=normalize,
        output_dir=config.output_dir,
    )
    print(f"exporting U vs x data... {{{path}}}")

    headers = ["Scheme", "Steps", "t", "max |U|", "max |U - U_exact|", "L2 error"]
    print("\n# Comparison with the analytical solution\n")
    print(tabulate(table, headers=headers, tablefmt="grid"))

    if config.save_plots == "yes":
        create_profile_comparison(
            config.x_values,
            {s: results[s] for s in schemes},
            analytical,
            f"alpha={config.alpha}, h={config.h}, K={config.K}, t={t_final:.4g}",
            os.path.join(config.output_dir, f"{FileBaseName}_comparison"),
        )

    return results


def main():
    """
    Main function to parse arguments, display simulation parameters, and run the simulation.

    Steps:
    1. Parse command-line arguments into a SimulationConfig object
    2. Display the parsed model and simulation parameters
    3. Generate a base name for output files based on the parameters
    4. Prompt the user for confirmation to proceed with the simulation
    5. Run the scheme(s) or exit if declined
    """
    config: Final[SimulationConfig] = parse_args()

    config.display_parameters()

    basename = file_base_name(config)
    print(f"Output files will be saved with the basename:\n\t {basename}\n")

    if (
        config.confirm == "yes"
        or questionary.confirm("Do you want to continue the simulation?").ask()
    ):
        print("Continuing simulation...")
        run_schemes(config=config, FileBaseName=basename)
    else:
        print("Exiting simulation.")


if __name__ == "__main__":
    main()
