"""Tests for the FTCS / Crank-Nicolson driver."""

import json

import numpy as np
import pytest

from analytical import fourier_series_solution
from heat_errors import ConfigurationError, SingularSystemError
from heat_simulation import (
    CRANK_NICOLSON,
    FTCS,
    HeatDiffusion1D,
    SimulationConfig,
    crank_nicolson_rhs,
    crank_nicolson_step,
    ftcs_step,
    initial_condition,
    tent_function,
)
from tridiagonal import TridiagonalSystem, crank_nicolson_system


class TestInitialCondition:
    def test_tent_values(self):
        assert tent_function(0.0) == 0.0
        assert tent_function(0.25) == 0.5
        assert tent_function(0.5) == 1.0
        assert tent_function(0.75) == 0.5
        assert tent_function(1.0) == 0.0
        assert tent_function(1.5) == 0.0

    def test_vector_has_zero_ends(self):
        U = initial_condition(11, 0.1)
        assert U[0] == 0.0 and U[-1] == 0.0
        assert U[5] == 1.0
        assert np.allclose(U, U[::-1])
        assert U.sum() == pytest.approx(5.0)

    def test_coarse_grids(self):
        assert initial_condition(3, 0.5).tolist() == [0.0, 1.0, 0.0]
        assert initial_condition(5, 0.25).tolist() == [0.0, 0.5, 1.0, 0.5, 0.0]
        assert SimulationConfig(h=0.5).uinit.tolist() == [0.0, 1.0, 0.0]


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()
        assert config.N == 11
        assert config.tau == pytest.approx(0.00499)
        assert config.time_steps == 201
        assert config.d_explicit == pytest.approx(0.002)
        assert config.d_implicit == pytest.approx(1.499)
        assert config.snapshot_every == 1
        assert config.ftcs_is_stable

    def test_grid(self):
        config = SimulationConfig(h=0.05)
        assert config.N == 21
        assert config.x_values[0] == 0.0
        assert config.x_values[-1] == pytest.approx(1.0)

    def test_arrays_read_only(self):
        config = SimulationConfig()
        with pytest.raises(ValueError):
            config.uinit[3] = 7.0
        with pytest.raises(ValueError):
            config.x_values[0] = 1.0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"h": 0.0},
            {"h": -0.1},
            {"h": 1.5},
            {"K": 0.0},
            {"K": -2.0},
            {"alpha": 0.0},
            {"alpha": -0.3},
            {"alpha": float("nan")},
            {"scheme": "leapfrog"},
            {"record_every": -1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigurationError):
            SimulationConfig(**kwargs)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SimulationConfig(h=0.0)

    def test_metadata_is_json_friendly(self):
        meta = SimulationConfig(alpha=0.3).metadata()
        assert "x_values" not in meta and "uinit" not in meta
        decoded = json.loads(json.dumps(meta))
        assert decoded["alpha"] == 0.3
        assert decoded["N"] == 11

    def test_unstable_warning(self, capsys):
        SimulationConfig(alpha=0.6).display_parameters()
        out = capsys.readouterr().out
        assert "Warning" in out
        assert "alpha" in out

    def test_no_warning_for_crank_nicolson_only(self, capsys):
        SimulationConfig(alpha=0.6, scheme=CRANK_NICOLSON).display_parameters()
        assert "Warning" not in capsys.readouterr().out


class TestSteps:
    def test_ftcs_step_only_moves_the_peak(self):
        """A piecewise-linear profile is a fixed point away from its kink."""
        alpha = 0.499
        U = initial_condition(11, 0.1)
        U_next = ftcs_step(U, alpha, 1 - 2 * alpha)
        expected = U.copy()
        expected[5] = 1.0 - 0.4 * alpha
        assert np.allclose(U_next, expected, atol=1e-12)
        assert U[5] == 1.0

    def test_crank_nicolson_rhs_end_rows(self):
        alpha = 0.4
        U = np.array([0.0, 1.0, 2.0, 3.0, 0.0])
        rhs = crank_nicolson_rhs(U, alpha)
        assert rhs[0] == pytest.approx(0.2)
        assert rhs[-1] == pytest.approx(0.6)
        assert rhs[2] == pytest.approx(0.2 * 1.0 + 0.6 * 2.0 + 0.2 * 3.0)

    def test_crank_nicolson_step_solves_and_pins(self):
        alpha = 0.499
        U = initial_condition(11, 0.1)
        system = crank_nicolson_system(alpha, 11)
        U_next = crank_nicolson_step(U, alpha, system)
        solved = np.linalg.solve(system.matrix().toarray(), crank_nicolson_rhs(U, alpha))
        assert U_next[0] == 0.0 and U_next[-1] == 0.0
        assert np.allclose(U_next[1:-1], solved[1:-1], atol=1e-12)

    def test_crank_nicolson_one_step_shape(self):
        sim = HeatDiffusion1D()
        sim.step_crank_nicolson()
        U = sim.current_field()
        assert U[5] < 1.0
        assert np.allclose(U, U[::-1], atol=1e-12)
        assert U.sum() == pytest.approx(5.0, rel=0.05)


class TestHeatDiffusion1D:
    @pytest.mark.parametrize("alpha", [0.3, 0.499, 0.6])
    def test_boundaries_stay_zero(self, alpha):
        sim = HeatDiffusion1D(SimulationConfig(alpha=alpha))
        for _ in range(30):
            sim.step_explicit()
            U = sim.current_field()
            assert U[0] == 0.0 and U[-1] == 0.0
        sim.reset()
        for _ in range(30):
            sim.step_crank_nicolson()
            U = sim.current_field()
            assert U[0] == 0.0 and U[-1] == 0.0

    def test_ftcs_stable_maximum_never_grows(self):
        sim = HeatDiffusion1D(SimulationConfig(alpha=0.3))
        initial_max = float(np.max(sim.current_field()))
        for _ in range(300):
            sim.step_explicit()
            assert float(np.max(np.abs(sim.current_field()))) <= initial_max + 1e-12

    def test_ftcs_unstable_grows_without_bound(self):
        sim = HeatDiffusion1D(SimulationConfig(alpha=0.6))
        peaks = [float(np.max(np.abs(sim.run_explicit(steps=n)))) for n in (50, 100, 150)]
        assert peaks[0] < peaks[1] < peaks[2]
        assert peaks[2] > 1e6

    def test_crank_nicolson_bounded_just_above_half(self):
        sim = HeatDiffusion1D(SimulationConfig(alpha=0.502))
        initial_max = float(np.max(sim.current_field()))
        for _ in range(sim.config.time_steps):
            sim.step_crank_nicolson()
            assert float(np.max(np.abs(sim.current_field()))) <= initial_max + 1e-12

    def test_crank_nicolson_energy_never_grows_for_large_alpha(self):
        sim = HeatDiffusion1D(SimulationConfig(alpha=5.0))
        previous = float(np.linalg.norm(sim.current_field()))
        for _ in range(50):
            sim.step_crank_nicolson()
            current = float(np.linalg.norm(sim.current_field()))
            assert np.all(np.isfinite(sim.current_field()))
            assert current <= previous + 1e-12
            previous = current

    def test_ftcs_close_to_analytical(self):
        sim = HeatDiffusion1D(SimulationConfig(alpha=0.3))
        U = sim.run_explicit(steps=20)
        assert sim.time == pytest.approx(0.06)
        exact = sim.analytical_field()
        assert float(np.max(np.abs(U - exact))) < 0.02

    def test_full_default_runs(self):
        sim = HeatDiffusion1D()
        ftcs = sim.run_explicit()
        assert sim.steps_taken == 201
        exact = sim.analytical_field()
        assert float(np.max(np.abs(ftcs - exact))) < 1e-3

        cn = sim.run_crank_nicolson()
        assert sim.scheme == CRANK_NICOLSON
        assert float(np.max(np.abs(cn))) < 0.01
        assert cn[0] == 0.0 and cn[-1] == 0.0

    def test_time_scales_with_diffusivity(self):
        """Same alpha gives the same discrete problem whatever K is."""
        slow = HeatDiffusion1D(SimulationConfig(K=1.0))
        fast = HeatDiffusion1D(SimulationConfig(K=2.0))
        assert np.allclose(slow.run_explicit(steps=40), fast.run_explicit(steps=40))
        assert fast.time == pytest.approx(slow.time / 2)
        assert np.allclose(slow.analytical_field(), fast.analytical_field(), atol=1e-12)

    def test_evaluate_analytical_uses_physical_time(self):
        sim = HeatDiffusion1D(SimulationConfig(K=2.0))
        assert sim.evaluate_analytical(0.5, 0.25) == pytest.approx(fourier_series_solution(0.5, 0.5))

    def test_run_is_repeatable(self):
        sim = HeatDiffusion1D()
        first = sim.run_crank_nicolson(steps=25)
        second = sim.run_crank_nicolson(steps=25)
        assert np.array_equal(first, second)

    def test_current_field_is_a_read_only_copy(self):
        sim = HeatDiffusion1D()
        U = sim.current_field()
        with pytest.raises(ValueError):
            U[3] = 10.0
        sim.step_explicit()
        assert U[5] == 1.0

    def test_mixing_schemes_is_refused(self):
        sim = HeatDiffusion1D()
        sim.step_explicit()
        assert sim.scheme == FTCS
        with pytest.raises(ConfigurationError):
            sim.step_crank_nicolson()
        sim.reset()
        sim.step_crank_nicolson()
        assert sim.steps_taken == 1

    def test_negative_steps(self):
        with pytest.raises(ConfigurationError):
            HeatDiffusion1D().run_explicit(steps=-1)

    def test_history_with_stride(self):
        config = SimulationConfig(record_every=50)
        sim = HeatDiffusion1D(config)
        sim.run_explicit()
        t_values, u_num = sim.history
        assert u_num.shape == (config.N, 6)
        assert np.allclose(t_values, np.array([0, 50, 100, 150, 200, 201]) * config.tau)
        assert np.array_equal(u_num[:, 0], config.uinit)
        assert np.array_equal(u_num[:, -1], sim.current_field())

    def test_history_default_keeps_every_step_for_short_runs(self):
        sim = HeatDiffusion1D()
        sim.run_crank_nicolson(steps=10)
        t_values, u_num = sim.history
        assert u_num.shape == (11, 11)
        assert t_values[-1] == pytest.approx(10 * sim.config.tau)

    def test_singular_system_leaves_field_untouched(self):
        sim = HeatDiffusion1D()
        zeros = np.zeros(sim.config.N)
        sim._system = TridiagonalSystem(a=zeros, b=zeros, c=zeros)
        before = sim.current_field()
        with pytest.raises(SingularSystemError):
            sim.step_crank_nicolson()
        assert np.array_equal(sim.current_field(), before)
        assert sim.steps_taken == 0

    def test_diagnostic_prints_system(self, capsys):
        sim = HeatDiffusion1D(SimulationConfig(diagnostic=True))
        sim.step_crank_nicolson()
        out = capsys.readouterr().out
        assert "Matrix A:" in out
        assert "max |A U - U*|" in out
