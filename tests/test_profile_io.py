"""Tests for profile export and the .npz run format."""

import os

import numpy as np
import pytest

from heat_errors import ConfigurationError
from heat_simulation import HeatDiffusion1D, SimulationConfig
from profile_io import (
    _downsample_time_indices,
    export_profile,
    load_profile,
    load_run_npz,
    normalize_vector,
    save_run_npz,
)


class TestExportProfile:
    def test_two_columns_one_line_per_point(self, tmp_path):
        x = np.linspace(0.0, 1.0, 11)
        y = np.sin(np.pi * x)
        path = export_profile(x, y, "sine.data", output_dir=str(tmp_path / "out"))
        assert path == os.path.join(str(tmp_path / "out"), "sine.data")

        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        assert len(lines) == 11
        assert all(len(line.split()) == 2 for line in lines)

        x_back, y_back = load_profile(path)
        assert np.allclose(x_back, x, rtol=1e-11, atol=1e-12)
        assert np.allclose(y_back, y, rtol=1e-11, atol=1e-12)

    def test_normalized_export(self, tmp_path):
        x = np.array([0.0, 0.5, 1.0])
        y = np.array([0.0, 0.25, 0.125])
        path = export_profile(x, y, "n.data", normalize=True, output_dir=str(tmp_path))
        _, y_back = load_profile(path)
        assert y_back.max() == pytest.approx(1.0)
        assert y_back[2] == pytest.approx(0.5)
        assert y[1] == 0.25

    def test_size_mismatch_touches_nothing(self, tmp_path):
        target = tmp_path / "never"
        with pytest.raises(ConfigurationError):
            export_profile(np.zeros(3), np.zeros(4), "bad.data", output_dir=str(target))
        assert not target.exists()

    def test_zero_vector_cannot_be_normalized(self, tmp_path):
        with pytest.raises(ConfigurationError):
            export_profile(np.zeros(3), np.zeros(3), "z.data", normalize=True, output_dir=str(tmp_path))

    def test_unwritable_location_raises_os_error(self, tmp_path):
        blocker = tmp_path / "occupied"
        blocker.write_text("not a directory", encoding="utf-8")
        sim = HeatDiffusion1D()
        sim.run_explicit(steps=3)
        before = sim.current_field()
        with pytest.raises(OSError):
            export_profile(sim.x_values, before, "u.data", output_dir=str(blocker))
        assert np.array_equal(sim.current_field(), before)

    def test_normalize_vector(self):
        values = np.array([1.0, 4.0, 2.0])
        out = normalize_vector(values)
        assert out.tolist() == [0.25, 1.0, 0.5]
        assert values.tolist() == [1.0, 4.0, 2.0]
        with pytest.raises(ConfigurationError):
            normalize_vector(np.array([]))


class TestRunNpz:
    def test_round_trip(self, tmp_path):
        config = SimulationConfig(alpha=0.3, record_every=10)
        sim = HeatDiffusion1D(config)
        sim.run_explicit(steps=40)
        t_values, u_num = sim.history

        path = save_run_npz(
            str(tmp_path / "run.npz"),
            config_metadata=config.metadata(),
            scheme="ftcs",
            tau=config.tau,
            x_values=config.x_values,
            t_values=t_values,
            u_num=u_num,
        )
        data = load_run_npz(path)
        assert data["schema_version"] == 1
        assert data["scheme"] == "ftcs"
        assert data["tau"] == pytest.approx(config.tau)
        assert data["config"]["alpha"] == 0.3
        assert data["u_num"].shape == (11, 5)
        assert data["step_indices"].tolist() == [0, 10, 20, 30, 40]
        assert np.array_equal(data["u_num"], u_num)

    def test_downsampled_on_save(self, tmp_path):
        t_values = np.arange(50, dtype=np.float64) * 0.1
        u_num = np.tile(t_values, (3, 1))
        path = save_run_npz(
            str(tmp_path / "big.npz"),
            config_metadata={},
            scheme="crank-nicolson",
            tau=0.1,
            x_values=np.array([0.0, 0.5, 1.0]),
            t_values=t_values,
            u_num=u_num,
            max_frames=10,
        )
        data = load_run_npz(path)
        assert data["t_values"][0] == 0.0
        assert data["t_values"][-1] == pytest.approx(4.9)
        assert data["u_num"].shape[1] == data["t_values"].shape[0] <= 12

    def test_column_mismatch(self, tmp_path):
        with pytest.raises(ConfigurationError):
            save_run_npz(
                str(tmp_path / "bad.npz"),
                config_metadata={},
                scheme="ftcs",
                tau=0.1,
                x_values=np.zeros(3),
                t_values=np.zeros(4),
                u_num=np.zeros((3, 5)),
            )


class TestDownsample:
    def test_short_series_untouched(self):
        assert _downsample_time_indices(5, 10).tolist() == [0, 1, 2, 3, 4]

    def test_keeps_both_ends(self):
        idx = _downsample_time_indices(1000, 400)
        assert idx[0] == 0 and idx[-1] == 999
        assert len(idx) <= 402
        assert np.all(np.diff(idx) > 0)

    def test_invalid(self):
        with pytest.raises(ValueError):
            _downsample_time_indices(10, 0)
