"""end-to-end 시뮬레이션 테스트."""

from unittest.mock import patch

import pytest
import numpy as np

from pdporosity.io.vtk_export import VTKExportError
from pdporosity.peridynamics.validation import InvalidParameterError
from pdporosity.pipeline.config import SimulationConfig
from pdporosity.peridynamics.core.neighbor import enumerate_bonds
from pdporosity.pipeline.simulation import SimulationResult, run_simulation


def _config(tmp_path, **overrides):
    params = dict(lx=1.0, ly=1.0, dx=0.1, phi=0.3, m=3.0)
    flat = {k: overrides.pop(k) for k in list(overrides) if k in params}
    params.update(flat)
    return SimulationConfig.from_parameters(**params, output_dir=tmp_path, **overrides)


class TestRunSimulation:
    """run_simulation() 테스트."""

    def test_writes_named_file(self, tmp_path):
        result = run_simulation(_config(tmp_path, seed=1))

        assert isinstance(result, SimulationResult)
        assert result.output_path == tmp_path / "porosity_Lx1_phi30.vtk"
        assert result.output_path.exists()
        lines = result.output_path.read_text().splitlines()
        assert lines[4] == f"POINTS {result.lattice.n_particles} float"

    def test_result_consistency(self, tmp_path):
        result = run_simulation(_config(tmp_path, seed=2), write_output=False)

        n = result.lattice.n_particles
        assert result.damage.shape == (n,)
        assert result.pre_damage.total_bond_count == result.bonds.n_bonds
        assert result.realized_porosity == result.pre_damage.realized_porosity
        assert 0.0 <= result.statistics.minimum <= result.statistics.mean <= result.statistics.maximum <= 1.0

    def test_seed_reproducible(self, tmp_path):
        a = run_simulation(_config(tmp_path, seed=11), write_output=False)
        b = run_simulation(_config(tmp_path, seed=11), write_output=False)
        np.testing.assert_array_equal(a.damage, b.damage)

        a = run_simulation(_config(tmp_path, seed=11), write_output=True)
        text = a.output_path.read_text()
        b = run_simulation(_config(tmp_path, seed=11), write_output=True)
        assert b.output_path.read_text() == text

    def test_explicit_rng_wins(self, tmp_path):
        cfg = _config(tmp_path, seed=3)
        a = run_simulation(cfg, rng=np.random.default_rng(99), write_output=False)
        b = run_simulation(cfg, rng=np.random.default_rng(99), write_output=False)
        np.testing.assert_array_equal(a.pre_damage.broken_mask, b.pre_damage.broken_mask)

    def test_no_output(self, tmp_path):
        result = run_simulation(_config(tmp_path), write_output=False)
        assert result.output_path is None
        assert list(tmp_path.iterdir()) == []

    def test_brute_and_grid_agree(self, tmp_path):
        grid = run_simulation(_config(tmp_path, seed=8, method="grid"), write_output=False)
        brute = run_simulation(_config(tmp_path, seed=8, method="brute"), write_output=False)
        np.testing.assert_array_equal(grid.damage, brute.damage)

    def test_progress_stages(self, tmp_path):
        stages = []
        run_simulation(
            _config(tmp_path),
            progress_callback=lambda stage, details: stages.append(stage),
        )
        assert stages == ["lattice", "bonds", "pre-damage", "damage", "export"]

    def test_invalid_parameters_write_nothing(self, tmp_path):
        with pytest.raises(InvalidParameterError) as exc_info:
            run_simulation(_config(tmp_path, dx=0.0, phi=1.5))
        assert set(exc_info.value.parameters) == {"dx", "phi"}
        assert list(tmp_path.iterdir()) == []

    def test_unwritable_output(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(VTKExportError):
            run_simulation(_config(blocker))

    def test_full_porosity(self, tmp_path):
        """phi = 1 → 본드가 있는 모든 입자 damage 1."""
        result = run_simulation(_config(tmp_path, phi=1.0), write_output=False)
        bonded = result.bonds.total_bonds > 0
        assert np.all(result.damage[bonded] == 1.0)
        assert result.realized_porosity == 1.0

    @patch("pdporosity.pipeline.simulation.open_in_paraview", return_value=True)
    def test_opens_viewer(self, mock_open, tmp_path):
        result = run_simulation(_config(tmp_path, open_viewer=True))
        mock_open.assert_called_once_with(result.output_path)
        assert result.viewer_opened is True

    @patch("pdporosity.pipeline.simulation.open_in_paraview", return_value=False)
    def test_viewer_failure_keeps_file(self, mock_open, tmp_path):
        result = run_simulation(_config(tmp_path, open_viewer=True))
        assert result.viewer_opened is False
        assert result.output_path.exists()

    @patch("pdporosity.pipeline.simulation.open_in_paraview")
    def test_viewer_not_requested(self, mock_open, tmp_path):
        run_simulation(_config(tmp_path))
        mock_open.assert_not_called()

    def test_backend_forwarded(self, tmp_path):
        """설정의 backend가 본드 탐색까지 전달됨."""
        cfg = _config(tmp_path, method="grid", backend="vulkan")
        with patch("pdporosity.pipeline.simulation.enumerate_bonds", wraps=enumerate_bonds) as spy:
            run_simulation(cfg, write_output=False)
        assert spy.call_args.kwargs["method"] == "grid"
        assert spy.call_args.kwargs["backend"] == "vulkan"
