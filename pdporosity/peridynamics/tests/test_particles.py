"""격자 생성 테스트."""

import pytest
import numpy as np

from pdporosity.peridynamics.core.particles import Lattice, build_lattice, lattice_dimensions
from pdporosity.peridynamics.validation import InvalidParameterError


class TestLatticeDimensions:
    """nx = floor(lx/dx) + 1, ny = floor(ly/dx) + 1."""

    def test_unit_square(self):
        assert lattice_dimensions(1.0, 1.0, 1.0) == (2, 2)

    def test_non_integer_ratio(self):
        """floor 후 +1."""
        assert lattice_dimensions(1.0, 0.6, 0.25) == (5, 3)

    def test_domain_smaller_than_spacing(self):
        """dx보다 작은 도메인도 최소 1행/1열."""
        assert lattice_dimensions(0.5, 0.3, 1.0) == (1, 1)

    def test_rectangular(self):
        nx, ny = lattice_dimensions(4.0, 2.0, 0.5)
        assert (nx, ny) == (9, 5)


class TestBuildLattice:
    """build_lattice() 테스트."""

    def test_particle_count(self):
        lattice = build_lattice(4.0, 2.0, 0.5)
        assert isinstance(lattice, Lattice)
        assert lattice.n_particles == lattice.nx * lattice.ny == 45
        assert lattice.positions.shape == (45, 2)

    def test_boundary_scenario_positions(self):
        """Lx=Ly=dx=1 → (0,0), (1,0), (0,1), (1,1)."""
        lattice = build_lattice(1.0, 1.0, 1.0)
        expected = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        np.testing.assert_array_equal(lattice.positions, expected)

    def test_positions_exact(self):
        """격자점 (col, row) 위치는 정확히 (col*dx, row*dx)."""
        dx = 0.1
        lattice = build_lattice(1.3, 0.7, dx)
        for row in range(lattice.ny):
            for col in range(lattice.nx):
                x, y = lattice.positions[lattice.index(col, row)]
                assert x == col * dx
                assert y == row * dx

    def test_row_major_order(self):
        """열(x)이 먼저 증가, 그 다음 행(y)."""
        dx = 0.5
        lattice = build_lattice(2.0, 1.0, dx)
        assert tuple(lattice.positions[1]) == (dx, 0.0)
        assert tuple(lattice.positions[lattice.nx]) == (0.0, dx)
        assert lattice.index(2, 1) == 1 * lattice.nx + 2

    def test_single_particle(self):
        lattice = build_lattice(0.1, 0.1, 1.0)
        assert lattice.n_particles == 1
        np.testing.assert_array_equal(lattice.positions, [[0.0, 0.0]])

    def test_positions_read_only(self):
        """생성 후 격자는 변경 불가."""
        lattice = build_lattice(1.0, 1.0, 0.5)
        with pytest.raises(ValueError):
            lattice.positions[0, 0] = 1.0

    def test_points_3d_padding(self):
        lattice = build_lattice(1.0, 1.0, 0.5)
        points = lattice.points_3d()
        assert points.shape == (lattice.n_particles, 3)
        np.testing.assert_array_equal(points[:, :2], lattice.positions)
        assert np.all(points[:, 2] == 0.0)

    def test_idempotent(self):
        """같은 입력 → 같은 격자."""
        a = build_lattice(2.0, 1.5, 0.1)
        b = build_lattice(2.0, 1.5, 0.1)
        assert (a.nx, a.ny) == (b.nx, b.ny)
        np.testing.assert_array_equal(a.positions, b.positions)


class TestLatticeValidation:
    """잘못된 입력은 격자 생성 전에 거부."""

    @pytest.mark.parametrize("lx, ly, dx", [
        (1.0, 1.0, 0.0),
        (-1.0, 1.0, 0.1),
        (1.0, 0.0, 0.1),
        (1.0, 1.0, -0.5),
        (float("nan"), 1.0, 0.1),
        (1.0, float("inf"), 0.1),
    ])
    def test_invalid_raises(self, lx, ly, dx):
        with pytest.raises(InvalidParameterError):
            build_lattice(lx, ly, dx)

    def test_reports_all_offending_parameters(self):
        with pytest.raises(InvalidParameterError) as exc_info:
            build_lattice(-1.0, 1.0, 0.0)
        assert set(exc_info.value.parameters) == {"lx", "dx"}
