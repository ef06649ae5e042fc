"""Regular 2D particle lattice for peridynamic pre-damage models."""

import logging
import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from ..validation import validate_lattice

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Lattice:
    """Immutable regular grid of particles.

    Particles are stored row-major: index = row * nx + col, with the column
    advancing along x and the row advancing along y.

    Attributes:
        lx: Domain length in x
        ly: Domain length in y
        dx: Grid spacing (particle separation)
        nx: Number of particles along x
        ny: Number of particles along y
        positions: (n_particles, 2) reference coordinates, read-only
    """

    lx: float
    ly: float
    dx: float
    nx: int
    ny: int
    positions: np.ndarray

    @property
    def n_particles(self) -> int:
        return self.nx * self.ny

    def index(self, col: int, row: int) -> int:
        """Linear particle index of grid cell (col, row)."""
        return row * self.nx + col

    def points_3d(self) -> np.ndarray:
        """Positions padded to 3D with z = 0 (VTK is always 3D)."""
        points = np.zeros((self.n_particles, 3), dtype=np.float64)
        points[:, :2] = self.positions
        return points


def lattice_dimensions(lx: float, ly: float, dx: float) -> Tuple[int, int]:
    """Number of particles along each axis.

    nx = floor(lx / dx) + 1, ny = floor(ly / dx) + 1. A domain shorter than
    dx still gets a single row/column.

    Args:
        lx: Domain length in x
        ly: Domain length in y
        dx: Grid spacing

    Returns:
        (nx, ny)
    """
    validate_lattice(lx, ly, dx)
    nx = int(math.floor(lx / dx)) + 1
    ny = int(math.floor(ly / dx)) + 1
    return nx, ny


def build_lattice(lx: float, ly: float, dx: float) -> Lattice:
    """Build a regular grid of particles starting at the origin.

    Args:
        lx: Domain length in x (> 0)
        ly: Domain length in y (> 0)
        dx: Grid spacing (> 0)

    Returns:
        Lattice with nx * ny particles at (col * dx, row * dx)

    Raises:
        InvalidParameterError: Non-positive or non-finite input
    """
    nx, ny = lattice_dimensions(lx, ly, dx)

    # col * dx, row * dx per particle (no linspace: positions must be exact)
    cols = np.arange(nx, dtype=np.float64) * dx
    rows = np.arange(ny, dtype=np.float64) * dx
    positions = np.empty((nx * ny, 2), dtype=np.float64)
    positions[:, 0] = np.tile(cols, ny)
    positions[:, 1] = np.repeat(rows, nx)
    positions.setflags(write=False)

    logger.info("Building grid: nx=%d, ny=%d, total particles N=%d", nx, ny, nx * ny)
    return Lattice(lx=lx, ly=ly, dx=dx, nx=nx, ny=ny, positions=positions)
