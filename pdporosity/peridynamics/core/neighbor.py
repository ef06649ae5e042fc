"""Bond enumeration within the peridynamic horizon.

Two CPU paths produce the same bond set:

- ``brute``: every unordered pair (i, j), i < j, is tested exactly once.
- ``grid``: uniform cell-linked list, only the 3x3 cell neighbourhood of each
  particle is tested.

A third path, ``taichi``, runs the grid pair test as parallel kernels
(see grid_search.py).

The bond predicate is always evaluated in squared form,
``dx*dx + dy*dy <= delta*delta`` with ``(dx, dy) = x_j - x_i``, so every path
agrees on pairs sitting exactly at the horizon.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .bonds import BondList, count_bonds_per_particle
from .particles import Lattice
from ..validation import InvalidParameterError, validate_horizon_factor

logger = logging.getLogger(__name__)

NEIGHBOR_METHODS = ("brute", "grid", "taichi")
TAICHI_BACKENDS = ("cpu", "cuda", "vulkan", "auto")


@dataclass(frozen=True, eq=False)
class CellGrid:
    """Particles binned into square cells of size >= horizon.

    Attributes:
        cell_size: Cell edge length
        dims: (cells along x, cells along y)
        cell_coords: (n_particles, 2) cell coordinates of each particle
        cell_start: Start of each cell in sorted_indices (prefix sum)
        cell_count: Number of particles per cell
        sorted_indices: Particle indices grouped by cell
    """

    cell_size: float
    dims: Tuple[int, int]
    cell_coords: np.ndarray
    cell_start: np.ndarray
    cell_count: np.ndarray
    sorted_indices: np.ndarray

    @property
    def total_cells(self) -> int:
        return self.dims[0] * self.dims[1]

    def linear(self, cx: int, cy: int) -> int:
        return cx * self.dims[1] + cy

    def members(self, cell: int) -> np.ndarray:
        start = self.cell_start[cell]
        return self.sorted_indices[start:start + self.cell_count[cell]]


def bin_particles(positions: np.ndarray, horizon: float) -> CellGrid:
    """Sort particles into a uniform cell grid.

    Cell size is slightly larger than the horizon so that every neighbour of
    a particle lies in its own or an adjacent cell. The cell size is doubled
    until the grid has at most 4 cells per particle.

    Args:
        positions: (n_particles, 2) particle coordinates
        horizon: Peridynamics horizon

    Returns:
        CellGrid
    """
    n = positions.shape[0]
    origin = positions.min(axis=0)
    extent = positions.max(axis=0) - origin

    max_cells = max(1, 4 * n)
    cell_size = max(horizon * 1.01, float(extent.max()) / max_cells)
    while True:
        # per-axis count clamped so the product stays finite for tiny horizons
        per_axis = np.minimum(np.floor(extent / cell_size) + 1, max_cells + 1)
        if int(np.prod(per_axis)) <= max_cells:
            break
        cell_size *= 2.0

    coords = np.floor((positions - origin) / cell_size).astype(np.int64)
    dims = (int(coords[:, 0].max()) + 1, int(coords[:, 1].max()) + 1)

    linear = coords[:, 0] * dims[1] + coords[:, 1]
    sorted_indices = np.argsort(linear, kind="stable")
    cell_count = np.bincount(linear, minlength=dims[0] * dims[1])
    cell_start = np.zeros_like(cell_count)
    cell_start[1:] = np.cumsum(cell_count)[:-1]

    logger.debug("cell grid: %dx%d cells, cell size %.6g", dims[0], dims[1], cell_size)
    return CellGrid(
        cell_size=cell_size,
        dims=dims,
        cell_coords=coords,
        cell_start=cell_start,
        cell_count=cell_count,
        sorted_indices=sorted_indices,
    )


def brute_force_pairs(positions: np.ndarray, delta2: float) -> np.ndarray:
    """All pairs (i, j), i < j, with squared distance <= delta2.

    Each row i is compared against every j > i once; rows come out in
    lexicographic order.

    Args:
        positions: (n_particles, 2) particle coordinates
        delta2: Squared horizon

    Returns:
        (n_bonds, 2) int64 index pairs
    """
    n = positions.shape[0]
    chunks = []
    for i in range(n - 1):
        diff = positions[i + 1:] - positions[i]
        dist_sq = diff[:, 0] * diff[:, 0] + diff[:, 1] * diff[:, 1]
        js = np.flatnonzero(dist_sq <= delta2) + (i + 1)
        if js.size:
            chunk = np.empty((js.size, 2), dtype=np.int64)
            chunk[:, 0] = i
            chunk[:, 1] = js
            chunks.append(chunk)

    if not chunks:
        return np.empty((0, 2), dtype=np.int64)
    return np.concatenate(chunks)


def grid_pairs(positions: np.ndarray, horizon: float, delta2: float) -> np.ndarray:
    """Same bond set as brute_force_pairs, using a cell-linked list.

    Args:
        positions: (n_particles, 2) particle coordinates
        horizon: Peridynamics horizon (cell size reference)
        delta2: Squared horizon

    Returns:
        (n_bonds, 2) int64 index pairs in lexicographic order
    """
    grid = bin_particles(positions, horizon)
    n_cx, n_cy = grid.dims
    chunks = []

    for cell in np.flatnonzero(grid.cell_count):
        cx, cy = divmod(int(cell), n_cy)
        members = grid.members(cell)

        candidates = []
        for di in range(-1, 2):
            for dj in range(-1, 2):
                nx_, ny_ = cx + di, cy + dj
                if 0 <= nx_ < n_cx and 0 <= ny_ < n_cy:
                    candidates.append(grid.members(grid.linear(nx_, ny_)))
        candidates = np.concatenate(candidates)

        # (members, candidates) block, x_j - x_i as in the brute-force scan
        diff = positions[candidates][None, :, :] - positions[members][:, None, :]
        dist_sq = diff[..., 0] * diff[..., 0] + diff[..., 1] * diff[..., 1]
        mask = (dist_sq <= delta2) & (candidates[None, :] > members[:, None])

        a, b = np.nonzero(mask)
        if a.size:
            chunks.append(np.column_stack([members[a], candidates[b]]).astype(np.int64))

    if not chunks:
        return np.empty((0, 2), dtype=np.int64)
    return sort_pairs(np.concatenate(chunks))


def sort_pairs(pairs: np.ndarray) -> np.ndarray:
    """Sort pairs lexicographically by (i, j)."""
    order = np.lexsort((pairs[:, 1], pairs[:, 0]))
    return pairs[order]


def enumerate_bonds(
    lattice: Lattice,
    horizon_factor: float,
    method: str = "grid",
    backend: str = "cpu",
) -> BondList:
    """Find all bonds of a lattice within delta = horizon_factor * dx.

    Args:
        lattice: Particle lattice
        horizon_factor: Horizon factor m (> 0)
        method: "brute", "grid" or "taichi"
        backend: Taichi backend for method="taichi" ("cpu", "cuda", "vulkan"
            or "auto"); ignored by the numpy paths

    Returns:
        BondList with pairs and per-particle bond counts

    Raises:
        InvalidParameterError: m <= 0, unknown method or unknown backend
    """
    validate_horizon_factor(horizon_factor)
    if method not in NEIGHBOR_METHODS:
        raise InvalidParameterError(
            f"unknown neighbor method '{method}'",
            parameters=("method",),
            value=method,
            suggestion=f"use one of {', '.join(NEIGHBOR_METHODS)}",
        )
    if backend not in TAICHI_BACKENDS:
        raise InvalidParameterError(
            f"unknown taichi backend '{backend}'",
            parameters=("backend",),
            value=backend,
            suggestion=f"use one of {', '.join(TAICHI_BACKENDS)}",
        )

    delta = horizon_factor * lattice.dx
    delta2 = delta * delta
    positions = lattice.positions

    logger.info("Computing neighbors (method=%s, delta=%.6g)...", method, delta)
    if method == "brute":
        pairs = brute_force_pairs(positions, delta2)
    elif method == "grid":
        pairs = grid_pairs(positions, delta, delta2)
    else:
        from .grid_search import TaichiBondSearch
        from ..runtime import Backend

        pairs = TaichiBondSearch(positions, delta, backend=Backend(backend)).search()

    total_bonds = count_bonds_per_particle(pairs, lattice.n_particles)
    logger.info("Total bonds (before damage): %d", pairs.shape[0])

    pairs.setflags(write=False)
    total_bonds.setflags(write=False)
    return BondList(
        pairs=pairs,
        total_bonds=total_bonds,
        horizon=delta,
        horizon_factor=horizon_factor,
    )
