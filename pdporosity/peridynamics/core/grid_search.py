"""Grid-based bond search on Taichi kernels."""

import logging

import numpy as np
import taichi as ti

from .neighbor import bin_particles, sort_pairs
from .. import runtime

logger = logging.getLogger(__name__)


@ti.data_oriented
class TaichiBondSearch:
    """Parallel cell-linked list bond search.

    Particles are binned on the host (same binning as the numpy grid path);
    the pair test runs in two kernels. The first counts, for every particle i,
    the neighbours j > i inside the horizon; the second writes them into the
    slots given by the prefix sum of those counts. Each particle only touches
    its own count and its own output slots, so no atomics are needed.
    """

    def __init__(
        self,
        positions: np.ndarray,
        horizon: float,
        backend: runtime.Backend = runtime.Backend.CPU,
    ):
        """Initialize bond search.

        Args:
            positions: (n_particles, 2) particle coordinates
            horizon: Peridynamics horizon delta
            backend: Taichi backend for the kernels
        """
        runtime.init(backend)

        self.positions = np.array(positions, dtype=np.float64, order="C")
        self.n_particles = int(self.positions.shape[0])
        self.horizon = float(horizon)
        self.delta2 = self.horizon * self.horizon

        grid = bin_particles(self.positions, self.horizon)
        self.grid_dims = grid.dims
        self.cell_coords = np.ascontiguousarray(grid.cell_coords, dtype=np.int32)
        self.cell_start = np.ascontiguousarray(grid.cell_start, dtype=np.int32)
        self.cell_count = np.ascontiguousarray(grid.cell_count, dtype=np.int32)
        self.sorted_indices = np.ascontiguousarray(grid.sorted_indices, dtype=np.int32)

    @ti.kernel
    def _count_half_neighbors(
        self,
        positions: ti.types.ndarray(dtype=ti.f64, ndim=2),
        cell_coords: ti.types.ndarray(dtype=ti.i32, ndim=2),
        cell_start: ti.types.ndarray(dtype=ti.i32, ndim=1),
        cell_count: ti.types.ndarray(dtype=ti.i32, ndim=1),
        sorted_indices: ti.types.ndarray(dtype=ti.i32, ndim=1),
        n_particles: ti.i32,
        n_cx: ti.i32,
        n_cy: ti.i32,
        delta2: ti.f64,
        counts: ti.types.ndarray(dtype=ti.i32, ndim=1),
    ):
        """Count neighbours j > i of each particle."""
        for i in range(n_particles):
            cx = cell_coords[i, 0]
            cy = cell_coords[i, 1]
            count = 0
            for di in range(-1, 2):
                for dj in range(-1, 2):
                    ncx = cx + di
                    ncy = cy + dj
                    if ncx >= 0 and ncx < n_cx and ncy >= 0 and ncy < n_cy:
                        cell = ncx * n_cy + ncy
                        start = cell_start[cell]
                        for k in range(start, start + cell_count[cell]):
                            j = sorted_indices[k]
                            if j > i:
                                ddx = positions[j, 0] - positions[i, 0]
                                ddy = positions[j, 1] - positions[i, 1]
                                if ddx * ddx + ddy * ddy <= delta2:
                                    count += 1
            counts[i] = count

    @ti.kernel
    def _fill_half_neighbors(
        self,
        positions: ti.types.ndarray(dtype=ti.f64, ndim=2),
        cell_coords: ti.types.ndarray(dtype=ti.i32, ndim=2),
        cell_start: ti.types.ndarray(dtype=ti.i32, ndim=1),
        cell_count: ti.types.ndarray(dtype=ti.i32, ndim=1),
        sorted_indices: ti.types.ndarray(dtype=ti.i32, ndim=1),
        n_particles: ti.i32,
        n_cx: ti.i32,
        n_cy: ti.i32,
        delta2: ti.f64,
        offsets: ti.types.ndarray(dtype=ti.i32, ndim=1),
        pairs: ti.types.ndarray(dtype=ti.i32, ndim=2),
    ):
        """Write (i, j) pairs into the slots starting at offsets[i]."""
        for i in range(n_particles):
            cx = cell_coords[i, 0]
            cy = cell_coords[i, 1]
            slot = offsets[i]
            for di in range(-1, 2):
                for dj in range(-1, 2):
                    ncx = cx + di
                    ncy = cy + dj
                    if ncx >= 0 and ncx < n_cx and ncy >= 0 and ncy < n_cy:
                        cell = ncx * n_cy + ncy
                        start = cell_start[cell]
                        for k in range(start, start + cell_count[cell]):
                            j = sorted_indices[k]
                            if j > i:
                                ddx = positions[j, 0] - positions[i, 0]
                                ddy = positions[j, 1] - positions[i, 1]
                                if ddx * ddx + ddy * ddy <= delta2:
                                    pairs[slot, 0] = i
                                    pairs[slot, 1] = j
                                    slot += 1

    def search(self) -> np.ndarray:
        """Run the kernels and return bond pairs.

        Returns:
            (n_bonds, 2) int64 index pairs in lexicographic order
        """
        n_cx, n_cy = self.grid_dims
        counts = np.zeros(self.n_particles, dtype=np.int32)
        self._count_half_neighbors(
            self.positions, self.cell_coords, self.cell_start, self.cell_count,
            self.sorted_indices, self.n_particles, n_cx, n_cy, self.delta2, counts,
        )

        n_bonds = int(counts.sum())
        logger.debug("taichi bond search: %d bonds over %dx%d cells", n_bonds, n_cx, n_cy)
        if n_bonds == 0:
            return np.empty((0, 2), dtype=np.int64)

        offsets = np.zeros(self.n_particles, dtype=np.int32)
        offsets[1:] = np.cumsum(counts)[:-1]
        pairs = np.zeros((n_bonds, 2), dtype=np.int32)
        self._fill_half_neighbors(
            self.positions, self.cell_coords, self.cell_start, self.cell_count,
            self.sorted_indices, self.n_particles, n_cx, n_cy, self.delta2,
            offsets, pairs,
        )
        return sort_pairs(pairs.astype(np.int64))
