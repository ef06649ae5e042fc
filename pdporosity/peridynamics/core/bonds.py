"""Bond list for peridynamics using a flat (i, j) pair array."""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class BondList:
    """Bond connectivity of a lattice.

    Each bond is stored once as an unordered pair with i < j. Pairs are kept in
    lexicographic order, which is the order a brute-force i < j scan visits
    them.

    Attributes:
        pairs: (n_bonds, 2) particle index pairs, i < j
        total_bonds: (n_particles,) number of bonds incident to each particle
        horizon: Peridynamics horizon delta = m * dx
        horizon_factor: Horizon factor m
    """

    pairs: np.ndarray
    total_bonds: np.ndarray
    horizon: float
    horizon_factor: float

    @property
    def n_bonds(self) -> int:
        return int(self.pairs.shape[0])

    @property
    def n_particles(self) -> int:
        return int(self.total_bonds.shape[0])

    def neighbors_of(self, particle_idx: int) -> np.ndarray:
        """Sorted neighbor indices of a particle (CPU query)."""
        left = self.pairs[self.pairs[:, 1] == particle_idx, 0]
        right = self.pairs[self.pairs[:, 0] == particle_idx, 1]
        return np.sort(np.concatenate([left, right]))

    def isolated_particles(self) -> np.ndarray:
        """Indices of particles with no neighbor inside the horizon."""
        return np.flatnonzero(self.total_bonds == 0)


def count_bonds_per_particle(pairs: np.ndarray, n_particles: int) -> np.ndarray:
    """Count bonds per particle, incrementing both endpoints of every bond.

    Args:
        pairs: (n_bonds, 2) index pairs
        n_particles: Number of particles

    Returns:
        (n_particles,) int64 bond counts
    """
    if pairs.shape[0] == 0:
        return np.zeros(n_particles, dtype=np.int64)
    counts = np.bincount(pairs[:, 0], minlength=n_particles)
    counts += np.bincount(pairs[:, 1], minlength=n_particles)
    return counts.astype(np.int64)
