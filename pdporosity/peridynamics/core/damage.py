"""Uniform-porosity pre-damage model for bond-based peridynamics.

Every bond breaks independently with the same probability

    d_phi = phi / phi_c

where phi is the target porosity and phi_c the critical porosity (fixed to
1.0 here). Local damage is the ratio of broken bonds to initial bonds:

    d(i) = Nb(i) / N(i)

with d = 0 meaning intact and d = 1 fully damaged. Particles without any
bond are undamaged.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .bonds import BondList, count_bonds_per_particle
from ..validation import BondCountMismatchError, InvalidParameterError, validate_porosity

logger = logging.getLogger(__name__)

CRITICAL_POROSITY = 1.0


@dataclass(frozen=True, eq=False)
class PreDamageResult:
    """Outcome of the random bond breakage.

    Attributes:
        broken_mask: (n_bonds,) True where the bond is broken
        broken_bonds: (n_particles,) broken bonds incident to each particle
        total_bond_count: Bonds examined during assignment
        broken_bond_count: Bonds marked broken
        d_phi: Breakage probability used
    """

    broken_mask: np.ndarray
    broken_bonds: np.ndarray
    total_bond_count: int
    broken_bond_count: int
    d_phi: float

    @property
    def realized_porosity(self) -> float:
        """Global broken / total bond ratio (0 without bonds)."""
        if self.total_bond_count == 0:
            return 0.0
        return self.broken_bond_count / self.total_bond_count


@dataclass(frozen=True)
class DamageStatistics:
    """Summary of a damage field."""

    minimum: float
    maximum: float
    mean: float


def damage_probability(phi: float, critical_porosity: float = CRITICAL_POROSITY) -> float:
    """Pre-damage index d_phi = phi / phi_c.

    Args:
        phi: Target porosity ratio in [0, 1]
        critical_porosity: Normalisation constant phi_c

    Returns:
        Bond breakage probability

    Raises:
        InvalidParameterError: phi outside [0, 1]
    """
    validate_porosity(phi)
    return phi / critical_porosity


def assign_pre_damage(
    bonds: BondList,
    d_phi: float,
    rng: Optional[np.random.Generator] = None,
) -> PreDamageResult:
    """Break bonds at random with probability d_phi each.

    One uniform draw r in [0, 1) is taken per bond, in bond order; the bond
    is broken iff r < d_phi. Decisions are final and independent, so the
    realized porosity only matches d_phi in expectation.

    The BondList is also checked for consistency: the endpoints of
    the pairs being drawn must reproduce total_bonds particle by particle.
    A BondList from enumerate_bonds always passes; a hand-built or altered
    one that fails would otherwise give damage outside [0, 1].

    Args:
        bonds: Enumerated bonds
        d_phi: Breakage probability in [0, 1]
        rng: Random generator (None: fresh nondeterministic generator)

    Returns:
        PreDamageResult

    Raises:
        InvalidParameterError: d_phi outside [0, 1]
        BondCountMismatchError: Examined bonds disagree with per-particle totals
    """
    if not 0.0 <= d_phi <= 1.0:
        raise InvalidParameterError(
            f"d_phi={d_phi} must lie in [0, 1]", parameters=("d_phi",), value=d_phi,
        )
    if rng is None:
        rng = np.random.default_rng()

    logger.info("Applying pre-damage (uniform porosity, d_phi=%.4f)...", d_phi)

    draws = rng.random(bonds.n_bonds)
    broken_mask = draws < d_phi
    total_bond_count = int(draws.shape[0])

    # endpoints of the bonds actually drawn vs. the per-particle totals the
    # damage ratio will divide by
    examined_per_particle = count_bonds_per_particle(bonds.pairs, bonds.n_particles)
    enumerated = int(bonds.total_bonds.sum()) // 2
    mismatched = np.flatnonzero(examined_per_particle != bonds.total_bonds)
    if enumerated != total_bond_count or mismatched.size:
        raise BondCountMismatchError(
            enumerated, total_bond_count, particles=tuple(int(i) for i in mismatched),
        )

    broken_pairs = bonds.pairs[broken_mask]
    broken_bonds = np.zeros(bonds.n_particles, dtype=np.int64)
    np.add.at(broken_bonds, broken_pairs[:, 0], 1)
    np.add.at(broken_bonds, broken_pairs[:, 1], 1)
    broken_bond_count = int(broken_pairs.shape[0])

    result = PreDamageResult(
        broken_mask=broken_mask,
        broken_bonds=broken_bonds,
        total_bond_count=total_bond_count,
        broken_bond_count=broken_bond_count,
        d_phi=d_phi,
    )
    logger.info("Broken bonds (after damage): %d", broken_bond_count)
    logger.info("Realized global porosity (bond-based) ~ %.4f", result.realized_porosity)
    return result


def compute_damage_field(total_bonds: np.ndarray, broken_bonds: np.ndarray) -> np.ndarray:
    """Local damage d(i) = broken(i) / total(i).

    Isolated particles (no bonds) get d = 0.

    Args:
        total_bonds: (n_particles,) initial bond counts
        broken_bonds: (n_particles,) broken bond counts

    Returns:
        (n_particles,) damage in [0, 1]
    """
    total_bonds = np.asarray(total_bonds)
    broken_bonds = np.asarray(broken_bonds)
    if total_bonds.shape != broken_bonds.shape:
        raise ValueError(
            f"shape mismatch: total {total_bonds.shape} vs broken {broken_bonds.shape}"
        )

    damage = np.zeros(total_bonds.shape, dtype=np.float64)
    mask = total_bonds > 0
    damage[mask] = broken_bonds[mask] / total_bonds[mask]
    return damage


def damage_statistics(damage: np.ndarray) -> DamageStatistics:
    """Min / max / mean of a damage field (zeros for an empty field)."""
    if damage.size == 0:
        return DamageStatistics(0.0, 0.0, 0.0)
    return DamageStatistics(
        minimum=float(damage.min()),
        maximum=float(damage.max()),
        mean=float(damage.mean()),
    )
