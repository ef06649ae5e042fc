"""Core data structures for the pre-damage model."""

from .particles import Lattice, build_lattice, lattice_dimensions
from .bonds import BondList, count_bonds_per_particle
from .neighbor import CellGrid, NEIGHBOR_METHODS, enumerate_bonds
from .damage import DamageStatistics, PreDamageResult

__all__ = [
    "Lattice",
    "build_lattice",
    "lattice_dimensions",
    "BondList",
    "count_bonds_per_particle",
    "CellGrid",
    "NEIGHBOR_METHODS",
    "enumerate_bonds",
    "DamageStatistics",
    "PreDamageResult",
]
