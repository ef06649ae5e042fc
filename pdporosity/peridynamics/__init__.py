"""Bond-based peridynamic lattice and uniform-porosity pre-damage model."""

from .core.particles import Lattice, build_lattice, lattice_dimensions
from .core.bonds import BondList
from .core.neighbor import enumerate_bonds
from .core.damage import (
    PreDamageResult,
    assign_pre_damage,
    compute_damage_field,
    damage_probability,
)
from .validation import InvalidParameterError, BondCountMismatchError, validate_parameters

__all__ = [
    "Lattice",
    "build_lattice",
    "lattice_dimensions",
    "BondList",
    "enumerate_bonds",
    "PreDamageResult",
    "assign_pre_damage",
    "compute_damage_field",
    "damage_probability",
    "InvalidParameterError",
    "BondCountMismatchError",
    "validate_parameters",
]
