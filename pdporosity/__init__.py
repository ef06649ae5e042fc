"""2D peridynamic porosity pre-damage generator.

Builds a regular particle lattice, enumerates bonds inside the horizon,
breaks bonds at random to model pre-existing porosity, and writes the
resulting damage field as a VTK point cloud for ParaView.

    from pdporosity import SimulationConfig, run_simulation

    cfg = SimulationConfig.from_parameters(lx=1.0, ly=1.0, dx=0.05, phi=0.1, m=3.0)
    result = run_simulation(cfg)
    print(result.realized_porosity, result.output_path)
"""

from .pipeline.config import SimulationConfig
from .pipeline.simulation import SimulationResult, run_simulation

__version__ = "0.1.0"

__all__ = [
    "SimulationConfig",
    "SimulationResult",
    "run_simulation",
]
