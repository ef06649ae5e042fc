"""다공성 pre-damage 시뮬레이션 실행.

격자 생성 → 본드 탐색 → 무작위 본드 파괴 → damage 필드 → VTK 저장.
매 실행은 독립적이며 (난수 포함) 상태를 남기지 않는다.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from .config import SimulationConfig
from ..io.viewer import open_in_paraview
from ..io.vtk_export import export_point_cloud_vtk, output_filename
from ..peridynamics.core.bonds import BondList
from ..peridynamics.core.damage import (
    DamageStatistics,
    PreDamageResult,
    assign_pre_damage,
    compute_damage_field,
    damage_probability,
    damage_statistics,
)
from ..peridynamics.core.neighbor import enumerate_bonds
from ..peridynamics.core.particles import Lattice, build_lattice

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """시뮬레이션 실행 결과."""

    config: SimulationConfig
    lattice: Lattice
    bonds: BondList
    pre_damage: PreDamageResult
    damage: np.ndarray
    statistics: DamageStatistics
    output_path: Optional[Path]
    elapsed_time: float
    viewer_opened: bool = False

    @property
    def realized_porosity(self) -> float:
        return self.pre_damage.realized_porosity


def run_simulation(
    config: SimulationConfig,
    rng: Optional[np.random.Generator] = None,
    progress_callback: Optional[Callable[[str, dict], None]] = None,
    write_output: bool = True,
) -> SimulationResult:
    """Pre-damage 시뮬레이션 1회 실행.

    Args:
        config: 시뮬레이션 설정
        rng: 난수 생성기 (None이면 config.damage.seed로 생성, seed도 없으면 비결정적)
        progress_callback: 진행률 콜백 (stage, details)
        write_output: False면 VTK 파일을 쓰지 않음

    Returns:
        SimulationResult 객체

    Raises:
        InvalidParameterError: 파라미터 범위 오류 (격자 생성 전에 검사)
        VTKExportError: 출력 파일 쓰기 실패
    """
    def report(stage: str, message: str):
        if progress_callback:
            progress_callback(stage, {"message": message})

    config.validate_parameters()
    start = time.time()

    if rng is None:
        rng = np.random.default_rng(config.damage.seed)

    report("lattice", "격자 생성 중...")
    lattice = build_lattice(config.lattice.lx, config.lattice.ly, config.lattice.dx)

    report("bonds", f"입자 {lattice.n_particles}개 본드 탐색 중...")
    bonds = enumerate_bonds(
        lattice,
        config.bonds.horizon_factor,
        method=config.bonds.method,
        backend=config.bonds.backend,
    )

    report("pre-damage", f"본드 {bonds.n_bonds}개 무작위 파괴 중...")
    d_phi = damage_probability(config.damage.phi)
    pre_damage = assign_pre_damage(bonds, d_phi, rng)

    report("damage", "damage 필드 계산 중...")
    damage = compute_damage_field(bonds.total_bonds, pre_damage.broken_bonds)
    stats = damage_statistics(damage)
    logger.info(
        "Damage stats: min=%.3f, max=%.3f, mean=%.3f",
        stats.minimum, stats.maximum, stats.mean,
    )

    output_path = None
    viewer_opened = False
    if write_output:
        report("export", "VTK 저장 중...")
        filename = output_filename(config.lattice.lx, config.damage.phi)
        output_path = export_point_cloud_vtk(
            Path(config.output.output_dir) / filename,
            lattice.points_3d(),
            damage,
        )
        if config.output.open_viewer:
            viewer_opened = open_in_paraview(output_path)

    return SimulationResult(
        config=config,
        lattice=lattice,
        bonds=bonds,
        pre_damage=pre_damage,
        damage=damage,
        statistics=stats,
        output_path=output_path,
        elapsed_time=time.time() - start,
        viewer_opened=viewer_opened,
    )
