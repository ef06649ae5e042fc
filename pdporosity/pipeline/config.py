"""시뮬레이션 설정 — Pydantic 모델 + TOML 로드.

범위 검사는 Pydantic이 아니라 validate_parameters()가 담당한다.
범위를 벗어난 값은 모두 InvalidParameterError로 보고된다.
"""

import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field

from ..peridynamics.validation import validate_parameters


class LatticeConfig(BaseModel):
    """격자 설정."""

    lx: float = 1.0
    ly: float = 1.0
    dx: float = 0.05


class BondConfig(BaseModel):
    """본드 탐색 설정."""

    horizon_factor: float = 3.0
    method: Literal["brute", "grid", "taichi"] = "grid"
    backend: Literal["cpu", "cuda", "vulkan", "auto"] = "cpu"


class DamageConfig(BaseModel):
    """Pre-damage (균일 기공률) 설정."""

    phi: float = 0.1
    seed: Optional[int] = None


class OutputConfig(BaseModel):
    """출력 설정."""

    output_dir: str = "."
    open_viewer: bool = False


class SimulationConfig(BaseModel):
    """최상위 시뮬레이션 설정."""

    lattice: LatticeConfig = Field(default_factory=LatticeConfig)
    bonds: BondConfig = Field(default_factory=BondConfig)
    damage: DamageConfig = Field(default_factory=DamageConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def from_toml(cls, path: str | Path) -> "SimulationConfig":
        """TOML 파일에서 설정 로드.

        Args:
            path: TOML 파일 경로

        Returns:
            SimulationConfig 인스턴스
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data)

    @classmethod
    def default(cls) -> "SimulationConfig":
        """기본 설정 반환."""
        return cls()

    @classmethod
    def from_parameters(
        cls,
        lx: float,
        ly: float,
        dx: float,
        phi: float,
        m: float,
        **overrides,
    ) -> "SimulationConfig":
        """평면 파라미터 (Lx, Ly, dx, phi, m)로부터 설정 생성.

        Args:
            overrides: method, backend, seed, output_dir, open_viewer
        """
        return cls(
            lattice=LatticeConfig(lx=lx, ly=ly, dx=dx),
            bonds=BondConfig(
                horizon_factor=m,
                method=overrides.get("method", "grid"),
                backend=overrides.get("backend", "cpu"),
            ),
            damage=DamageConfig(phi=phi, seed=overrides.get("seed")),
            output=OutputConfig(
                output_dir=str(overrides.get("output_dir", ".")),
                open_viewer=overrides.get("open_viewer", False),
            ),
        )

    def validate_parameters(self):
        """물리 파라미터 범위 검증.

        Raises:
            InvalidParameterError: 범위를 벗어난 파라미터
        """
        validate_parameters(
            self.lattice.lx,
            self.lattice.ly,
            self.lattice.dx,
            self.damage.phi,
            self.bonds.horizon_factor,
        )
