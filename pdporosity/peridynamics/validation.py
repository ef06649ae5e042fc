"""입력 파라미터 검증 유틸리티.

격자 크기, 격자 간격, 기공률, horizon 계수의 유효성을 검사한다.
격자를 만들기 전에 모든 위반 사항을 한 번에 보고한다.
"""

import logging
import math
from typing import List, Tuple

logger = logging.getLogger(__name__)


# ───────────────── 커스텀 예외 ─────────────────


class InvalidParameterError(ValueError):
    """시뮬레이션 입력 파라미터 오류.

    Attributes:
        parameters: 문제가 된 파라미터 이름들
        value: 전달된 값 (파라미터가 하나일 때)
        suggestion: 수정 제안
    """

    def __init__(
        self,
        message: str,
        parameters: Tuple[str, ...] = (),
        value=None,
        suggestion: str = "",
    ):
        self.parameters = tuple(parameters)
        self.value = value
        self.suggestion = suggestion
        full_msg = f"[parameter error] {message}"
        if suggestion:
            full_msg += f" -> {suggestion}"
        super().__init__(full_msg)


class BondCountMismatchError(RuntimeError):
    """본드 수 교차 검증 실패.

    pre-damage 단계에서 실제로 검사한 본드와 BondList의 입자별 본드 수
    (total_bonds)가 맞지 않을 때. 맞지 않으면 damage가 1을 넘을 수 있다.

    Attributes:
        enumerated: sum(total_bonds) / 2
        examined: pre-damage 단계에서 검사한 본드 수
        particles: 입자별 본드 수가 어긋난 입자 인덱스
    """

    def __init__(self, enumerated: int, examined: int, particles: Tuple[int, ...] = ()):
        self.enumerated = enumerated
        self.examined = examined
        self.particles = tuple(particles)
        message = f"[bond count mismatch] enumerated={enumerated}, examined={examined}"
        if self.particles:
            shown = ", ".join(str(i) for i in self.particles[:10])
            more = " ..." if len(self.particles) > 10 else ""
            message += f", per-particle mismatch at [{shown}{more}]"
        super().__init__(message)


# ───────────────── 개별 검증 ─────────────────


def _check_positive(name: str, value: float) -> str:
    if not math.isfinite(value):
        return f"{name}={value} is not a finite number"
    if value <= 0.0:
        return f"{name}={value} must be strictly positive"
    return ""


def validate_lattice(lx: float, ly: float, dx: float):
    """도메인 크기와 격자 간격 검증.

    Raises:
        InvalidParameterError: lx, ly, dx 중 하나라도 0 이하이거나 유한하지 않음
    """
    _raise_if_any(
        [("lx", lx, _check_positive("lx", lx)),
         ("ly", ly, _check_positive("ly", ly)),
         ("dx", dx, _check_positive("dx", dx))],
        suggestion="domain extents and spacing must be > 0",
    )


def validate_horizon_factor(m: float):
    """horizon 계수 m (delta = m*dx) 검증."""
    _raise_if_any(
        [("m", m, _check_positive("m", m))],
        suggestion="typical peridynamic horizons use m ~ 3",
    )


def validate_porosity(phi: float):
    """기공률 phi 검증 (0 <= phi <= 1)."""
    problem = ""
    if not math.isfinite(phi) or phi < 0.0 or phi > 1.0:
        problem = f"phi={phi} must lie in [0, 1]"
    _raise_if_any([("phi", phi, problem)], suggestion="phi is a bond-breakage fraction")


def validate_parameters(lx: float, ly: float, dx: float, phi: float, m: float):
    """전체 시뮬레이션 파라미터 검증.

    위반 사항을 모두 모아 하나의 InvalidParameterError로 보고한다.

    Args:
        lx: x 방향 도메인 길이
        ly: y 방향 도메인 길이
        dx: 격자 간격
        phi: 목표 기공률 [0, 1]
        m: horizon 계수

    Raises:
        InvalidParameterError: 하나 이상의 파라미터가 범위를 벗어남
    """
    checks = [
        ("lx", lx, _check_positive("lx", lx)),
        ("ly", ly, _check_positive("ly", ly)),
        ("dx", dx, _check_positive("dx", dx)),
        ("m", m, _check_positive("m", m)),
    ]
    if not math.isfinite(phi) or phi < 0.0 or phi > 1.0:
        checks.append(("phi", phi, f"phi={phi} must lie in [0, 1]"))
    _raise_if_any(checks)


def _raise_if_any(checks: List[Tuple[str, float, str]], suggestion: str = ""):
    failed = [(name, value, msg) for name, value, msg in checks if msg]
    if not failed:
        return

    names = tuple(name for name, _, _ in failed)
    message = "; ".join(msg for _, _, msg in failed)
    value = failed[0][1] if len(failed) == 1 else None
    logger.debug("invalid parameters: %s", names)
    raise InvalidParameterError(message, parameters=names, value=value, suggestion=suggestion)
