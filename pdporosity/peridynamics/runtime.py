"""Taichi 런타임 초기화 중앙 관리.

본드 탐색 커널용. 프로세스당 1회 초기화를 보장하고,
본드 판정이 CPU 경로와 비트 단위로 같도록 fast_math를 끈다.
"""

import enum
import logging
from typing import Optional

import taichi as ti

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    """Taichi 백엔드 열거형."""
    CPU = "cpu"
    VULKAN = "vulkan"
    CUDA = "cuda"
    AUTO = "auto"


# 모듈 전역 상태
_initialized = False
_active_backend: Optional[Backend] = None


def init(backend: Backend = Backend.CPU) -> dict:
    """Taichi 런타임 초기화.

    프로세스당 1회만 실행된다. 중복 호출 시 기존 설정을 반환한다.
    정밀도는 항상 f64 (본드 판정 경계값 보존).

    Args:
        backend: 사용할 백엔드 (AUTO면 CUDA → Vulkan → CPU 폴백)

    Returns:
        초기화 정보 딕셔너리
    """
    global _initialized, _active_backend

    if _initialized:
        return {"backend": _active_backend.value, "already_initialized": True}

    if backend == Backend.AUTO:
        for try_backend in [Backend.CUDA, Backend.VULKAN, Backend.CPU]:
            try:
                _ti_init(try_backend)
                _active_backend = try_backend
                break
            except Exception as e:
                logger.debug(f"{try_backend.value} 백엔드 실패: {e}")
        else:
            logger.warning("모든 GPU 백엔드 실패, CPU 폴백")
            _ti_init(Backend.CPU)
            _active_backend = Backend.CPU
    else:
        _ti_init(backend)
        _active_backend = backend

    logger.info(f"Taichi 초기화: 백엔드={_active_backend.value}, 정밀도=f64")
    _initialized = True
    return {"backend": _active_backend.value, "already_initialized": False}


def get_backend() -> Optional[Backend]:
    """현재 활성 백엔드 반환."""
    return _active_backend


def is_initialized() -> bool:
    """초기화 여부 반환."""
    return _initialized


def reset():
    """테스트용: 전역 상태 리셋 (실제 ti.init은 되돌릴 수 없음)."""
    global _initialized, _active_backend
    _initialized = False
    _active_backend = None


def _ti_init(backend: Backend):
    arch = {
        Backend.CPU: ti.cpu,
        Backend.VULKAN: ti.vulkan,
        Backend.CUDA: ti.cuda,
    }[backend]
    ti.init(arch=arch, default_fp=ti.f64, fast_math=False)
    # 요청한 장치가 없으면 taichi는 조용히 CPU로 내려가므로 직접 확인
    active = ti.lang.impl.current_cfg().arch
    if active != arch:
        raise RuntimeError(f"{backend.value} 백엔드 사용 불가 (실제 arch: {active})")
