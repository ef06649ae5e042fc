"""ParaView 연동 — 출력 VTK 파일을 외부 뷰어로 열기.

선택 사항이다. 뷰어를 찾지 못하거나 실행에 실패해도 예외를 던지지 않고
경고만 남긴다 (이미 저장된 파일에는 영향 없음).
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PARAVIEW_DOWNLOAD_URL = "https://www.paraview.org/download/"

# Windows 표준 설치 경로
_WINDOWS_PARAVIEW_PATHS = [
    r"C:\Program Files\ParaView 6.0.1\bin\paraview.exe",
    r"C:\Program Files\ParaView\bin\paraview.exe",
    r"C:\Program Files (x86)\ParaView 6.0.1\bin\paraview.exe",
    r"C:\Program Files (x86)\ParaView\bin\paraview.exe",
]


def find_paraview() -> Optional[str]:
    """ParaView 실행 파일 탐색.

    PATH → (Windows) 표준 설치 경로 순서로 찾는다.

    Returns:
        실행 파일 경로 (없으면 None)
    """
    for name in ("paraview", "paraview.exe"):
        found = shutil.which(name)
        if found:
            return found

    if os.name == "nt":
        for candidate in _WINDOWS_PARAVIEW_PATHS:
            if Path(candidate).is_file():
                return candidate

    return None


def open_in_paraview(filename: str | Path) -> bool:
    """VTK 파일을 ParaView로 열기.

    Args:
        filename: 열 파일 경로

    Returns:
        뷰어 실행 성공 여부
    """
    filepath = Path(filename).resolve()
    executable = find_paraview()

    if executable is None:
        logger.warning(
            "ParaView를 찾을 수 없습니다. 직접 여세요: %s (다운로드: %s)",
            filepath, PARAVIEW_DOWNLOAD_URL,
        )
        return False

    try:
        subprocess.Popen([executable, str(filepath)])
    except OSError as e:
        logger.warning("ParaView 실행 실패 (%s): %s. 파일 위치: %s", executable, e, filepath)
        return False

    logger.info("Opening %s with ParaView...", filepath)
    return True
