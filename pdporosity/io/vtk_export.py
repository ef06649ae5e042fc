"""VTK 내보내기 — 격자 + damage 필드를 ParaView 호환 포인트 클라우드로 저장.

VTK legacy ASCII POLYDATA (.vtk) 형식:

    # vtk DataFile Version 3.0
    <title>
    ASCII
    DATASET POLYDATA
    POINTS <N> float          x y 0.0 (N줄)
    VERTICES <N> <2N>         1 <index> (입자당 단일점 셀)
    POINT_DATA <N>
    SCALARS damage float 1
    LOOKUP_TABLE default      damage (N줄)

세 블록 모두 격자 생성 순서를 따른다. 실수는 소수점 6자리 고정소수점.

사용 예:
    from pdporosity.io import export_point_cloud_vtk
    export_point_cloud_vtk("porosity_Lx1_phi10.vtk", lattice.points_3d(), damage)

참고문헌:
- VTK File Formats: https://vtk.org/wp-content/uploads/2015/04/file-formats.pdf
"""

import logging
from pathlib import Path

import numpy as np

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Peridynamic porous pre-damage"


class VTKExportError(OSError):
    """출력 파일을 열거나 쓸 수 없음.

    Attributes:
        path: 출력 대상 경로
        reason: 원인 (OS 오류 메시지)
    """

    def __init__(self, path, reason: str = ""):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"[VTK export error] could not write {self.path}: {reason}")


def output_filename(lx: float, phi: float) -> str:
    """파라미터로부터 결정적 출력 파일명 생성.

    lx와 phi*100은 반올림이 아닌 정수 절삭. 절삭 결과가 같은 서로 다른
    파라미터는 같은 파일명을 가진다.

    Args:
        lx: x 방향 도메인 길이
        phi: 목표 기공률

    Returns:
        "porosity_Lx<int(lx)>_phi<int(phi*100)>.vtk"
    """
    return f"porosity_Lx{int(lx)}_phi{int(phi * 100)}.vtk"


def export_point_cloud_vtk(
    filename: str | Path,
    points: np.ndarray,
    damage: np.ndarray,
    title: str = DEFAULT_TITLE,
) -> Path:
    """입자 위치와 damage 필드를 VTK POLYDATA 포인트 클라우드로 내보내기.

    Args:
        filename: 출력 파일 경로 (.vtk)
        points: 입자 좌표 (n, 2) 또는 (n, 3); 2D는 z = 0으로 패딩
        damage: 입자별 damage (n,)
        title: 헤더 두 번째 줄

    Returns:
        저장된 파일 경로

    Raises:
        ValueError: points와 damage 길이 불일치
        VTKExportError: 파일을 열거나 쓸 수 없음
    """
    filepath = Path(filename)
    points = np.asarray(points, dtype=np.float64)
    damage = np.asarray(damage, dtype=np.float64)

    n_points = len(points)
    if damage.shape != (n_points,):
        raise ValueError(
            f"damage 길이 불일치: points {n_points}개, damage shape {damage.shape}"
        )

    # 2D 좌표를 3D로 패딩 (VTK는 항상 3D)
    if points.ndim == 2 and points.shape[1] == 2:
        points_3d = np.zeros((n_points, 3), dtype=np.float64)
        points_3d[:, :2] = points
    else:
        points_3d = points

    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="ascii", newline="\n") as f:
            f.write("# vtk DataFile Version 3.0\n")
            f.write(f"{title}\n")
            f.write("ASCII\n")
            f.write("DATASET POLYDATA\n")

            # ─── Points ───
            f.write(f"POINTS {n_points} float\n")
            f.writelines(f"{x:.6f} {y:.6f} {z:.6f}\n" for x, y, z in points_3d)

            # ─── 입자당 단일점 vertex 셀 ───
            f.write(f"VERTICES {n_points} {2 * n_points}\n")
            f.writelines(f"1 {i}\n" for i in range(n_points))

            # ─── PointData ───
            f.write(f"POINT_DATA {n_points}\n")
            f.write("SCALARS damage float 1\n")
            f.write("LOOKUP_TABLE default\n")
            f.writelines(f"{d:.6f}\n" for d in damage)
    except OSError as e:
        raise VTKExportError(filepath, str(e)) from e

    logger.info("VTK file written to: %s", filepath)
    return filepath
