"""VTK 포인트 클라우드 내보내기 테스트."""

import pytest
import numpy as np

from pdporosity.io.vtk_export import (
    DEFAULT_TITLE,
    VTKExportError,
    export_point_cloud_vtk,
    output_filename,
)


class TestOutputFilename:
    """porosity_Lx<int(lx)>_phi<int(phi*100)>.vtk — 반올림 아닌 절삭."""

    def test_basic(self):
        assert output_filename(1.0, 0.1) == "porosity_Lx1_phi10.vtk"

    def test_truncation(self):
        assert output_filename(2.9, 0.25) == "porosity_Lx2_phi25.vtk"
        assert output_filename(0.5, 0.0) == "porosity_Lx0_phi0.vtk"
        assert output_filename(10.0, 1.0) == "porosity_Lx10_phi100.vtk"

    def test_floating_point_truncation(self):
        """0.57 * 100 = 56.999... → 56."""
        assert output_filename(1.0, 0.57) == "porosity_Lx1_phi56.vtk"


class TestExportPointCloudVTK:
    """export_point_cloud_vtk() 테스트."""

    def test_exact_layout(self, tmp_path):
        """2x2 격자 → 헤더/POINTS/VERTICES/POINT_DATA 줄 단위 일치."""
        points = np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        damage = np.array([0.25, 0.5, 0.0, 1.0])

        path = export_point_cloud_vtk(tmp_path / "out.vtk", points, damage)

        assert path == tmp_path / "out.vtk"
        lines = path.read_text().splitlines()
        assert lines == [
            "# vtk DataFile Version 3.0",
            DEFAULT_TITLE,
            "ASCII",
            "DATASET POLYDATA",
            "POINTS 4 float",
            "0.000000 0.000000 0.000000",
            "1.000000 0.000000 0.000000",
            "0.000000 1.000000 0.000000",
            "1.000000 1.000000 0.000000",
            "VERTICES 4 8",
            "1 0",
            "1 1",
            "1 2",
            "1 3",
            "POINT_DATA 4",
            "SCALARS damage float 1",
            "LOOKUP_TABLE default",
            "0.250000",
            "0.500000",
            "0.000000",
            "1.000000",
        ]

    def test_three_column_points_kept(self, tmp_path):
        points = np.array([[0.5, 0.25, 2.0]])
        path = export_point_cloud_vtk(tmp_path / "p.vtk", points, np.array([0.125]))
        lines = path.read_text().splitlines()
        assert lines[5] == "0.500000 0.250000 2.000000"
        assert lines[-1] == "0.125000"

    def test_custom_title(self, tmp_path):
        path = export_point_cloud_vtk(
            tmp_path / "t.vtk", np.zeros((1, 2)), np.zeros(1), title="test run",
        )
        assert path.read_text().splitlines()[1] == "test run"

    def test_six_decimal_fixed_point(self, tmp_path):
        path = export_point_cloud_vtk(
            tmp_path / "f.vtk", np.array([[0.1, 0.2]]), np.array([1.0 / 3.0]),
        )
        lines = path.read_text().splitlines()
        assert lines[5] == "0.100000 0.200000 0.000000"
        assert lines[-1] == "0.333333"

    def test_creates_parent_directories(self, tmp_path):
        target = tmp_path / "a" / "b" / "out.vtk"
        export_point_cloud_vtk(target, np.zeros((2, 2)), np.zeros(2))
        assert target.exists()

    def test_overwrites_existing(self, tmp_path):
        target = tmp_path / "out.vtk"
        target.write_text("old contents\n")
        export_point_cloud_vtk(target, np.zeros((1, 2)), np.zeros(1))
        assert target.read_text().startswith("# vtk DataFile Version 3.0")

    def test_length_mismatch(self, tmp_path):
        with pytest.raises(ValueError, match="damage"):
            export_point_cloud_vtk(tmp_path / "x.vtk", np.zeros((3, 2)), np.zeros(2))
        assert not (tmp_path / "x.vtk").exists()

    def test_unwritable_destination(self, tmp_path):
        """부모 경로가 파일이면 VTKExportError (OSError 하위 클래스)."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        target = blocker / "out.vtk"

        with pytest.raises(VTKExportError) as exc_info:
            export_point_cloud_vtk(target, np.zeros((1, 2)), np.zeros(1))

        assert isinstance(exc_info.value, OSError)
        assert exc_info.value.path == target
        assert str(target) in str(exc_info.value)
