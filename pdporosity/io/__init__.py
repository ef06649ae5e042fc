"""입출력 모듈 — VTK 내보내기 및 ParaView 연동."""

from .vtk_export import VTKExportError, export_point_cloud_vtk, output_filename
from .viewer import find_paraview, open_in_paraview

__all__ = [
    "VTKExportError",
    "export_point_cloud_vtk",
    "output_filename",
    "find_paraview",
    "open_in_paraview",
]
