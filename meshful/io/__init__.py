"""
Mesh file formats.

``read_mesh`` / ``write_mesh`` pick the format from the file suffix
(``.stl`` or ``.obj``); the format modules can also be used directly on
streams.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

from meshful.geometry.mesh import Mesh
from meshful.io.obj import DEFAULT_COLOR, read_obj_file, write_obj_file
from meshful.io.stl import read_stl_file, write_stl_file

SUPPORTED_SUFFIXES = ('.stl', '.obj')


def _suffix(filepath: Union[str, Path]) -> str:
    suffix = Path(filepath).suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(
            f"Unsupported mesh format {suffix!r} for {str(filepath)!r}; "
            f"expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    return suffix


def read_mesh(filepath: Union[str, Path], strict: bool = False) -> Mesh:
    """Read an STL or OBJ file. ``strict`` applies to STL only."""
    if _suffix(filepath) == '.stl':
        return read_stl_file(filepath, strict=strict)
    return read_obj_file(filepath)


def write_mesh(
    filepath: Union[str, Path],
    mesh: Mesh,
    header: Optional[str] = None,
    write_materials: bool = True,
    default_color: Sequence[float] = DEFAULT_COLOR,
) -> None:
    """Write an STL or OBJ file.

    ``header`` applies to STL; ``write_materials`` and ``default_color`` to OBJ.
    """
    if _suffix(filepath) == '.stl':
        write_stl_file(filepath, mesh, header=header)
    else:
        write_obj_file(filepath, mesh, write_materials=write_materials,
                       default_color=default_color)
