"""
Wavefront OBJ reader and OBJ + MTL writer.

Reading understands ``v`` and triangular ``f`` lines (``f 1 2 3``,
``f 1/1/1 2/2/2 3/3/3``, ``f 1//1 ...``, negative indices), plus
``mtllib``/``usemtl`` when a material table is available. Everything else
(``vn``, ``vt``, ``o``, ``g``, ``s``) is skipped.

Writing de-duplicates vertex positions and groups faces by colour, one
``usemtl`` block per colour, with the colours written to a companion MTL
file. Triangles without a colour share a grey default material.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Tuple, Union

from meshful.errors import OBJParseError
from meshful.geometry.mesh import Mesh
from meshful.geometry.triangle import Color, Triangle
from meshful.geometry.vec3 import Vec3
from meshful.logging_config import timed

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

OBJ_HEADER = "# meshful OBJ export\n\n"
MTL_HEADER = "# meshful MTL export\n\n"
DEFAULT_COLOR = (0.3, 0.3, 0.3)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------

def _parse_floats(tokens: Sequence[str], line_number: int) -> Tuple[float, float, float]:
    try:
        x, y, z = (float(t) for t in tokens)
    except ValueError as exc:
        raise OBJParseError(line_number, f"invalid number: {exc}") from exc
    return x, y, z


def _parse_vertex(tokens: List[str], line_number: int) -> Vec3:
    # v 0.000000 10.000000 0.000000
    if len(tokens) != 4:
        raise OBJParseError(line_number, "incorrect number of tokens in the vertex line")
    return Vec3(*_parse_floats(tokens[1:], line_number))


def _resolve_index(token: str, n_vertices: int, line_number: int) -> int:
    # 1, 1/1, 1/1/1 or 1//1: only the position index matters
    try:
        number = int(token.split('/')[0])
    except ValueError as exc:
        raise OBJParseError(line_number, f"invalid vertex index {token!r}") from exc

    index = number - 1 if number > 0 else n_vertices + number
    if number == 0 or not 0 <= index < n_vertices:
        raise OBJParseError(line_number, f"vertex index {number} out of range")
    return index


def _parse_face(
    tokens: List[str],
    vertices: List[Vec3],
    color: Optional[Color],
    line_number: int,
) -> Triangle:
    if len(tokens) != 4:
        raise OBJParseError(line_number, "incorrect number of tokens in the face line")
    v0, v1, v2 = (vertices[_resolve_index(t, len(vertices), line_number)]
                  for t in tokens[1:])
    return Triangle.from_vertices(v0, v1, v2, attribute=color)


def read_mtl(stream: TextIO) -> Dict[str, Color]:
    """Parse ``newmtl`` / ``Kd`` pairs from an MTL stream."""
    materials: Dict[str, Color] = {}
    current: Optional[str] = None

    for line_number, line in enumerate(stream, start=1):
        tokens = line.split()
        if not tokens or tokens[0].startswith('#'):
            continue
        if tokens[0] == 'newmtl':
            if len(tokens) < 2:
                raise OBJParseError(line_number, "newmtl without a name")
            current = ' '.join(tokens[1:])
        elif tokens[0] == 'Kd':
            if current is None:
                raise OBJParseError(line_number, "Kd before newmtl")
            if len(tokens) != 4:
                raise OBJParseError(line_number, "incorrect number of tokens in the Kd line")
            materials[current] = Color(*_parse_floats(tokens[1:], line_number))

    return materials


def read_obj(stream: TextIO, materials: Optional[Dict[str, Color]] = None) -> Mesh:
    """Read an OBJ text stream into a Mesh.

    Args:
        stream: Text stream
        materials: Material name -> Color; faces after ``usemtl name`` get that
            colour. Without a table, faces carry no attribute.

    Raises:
        OBJParseError: malformed vertex or face line
    """
    vertices: List[Vec3] = []
    faces: List[Triangle] = []
    color: Optional[Color] = None
    materials = materials or {}

    for line_number, line in enumerate(stream, start=1):
        tokens = line.split()
        if not tokens or tokens[0].startswith('#'):
            continue

        keyword = tokens[0]
        if keyword == 'v':
            vertices.append(_parse_vertex(tokens, line_number))
        elif keyword == 'f':
            faces.append(_parse_face(tokens, vertices, color, line_number))
        elif keyword == 'usemtl':
            name = ' '.join(tokens[1:])
            color = materials.get(name)
            if color is None and materials:
                logger.warning("Line %d: unknown material %r", line_number, name)

    logger.debug("OBJ: %d vertices, %d faces", len(vertices), len(faces))
    return Mesh(tuple(faces))


def _mtllib_names(path: Path) -> List[str]:
    names = []
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            tokens = line.split()
            if tokens and tokens[0] == 'mtllib':
                names.extend(tokens[1:])
    return names


@timed(operation="Reading OBJ")
def read_obj_file(filepath: PathLike) -> Mesh:
    """Read an OBJ file, loading colours from its ``mtllib`` files if present."""
    path = Path(filepath)

    materials: Dict[str, Color] = {}
    for name in _mtllib_names(path):
        mtl_path = path.parent / name
        if mtl_path.exists():
            with open(mtl_path, 'r', encoding='utf-8') as f:
                materials.update(read_mtl(f))
        else:
            logger.warning("Material library not found: %s", mtl_path)

    with open(path, 'r', encoding='utf-8') as f:
        mesh = read_obj(f, materials=materials)

    logger.info("Loaded %s: %d triangles", path, len(mesh))
    return mesh


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _format_vertex(vertex: Vec3) -> str:
    return f"v {vertex.x:f} {vertex.y:f} {vertex.z:f}\n"


def _format_face(indices: Sequence[int]) -> str:
    return f"f {indices[0]} {indices[1]} {indices[2]}\n"


def _format_color(color: Optional[Color]) -> str:
    if color is None:
        return ""
    return f"Kd {color.red:f} {color.green:f} {color.blue:f}"


def write_obj(
    mesh: Mesh,
    stream: TextIO,
    mtl_name: Optional[str] = None,
    default_color: Sequence[float] = DEFAULT_COLOR,
) -> List[str]:
    """Write mesh geometry as OBJ.

    Args:
        mesh: Mesh to write
        stream: Text stream for the OBJ
        mtl_name: File name for an ``mtllib`` line (omitted if None)
        default_color: Kd for triangles without a colour

    Returns:
        Lines for the companion MTL file (see ``write_mtl``)
    """
    vertex_numbers: Dict[str, int] = {}
    vertex_lines: List[str] = []
    # colour line -> face lines; dicts keep first-seen order
    face_groups: Dict[str, List[str]] = {}

    for triangle in mesh.triangles:
        color_str = _format_color(triangle.color)
        group = face_groups.setdefault(color_str, [])

        face = []
        for vertex in triangle.vertices:
            v_str = _format_vertex(vertex)
            number = vertex_numbers.get(v_str)
            if number is None:
                vertex_lines.append(v_str)
                number = len(vertex_lines)
                vertex_numbers[v_str] = number
            face.append(number)

        group.append(_format_face(face))

    stream.write(OBJ_HEADER)
    if mtl_name:
        stream.write(f"mtllib {mtl_name}\n")
    stream.writelines(vertex_lines)

    mtl_lines: List[str] = []
    for counter, (color_str, faces) in enumerate(face_groups.items(), start=1):
        if not color_str:
            color_str = _format_color(Color(*default_color))
        material = f"mtl{counter}"
        mtl_lines.extend([f"newmtl {material}\n", color_str + "\n", "\n"])

        stream.write(f"usemtl {material}\n")
        stream.writelines(faces)

    logger.debug("OBJ: %d vertices, %d faces, %d materials",
                 len(vertex_lines), len(mesh), len(face_groups))
    return mtl_lines


def write_mtl(mtl_lines: Sequence[str], stream: TextIO) -> None:
    stream.write(MTL_HEADER)
    stream.writelines(mtl_lines)


@timed(operation="Writing OBJ")
def write_obj_file(
    filepath: PathLike,
    mesh: Mesh,
    write_materials: bool = True,
    default_color: Sequence[float] = DEFAULT_COLOR,
) -> Optional[Path]:
    """Write ``filepath`` and, unless disabled, ``<stem>.mtl`` next to it.

    Returns:
        Path of the MTL file, or None when materials are not written
    """
    path = Path(filepath)
    mtl_path = path.with_suffix('.mtl') if write_materials else None

    with open(path, 'w', encoding='utf-8') as f:
        mtl_lines = write_obj(mesh, f,
                              mtl_name=mtl_path.name if mtl_path else None,
                              default_color=default_color)

    if mtl_path is not None:
        with open(mtl_path, 'w', encoding='utf-8') as f:
            write_mtl(mtl_lines, f)

    logger.info("Saved %s: %d triangles", path, len(mesh))
    return mtl_path
