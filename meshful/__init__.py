"""
meshful: triangle mesh interchange for binary STL and Wavefront OBJ/MTL.

Command line entry point is main.py.
"""

from meshful.errors import (
    ASCIINotSupportedError,
    EmptyMeshError,
    IncompleteHeaderError,
    MalformedRecordError,
    MeshError,
    OBJParseError,
    STLError,
    TooManyTrianglesError,
    TransportError,
    UnexpectedEOFError,
)
from meshful.geometry import (
    Color,
    Mesh,
    RawAttribute,
    Triangle,
    Vec3,
    calculate_mesh_statistics,
    cross,
    diff,
    dot,
)
from meshful.io import read_mesh, write_mesh
from meshful.io.stl import read_stl, write_stl
from meshful.io.stl_binary import decode_binary as decode
from meshful.io.stl_binary import encode_binary as encode
from meshful.logging_config import setup_logging, configure_default_logging

__version__ = "0.3.0"

__all__ = [
    "ASCIINotSupportedError",
    "EmptyMeshError",
    "IncompleteHeaderError",
    "MalformedRecordError",
    "MeshError",
    "OBJParseError",
    "STLError",
    "TooManyTrianglesError",
    "TransportError",
    "UnexpectedEOFError",
    "Color",
    "Mesh",
    "RawAttribute",
    "Triangle",
    "Vec3",
    "calculate_mesh_statistics",
    "cross",
    "diff",
    "dot",
    "decode",
    "encode",
    "read_mesh",
    "write_mesh",
    "read_stl",
    "write_stl",
    "setup_logging",
    "configure_default_logging",
]
