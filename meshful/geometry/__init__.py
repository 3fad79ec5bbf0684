"""
In-memory mesh model and geometric queries.
"""

from meshful.geometry.vec3 import Vec3, cross, diff, dot
from meshful.geometry.triangle import Attribute, Color, RawAttribute, Triangle
from meshful.geometry.mesh import Mesh
from meshful.geometry.mesh_stats import (
    BoundingBox,
    MeshStatistics,
    calculate_mesh_statistics,
)

__all__ = [
    "Vec3",
    "cross",
    "diff",
    "dot",
    "Attribute",
    "Color",
    "RawAttribute",
    "Triangle",
    "Mesh",
    "BoundingBox",
    "MeshStatistics",
    "calculate_mesh_statistics",
]
