"""
Mesh entity: an ordered, immutable collection of triangles.

Queries are read-only linear passes over the triangle sequence.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple

from meshful.errors import EmptyMeshError
from meshful.geometry.triangle import Triangle
from meshful.geometry.vec3 import Vec3


@dataclass(frozen=True)
class Mesh:
    """Triangle soup. Order is preserved from the reader and kept on write."""
    triangles: Tuple[Triangle, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, 'triangles', tuple(self.triangles))

    @classmethod
    def from_triangles(cls, triangles: Iterable[Triangle]) -> 'Mesh':
        return cls(tuple(triangles))

    def __len__(self) -> int:
        return len(self.triangles)

    def __iter__(self) -> Iterator[Triangle]:
        return iter(self.triangles)

    def __getitem__(self, index: int) -> Triangle:
        return self.triangles[index]

    @property
    def is_empty(self) -> bool:
        return not self.triangles

    def bounds(self) -> Tuple[Vec3, Vec3]:
        """Minimum and maximum corners of the axis-aligned bounding box.

        Raises:
            EmptyMeshError: if the mesh has no triangles
        """
        if not self.triangles:
            raise EmptyMeshError("Bounding box of an empty mesh is undefined")

        first = self.triangles[0].vertices[0]
        min_x = max_x = first.x
        min_y = max_y = first.y
        min_z = max_z = first.z

        for triangle in self.triangles:
            for vert in triangle.vertices:
                if vert.x < min_x:
                    min_x = vert.x
                if vert.x > max_x:
                    max_x = vert.x
                if vert.y < min_y:
                    min_y = vert.y
                if vert.y > max_y:
                    max_y = vert.y
                if vert.z < min_z:
                    min_z = vert.z
                if vert.z > max_z:
                    max_z = vert.z

        return Vec3(min_x, min_y, min_z), Vec3(max_x, max_y, max_z)

    def bounding_box(self) -> Vec3:
        """Size of the axis-aligned bounding box (max - min per axis).

        Raises:
            EmptyMeshError: if the mesh has no triangles
        """
        low, high = self.bounds()
        return high - low

    def volume(self) -> float:
        """Sum of per-triangle signed volumes.

        Physically meaningful only for closed, consistently wound meshes.
        """
        return sum((t.signed_volume() for t in self.triangles), 0.0)

    def surface_area(self) -> float:
        return sum((t.area() for t in self.triangles), 0.0)
