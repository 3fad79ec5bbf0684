"""
Triangle entity and its per-triangle attribute.

A triangle stores its normal as data; it is never recomputed from the
vertices unless the caller asks for ``winding_normal()`` or builds the
triangle with ``from_vertices``.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from meshful.geometry.vec3 import ZERO, Vec3, cross, diff, dot


@dataclass(frozen=True)
class Color:
    """Diffuse RGB colour, components in 0..1 (OBJ/MTL ``Kd``)."""
    red: float
    green: float
    blue: float


@dataclass(frozen=True)
class RawAttribute:
    """Raw 16-bit value from the binary STL attribute byte count slot."""
    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"STL attribute must fit in 16 bits, got {self.value}")


Attribute = Union[Color, RawAttribute]


@dataclass(frozen=True)
class Triangle:
    """Three ordered vertices, a stored normal and an optional attribute.

    Attributes:
        vertices: (v0, v1, v2); the order defines the winding
        normal: normal as stored by the source (may disagree with winding)
        attribute: None, a Color (OBJ/MTL) or a RawAttribute (binary STL)
    """
    vertices: Tuple[Vec3, Vec3, Vec3]
    normal: Vec3 = ZERO
    attribute: Optional[Attribute] = None

    def __post_init__(self) -> None:
        vertices = tuple(self.vertices)
        if len(vertices) != 3:
            raise ValueError(f"Triangle needs exactly 3 vertices, got {len(vertices)}")
        object.__setattr__(self, 'vertices', vertices)

    @classmethod
    def from_vertices(
        cls,
        v0: Vec3,
        v1: Vec3,
        v2: Vec3,
        attribute: Optional[Attribute] = None,
    ) -> 'Triangle':
        """Build a triangle whose normal follows the vertex winding."""
        triangle = cls(vertices=(v0, v1, v2), attribute=attribute)
        return cls(vertices=triangle.vertices, normal=triangle.winding_normal(),
                   attribute=attribute)

    @property
    def color(self) -> Optional[Color]:
        return self.attribute if isinstance(self.attribute, Color) else None

    @property
    def raw_attribute(self) -> int:
        """Value for the binary STL attribute slot (0 unless RawAttribute)."""
        if isinstance(self.attribute, RawAttribute):
            return self.attribute.value
        return 0

    def signed_volume(self) -> float:
        """Signed volume of the tetrahedron spanned by the triangle and the origin.

        Summed over a closed, consistently wound mesh this gives the enclosed
        volume. Individual terms may be negative.
        """
        v0, v1, v2 = self.vertices
        return dot(v0, cross(v1, v2)) / 6.0

    def area(self) -> float:
        """Surface area: half the magnitude of (v0 - v1) x (v0 - v2)."""
        v0, v1, v2 = self.vertices
        return 0.5 * cross(diff(v0, v1), diff(v0, v2)).length()

    def winding_normal(self) -> Vec3:
        """Unit normal implied by the vertex order; zero if degenerate."""
        v0, v1, v2 = self.vertices
        n = cross(diff(v1, v0), diff(v2, v0))
        length = n.length()
        if length == 0.0 or not math.isfinite(length):
            return ZERO
        return Vec3(n.x / length, n.y / length, n.z / length)
